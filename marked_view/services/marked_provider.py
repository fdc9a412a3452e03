# -*- coding: utf-8 -*-
"""
ABOUTME: Configuration provider for the markdown-it parser used by the marked directive
ABOUTME: Stores default options, renderer rule overrides and the data path, then builds the parser once
"""

import importlib
import logging
import types
from typing import Any, Callable, Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)

# Key under which the renderer travels inside the options mapping
RENDERER_OPTION = "renderer"


class MarkedConfigurationError(RuntimeError):
    """Raised when the parser is missing or configured after it was built."""


class MarkedParser:
    """The configured parser handed out by :class:`MarkedProvider`.

    Calling the instance renders Markdown to HTML with the current global
    options, optionally overlaid with per-call options.
    """

    def __init__(self, md: Any, data_path: str = ""):
        self._md = md
        self.data_path = data_path

    def __call__(self, text: str, opts: Optional[Mapping[str, Any]] = None) -> str:
        if not opts:
            return self._md.render(text)

        overrides = dict(opts)
        renderer = overrides.pop(RENDERER_OPTION, None)
        saved_options = self._md.options
        saved_renderer = self._md.renderer
        self._md.set({**saved_options, **overrides})
        if renderer is not None:
            self._md.renderer = renderer
        try:
            return self._md.render(text)
        finally:
            self._md.options = saved_options
            self._md.renderer = saved_renderer

    def set_options(self, options: Mapping[str, Any]):
        """Apply options to every future render call.

        A ``renderer`` entry replaces the parser's renderer; everything else is
        merged into the markdown-it options.
        """
        options = dict(options)
        renderer = options.pop(RENDERER_OPTION, None)
        if renderer is not None:
            self._md.renderer = renderer
        self._md.set({**self._md.options, **options})

    @property
    def renderer(self) -> Any:
        return self._md.renderer

    @property
    def options(self) -> Mapping[str, Any]:
        return self._md.options

    @property
    def md(self) -> Any:
        """The underlying ``MarkdownIt`` instance."""
        return self._md


class MarkedProvider:
    """Holds process-wide parser configuration and builds the parser lazily.

    All ``set_*`` calls must happen before the first :meth:`get`; afterwards the
    provider is frozen and further configuration raises
    :class:`MarkedConfigurationError`.
    """

    def __init__(
        self,
        module_name: str = "markdown_it",
        implementation: Optional[Any] = None,
        preset: str = "commonmark",
    ):
        """
        Initialize the provider.

        Args:
            module_name: Module imported first to obtain the parser implementation.
            implementation: Fallback implementation used when the import fails.
            preset: markdown-it preset the parser is created with.
        """
        self.module_name = module_name
        self.implementation = implementation
        self.preset = preset
        self.defaults: Dict[str, Any] = {}
        self.renderer_overrides: Dict[str, Callable[..., str]] = {}
        self.data_path = ""
        self.enabled_rules: List[str] = []
        self._instance: Optional[MarkedParser] = None
        self._frozen = False

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def _ensure_configurable(self, what: str):
        if self._frozen:
            logger.error(f"Cannot set {what}: the marked parser has already been built")
            raise MarkedConfigurationError(
                f"Cannot set {what} after the marked parser has been built"
            )

    def set_renderer(self, overrides: Mapping[str, Callable[..., str]]):
        """
        Replace the renderer rule overrides.

        Args:
            overrides: Mapping of markdown-it rule name (``link_open``, ``fence``,
                ``code_inline``...) to a function ``(renderer, tokens, idx, options, env)``.
        """
        self._ensure_configurable("renderer overrides")
        self.renderer_overrides = dict(overrides or {})

    def set_options(self, options: Mapping[str, Any]):
        """Replace the default parser options."""
        self._ensure_configurable("default options")
        self.defaults = dict(options or {})

    def set_data_path(self, path: str):
        self._ensure_configurable("data path")
        self.data_path = path or ""

    def set_enabled_rules(self, rules: List[str]):
        """Replace the extra markdown-it rules (``table``, ``strikethrough``) to enable."""
        self._ensure_configurable("enabled rules")
        self.enabled_rules = list(rules or [])

    def _resolve_implementation(self) -> Optional[Any]:
        try:
            return importlib.import_module(self.module_name)
        except ImportError:
            logger.warning(f"Could not import {self.module_name}, trying the registered implementation")
            return self.implementation

    def get(self) -> Optional[MarkedParser]:
        """
        Return the configured parser, building it on first call.

        Returns:
            The cached MarkedParser, or None when no parser implementation is available.
        """
        if self._instance is not None:
            return self._instance

        implementation = self._resolve_implementation()
        if implementation is None:
            logger.error("marked_view Error: markdown-it is not installed. See installation instructions.")
            return None

        md = implementation.MarkdownIt(self.preset)
        if self.enabled_rules:
            md.enable(self.enabled_rules)

        renderer = type(md.renderer)(md)
        for name, override in self.renderer_overrides.items():
            renderer.rules[name] = types.MethodType(override, renderer)

        self.defaults[RENDERER_OPTION] = renderer

        parser = MarkedParser(md, data_path=self.data_path)
        parser.set_options(self.defaults)

        logger.info(
            f"Built marked parser (preset={self.preset}, overrides={sorted(self.renderer_overrides)}, "
            f"data_path='{self.data_path}')"
        )
        self._instance = parser
        self._frozen = True
        return parser
