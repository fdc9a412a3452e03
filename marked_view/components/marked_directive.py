# ABOUTME: The marked directive: renders markdown from an inline value, a URL or a localized file into an element.
# ABOUTME: Watches its source, re-renders on change, re-compiles bindings on demand and offers an edit affordance.

import asyncio
import logging
import textwrap
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Set

from jinja2 import TemplateError

from ..services.compiler import TemplateCompiler, unescape_bindings
from ..services.data_file import DEFAULT_TIMEOUT, DataFile, FileCallbacks
from ..services.editor import EditorSession, EditorState, MarkdownEditor
from ..services.locale import LocaleService
from ..services.marked_provider import MarkedConfigurationError, MarkedParser, MarkedProvider
from ..services.scope import Scope
from ..utils.alerts import Alerts

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"

EDITOR_TEMPLATE = (
    '{% if editor.should_show() %}'
    '<a class="marked-edit btn-floating btn-default btn" data-action="editor.open" '
    'style="position:absolute;top:0%;color:black;z-index:1000">'
    '<i class="fa fa-edit" style="color:black"></i>'
    '<span style="color:black">{{ localized_filename }}</span>'
    '</a>'
    '{% endif %}'
)


class SourceMode(Enum):
    """Where a directive gets its markdown from."""
    INLINE = "inline"
    REMOTE_URL = "remote_url"
    LOCALIZED_FILENAME = "localized_filename"
    STATIC = "static"


@dataclass
class DirectiveAttributes:
    """Attribute expressions given to the directive.

    ``marked``, ``opts``, ``src`` and ``filename`` are evaluated against the
    parent scope; ``compile`` against the directive's own scope.
    """
    marked: Optional[str] = None
    opts: Optional[str] = None
    compile: Optional[str] = None
    src: Optional[str] = None
    filename: Optional[str] = None

    @property
    def source_mode(self) -> SourceMode:
        if self.marked:
            return SourceMode.INLINE
        if self.src:
            return SourceMode.REMOTE_URL
        if self.filename:
            return SourceMode.LOCALIZED_FILENAME
        return SourceMode.STATIC


class Element:
    """The host element: initial text content plus the HTML written into it."""

    def __init__(self, text: str = ""):
        self.text = text
        self.html = ""
        self.appended: List[str] = []
        self.style: Dict[str, str] = {}

    def set_html(self, html: str):
        self.html = html
        self.appended = []

    def append(self, fragment: str):
        self.appended.append(fragment)

    @property
    def outer_html(self) -> str:
        return self.html + "".join(self.appended)


def localize_filename(filename: str, language: str) -> str:
    """Append ``.{language}.md`` unless the filename already ends in ``.md``."""
    if filename.endswith(MARKDOWN_SUFFIX):
        return filename
    return f"{filename}.{language}{MARKDOWN_SUFFIX}"


class EditorController:
    """Edit affordance exposed to the directive scope as ``editor``."""

    def __init__(self, directive: "MarkedDirective"):
        self._directive = directive
        self.loaded = False

    def should_show(self) -> bool:
        return bool(self._directive.editor_state.show_editors and self._directive.attrs.filename)

    def open(self) -> Optional[EditorSession]:
        directive = self._directive
        filename = directive.scope.get("localized_filename") or directive.current_source
        if not self.loaded:
            directive.alerts.alert(f"Can't edit {filename} yet, wait until it is loaded.")
            return None
        logger.debug(f"Opening editor for {filename}")
        return directive.markdown_editor.open(filename, directive.scope.get("data"))


class MarkedDirective:
    """One usage of the marked directive in a view.

    The source mode is fixed when the directive is created. Call :meth:`link`
    to start watching and :meth:`destroy` when the element goes away.
    """

    def __init__(
        self,
        marked: Optional[MarkedParser],
        element: Element,
        attrs: DirectiveAttributes,
        parent_scope: Scope,
        *,
        compiler: TemplateCompiler,
        data_file: DataFile,
        locale: LocaleService,
        markdown_editor: MarkdownEditor,
        editor_state: EditorState,
        alerts: Alerts,
    ):
        if marked is None:
            raise MarkedConfigurationError("marked parser is not available; check the provider configuration")
        self.marked = marked
        self.element = element
        self.attrs = attrs
        self.parent_scope = parent_scope
        self.compiler = compiler
        self.data_file = data_file
        self.locale = locale
        self.markdown_editor = markdown_editor
        self.editor_state = editor_state
        self.alerts = alerts

        self.source_mode = attrs.source_mode
        self.editor = EditorController(self)
        self.scope = parent_scope.new(isolate=True, editor=self.editor, localized_filename=None, data=None)
        self.current_text: Optional[str] = None
        self.current_source: Optional[str] = None
        self._linked_context: Optional[Dict[str, Any]] = None

        self._editor_link = compiler.compile(EDITOR_TEMPLATE)
        self._locale_listener: Optional[Callable[[Any], None]] = None
        self._deregistrations: List[Callable[[], None]] = []
        self._pending: Set[asyncio.Task] = set()
        self._callbacks = FileCallbacks(
            on_success=self._on_success,
            on_404=self._on_success,
            on_error=self._on_error,
            on_change=self._on_change,
        )

    @property
    def rendered_html(self) -> str:
        return self.element.html

    @property
    def locale_listener(self) -> Optional[Callable[[Any], None]]:
        return self._locale_listener

    def link(self) -> "MarkedDirective":
        self.element.style["position"] = "relative"
        self._bind_attributes()

        if self.source_mode is SourceMode.INLINE:
            self._watch("marked", lambda markdown, _old: self.set(markdown))
        elif self.source_mode is SourceMode.REMOTE_URL:
            self._watch("src", lambda src, _old: self._get_content(src))
        elif self.source_mode is SourceMode.LOCALIZED_FILENAME:
            self._watch("filename", lambda filename, _old: self._on_filename(filename))
        else:
            self.set(textwrap.dedent(self.element.text).strip())

        if self.scope.eval(self.attrs.compile):
            # Registered after the source watcher so a source change renders once per digest
            self._deregistrations.append(self.scope.watch(lambda _scope: self.parent_scope.context(), self._relink))

        logger.debug(f"Linked marked directive in {self.source_mode.value} mode")
        return self

    def _bind_attributes(self):
        for name in ("opts", "marked", "src", "filename"):
            expression = getattr(self.attrs, name)
            if not expression:
                continue

            def copy(value, _old, name=name):
                self.scope[name] = value

            self._deregistrations.append(self.parent_scope.watch(expression, copy))

    def _watch(self, name: str, listener: Callable[[Any, Any], None]):
        self._deregistrations.append(self.scope.watch(name, listener))

    def localize(self, filename: str) -> str:
        localized = localize_filename(filename, self.locale.get().language)
        self.scope["localized_filename"] = localized
        return localized

    def _on_filename(self, filename: Optional[str]):
        if self._locale_listener is not None:
            self.locale.off_change(self._locale_listener)
            self._locale_listener = None

        if filename is None:
            self.set("")
            return

        localized = self.localize(filename)
        if not filename.endswith(MARKDOWN_SUFFIX):

            def on_locale_change(_locale):
                self._get_content(self.localize(filename))

            self._locale_listener = on_locale_change
            self.locale.on_change(on_locale_change)

        self._get_content(localized)

    def _get_content(self, filename: Optional[str]):
        if filename is None:
            return
        self._cancel_pending()
        self.current_source = filename
        self.editor.loaded = False
        self.scope["data"] = None
        task = self.data_file.read(filename, self._callbacks)
        if task is not None:
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

    def _cancel_pending(self):
        for task in self._pending:
            task.cancel()
        if self._pending:
            logger.debug(f"Cancelled {len(self._pending)} superseded fetch(es)")
        self._pending.clear()

    async def settle(self):
        """Wait for fetches scheduled on the running event loop."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    def _on_success(self, content: str):
        self.editor.loaded = True
        self.scope["data"] = content
        self.set(content)

    def _on_error(self):
        self.alerts.alert(f"There was a problem loading {self.current_source} editor is disabled.")

    def _relink(self, context, _old_context):
        if self.current_text is None or context == self._linked_context:
            return
        self.set(self.current_text)

    def _on_change(self, markdown: str):
        self.set(markdown)
        self.scope["data"] = markdown

    def set(self, text: Any):
        """Render markdown into the element, replacing its content."""
        text = str(text or "")
        html = self.marked(text, self.scope.get("opts") or None)
        if self.scope.eval(self.attrs.compile):
            html = self._compile(html)
        self.element.set_html(html)

        if self.attrs.filename:
            self.element.append(self._editor_link(self.scope))
        self.current_text = text

    def _compile(self, html: str) -> str:
        self._linked_context = self.parent_scope.context()
        try:
            return self.compiler.compile(unescape_bindings(html))(self.parent_scope)
        except TemplateError as e:
            self.alerts.alert(f"There was a problem compiling {self.current_source or 'the markdown'}: {e}")
            return html

    def destroy(self):
        self._cancel_pending()
        if self._locale_listener is not None:
            self.locale.off_change(self._locale_listener)
            self._locale_listener = None
        for deregister in self._deregistrations:
            deregister()
        self._deregistrations.clear()
        self.data_file.release(self._callbacks)
        self.scope.destroy()


class MarkedDirectiveFactory:
    """Wires the parser and its collaborators together and creates directives."""

    def __init__(
        self,
        provider: MarkedProvider,
        *,
        data_file: Optional[DataFile] = None,
        locale: Optional[LocaleService] = None,
        markdown_editor: Optional[MarkdownEditor] = None,
        editor_state: Optional[EditorState] = None,
        alerts: Optional[Alerts] = None,
        compiler: Optional[TemplateCompiler] = None,
        base_url: str = "",
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.marked = provider.get()
        if self.marked is None:
            raise MarkedConfigurationError("marked parser is not available; check that markdown-it-py is installed")
        self.data_file = data_file or DataFile(base_url=base_url, data_path=self.marked.data_path, timeout=timeout)
        self.locale = locale or LocaleService()
        self.markdown_editor = markdown_editor or MarkdownEditor(self.data_file)
        self.editor_state = editor_state or EditorState()
        self.alerts = alerts or Alerts()
        self.compiler = compiler or TemplateCompiler(marked=self.marked)

    @classmethod
    def from_settings(cls, settings: Any, provider: Optional[MarkedProvider] = None, **kwargs) -> "MarkedDirectiveFactory":
        """
        Build a factory from :class:`marked_view.config.Settings`.

        Args:
            settings: Loaded settings.
            provider: Provider to use; a new one is created from the settings when omitted.
            **kwargs: Collaborators forwarded to the constructor.
        """
        if provider is None:
            provider = MarkedProvider(preset=settings.preset)
        if not provider.is_frozen:
            if settings.data_path:
                provider.set_data_path(settings.data_path)
            provider.set_enabled_rules(list(settings.enabled_rules))
        kwargs.setdefault("locale", LocaleService(settings.default_language))
        kwargs.setdefault("editor_state", EditorState(show_editors=settings.show_editors))
        return cls(provider, base_url=settings.data_base_url, timeout=settings.http_timeout, **kwargs)

    def create(self, element: Element, attrs: DirectiveAttributes, scope: Scope) -> MarkedDirective:
        """Create and link a directive for an element."""
        directive = MarkedDirective(
            self.marked,
            element,
            attrs,
            scope,
            compiler=self.compiler,
            data_file=self.data_file,
            locale=self.locale,
            markdown_editor=self.markdown_editor,
            editor_state=self.editor_state,
            alerts=self.alerts,
        )
        return directive.link()
