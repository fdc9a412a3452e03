"""
Template compilation for rendered Markdown fragments.

The directive hands freshly rendered HTML to :class:`TemplateCompiler` when its
``compile`` flag is on, so Jinja expressions written inside the Markdown
(``{{ user.name }}``, ``{% if ... %}``) are evaluated against a scope.
"""
import logging
import re
from typing import Any, Callable, Mapping, Optional

from jinja2 import Environment, TemplateError
from markupsafe import Markup

from .scope import Scope

logger = logging.getLogger(__name__)

LinkFunction = Callable[[Scope], str]

BINDING_PATTERN = re.compile(r"\{\{.*?\}\}|\{%.*?%\}", re.DOTALL)


def unescape_bindings(html: str) -> str:
    """Undo the HTML escaping markdown-it applies inside ``{{ ... }}`` and ``{% ... %}`` blocks."""
    return BINDING_PATTERN.sub(lambda match: Markup(match.group(0)).unescape(), html)


class TemplateCompiler:
    """Compiles HTML fragments into link functions bound late to a scope."""

    def __init__(self, environment: Optional[Environment] = None, marked: Optional[Callable[..., str]] = None):
        """
        Args:
            environment: Jinja environment to compile with. Defaults to an autoescaping one
                that keeps the trailing newline markdown-it emits.
            marked: Parser registered as the ``marked`` template filter.
        """
        self.environment = environment or Environment(autoescape=True, keep_trailing_newline=True)
        if marked is not None:
            self.register_marked_filter(marked)

    def register_marked_filter(self, marked: Callable[..., str]):
        """Expose the parser as ``{{ text | marked }}`` inside templates."""

        def marked_filter(text: Any, opts: Optional[Mapping[str, Any]] = None) -> Markup:
            return Markup(marked(str(text or ""), opts))

        self.environment.filters["marked"] = marked_filter

    def compile(self, fragment: str) -> LinkFunction:
        """
        Compile a fragment once; the returned link function renders it for any scope.

        Raises:
            jinja2.TemplateError: If the fragment is not a valid template.
        """
        try:
            template = self.environment.from_string(fragment)
        except TemplateError as e:
            logger.error(f"Failed to compile fragment: {e}")
            raise

        def link(scope: Scope) -> str:
            return template.render(scope.context())

        return link
