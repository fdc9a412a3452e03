# ABOUTME: Streamlit component putting the marked directive on a page, one directive per widget key.
# ABOUTME: Feeds arguments into the directive's parent scope on each rerun and renders the editor controls.

import logging
from typing import Any, Dict, Mapping, Optional

import streamlit as st

from ..config import Settings
from ..services.marked_provider import MarkedProvider
from ..services.scope import Scope
from ..utils.alerts import Alerts
from .marked_directive import DirectiveAttributes, Element, MarkedDirective, MarkedDirectiveFactory

logger = logging.getLogger(__name__)

SESSION_PREFIX = "marked_view_"


class StreamlitAlerts(Alerts):
    """Alerts shown as Streamlit warnings."""

    def alert(self, message: str):
        super().alert(message)
        st.warning(message)


@st.cache_resource
def get_default_provider() -> MarkedProvider:
    """Process-wide provider, configured from the environment and built once."""
    settings = Settings()
    provider = MarkedProvider(preset=settings.preset)
    provider.set_data_path(settings.data_path)
    provider.set_enabled_rules(list(settings.enabled_rules))
    provider.get()
    return provider


def get_session_factory() -> MarkedDirectiveFactory:
    """Directive factory for the current session; locale and editors stay per session."""
    key = f"{SESSION_PREFIX}factory"
    if key not in st.session_state:
        st.session_state[key] = MarkedDirectiveFactory.from_settings(
            Settings(), provider=get_default_provider(), alerts=StreamlitAlerts()
        )
    return st.session_state[key]


def render_marked(
    markdown: Optional[str] = None,
    *,
    key: str,
    src: Optional[str] = None,
    filename: Optional[str] = None,
    opts: Optional[Mapping[str, Any]] = None,
    compile: bool = False,
    context: Optional[Dict[str, Any]] = None,
    text: str = "",
    factory: Optional[MarkedDirectiveFactory] = None,
) -> MarkedDirective:
    """
    Render markdown through the marked directive.

    Exactly one of ``markdown``, ``src`` or ``filename`` is expected; with none of
    them the static ``text`` is rendered. The source chosen on the first call for
    a key stays in effect for that key.

    Args:
        markdown: Inline markdown.
        key: Widget key identifying the directive across reruns.
        src: URL (or path) of a markdown file.
        filename: Localized filename, resolved against the current language.
        opts: Per-directive parser options.
        compile: Evaluate template expressions in the rendered HTML against ``context``.
        context: Values visible to compiled content.
        text: Static markdown used when no source is given.
        factory: Factory to create the directive with; defaults to the session factory.

    Returns:
        The directive bound to ``key``.
    """
    state_key = f"{SESSION_PREFIX}{key}"
    values = dict(context or {})
    values.update({"markdown": markdown, "src": src, "filename": filename, "opts": opts})

    directive = st.session_state.get(state_key)
    if directive is None:
        factory = factory or get_session_factory()
        attrs = DirectiveAttributes(
            marked="markdown" if markdown is not None else None,
            opts="opts" if opts is not None else None,
            compile="true" if compile else None,
            src="src" if src is not None else None,
            filename="filename" if filename is not None else None,
        )
        directive = factory.create(Element(text), attrs, Scope(**values))
        st.session_state[state_key] = directive
        logger.info(f"Created marked directive '{key}' in {directive.source_mode.value} mode")
    else:
        directive.parent_scope.update(values)

    _render_editor(directive, key)
    st.markdown(directive.element.html, unsafe_allow_html=True)
    return directive


def _render_editor(directive: MarkedDirective, key: str):
    if not directive.editor.should_show():
        return

    filename = directive.scope.get("localized_filename")
    if st.button(f"✏️ {filename}", key=f"{key}_edit"):
        directive.editor.open()

    session = directive.markdown_editor.get_session(filename) if filename else None
    if session is None:
        return

    edited = st.text_area(f"Editing {filename}", value=session.content, key=f"{key}_editor_{filename}", height=300)
    session.change(edited)
    if st.button("Close editor", key=f"{key}_close"):
        directive.markdown_editor.close(filename)


def destroy_marked(key: str):
    """Tear down the directive stored under a key."""
    directive = st.session_state.pop(f"{SESSION_PREFIX}{key}", None)
    if directive is not None:
        directive.destroy()
