"""
Markdown rendering for Streamlit views with markdown-it-py.

Configure a :class:`MarkedProvider` once, then create directives through a
:class:`MarkedDirectiveFactory` or the :func:`render_marked` Streamlit component.
"""

from .components.marked_directive import (
    DirectiveAttributes,
    Element,
    MarkedDirective,
    MarkedDirectiveFactory,
    SourceMode,
    localize_filename,
)
from .services.marked_provider import MarkedConfigurationError, MarkedParser, MarkedProvider
from .services.scope import Scope

__version__ = "0.1.0"

__all__ = [
    'DirectiveAttributes',
    'Element',
    'MarkedConfigurationError',
    'MarkedDirective',
    'MarkedDirectiveFactory',
    'MarkedParser',
    'MarkedProvider',
    'Scope',
    'SourceMode',
    'localize_filename',
]
