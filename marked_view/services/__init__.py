"""
Services backing the marked directive: parser provider, scopes, template compiler,
locale, data files and editors.
"""

from .compiler import TemplateCompiler
from .data_file import DataFile, FileCallbacks
from .editor import EditorSession, EditorState, MarkdownEditor
from .locale import Locale, LocaleService
from .marked_provider import MarkedConfigurationError, MarkedParser, MarkedProvider
from .scope import Scope, ScopeDigestError

__all__ = [
    'DataFile',
    'EditorSession',
    'EditorState',
    'FileCallbacks',
    'Locale',
    'LocaleService',
    'MarkdownEditor',
    'MarkedConfigurationError',
    'MarkedParser',
    'MarkedProvider',
    'Scope',
    'ScopeDigestError',
    'TemplateCompiler',
]
