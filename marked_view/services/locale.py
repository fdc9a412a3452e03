# ABOUTME: Locale service tracking the active language and notifying subscribers on change.
# ABOUTME: Localized markdown files are re-fetched through the listeners registered here.

import logging
from dataclasses import dataclass
from typing import Callable, List

logger = logging.getLogger(__name__)

LocaleListener = Callable[["Locale"], None]


@dataclass(frozen=True)
class Locale:
    """The active locale."""
    language: str


class LocaleService:
    """Holds the current language and a registry of change listeners."""

    def __init__(self, language: str = "en"):
        self._locale = Locale(language)
        self._listeners: List[LocaleListener] = []

    def get(self) -> Locale:
        return self._locale

    def set_language(self, language: str):
        """Switch language and notify listeners if it actually changed."""
        if language == self._locale.language:
            return
        logger.info(f"Locale changed from {self._locale.language} to {language}")
        self._locale = Locale(language)
        for listener in list(self._listeners):
            listener(self._locale)

    def on_change(self, listener: LocaleListener):
        self._listeners.append(listener)

    def off_change(self, listener: LocaleListener):
        if listener in self._listeners:
            self._listeners.remove(listener)
        else:
            logger.debug("Tried to remove a locale listener that was not registered")

    @property
    def listener_count(self) -> int:
        return len(self._listeners)
