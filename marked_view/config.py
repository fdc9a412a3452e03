import logging
import os
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).parent.parent
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _as_bool(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


class MarkedConfig:
    """Defaults for the marked parser and the demo page."""

    DEFAULT_PRESET = "commonmark"
    DEFAULT_LANGUAGE = "en"
    DEFAULT_ENABLED_RULES = ("table", "strikethrough")

    LANGUAGE_INFO = {
        "en": {"display_name": "English"},
        "fr": {"display_name": "Français"},
        "de": {"display_name": "Deutsch"},
        "es": {"display_name": "Español"},
    }

    @classmethod
    def get_language_display_name(cls, language: str) -> str:
        """Get display name for a language code."""
        return cls.LANGUAGE_INFO.get(language, {}).get("display_name", language)


class Settings:
    """Settings read from the environment (and a .env file, if present)."""

    def __init__(self, env_path: Optional[Path] = None):
        load_dotenv(env_path or ROOT_DIR / ".env")
        self._load_settings()

    def _load_settings(self):
        # Where markdown files come from
        self.data_base_url = os.getenv("MARKED_DATA_BASE_URL", "")
        self.data_path = os.getenv("MARKED_DATA_PATH", "")
        self.http_timeout = float(os.getenv("MARKED_HTTP_TIMEOUT", "30"))

        # Parser
        self.preset = os.getenv("MARKED_PRESET", MarkedConfig.DEFAULT_PRESET)
        rules = os.getenv("MARKED_ENABLED_RULES")
        if rules is None:
            self.enabled_rules: Tuple[str, ...] = MarkedConfig.DEFAULT_ENABLED_RULES
        else:
            self.enabled_rules = tuple(r.strip() for r in rules.split(",") if r.strip())

        # View
        self.default_language = os.getenv("MARKED_DEFAULT_LANGUAGE", MarkedConfig.DEFAULT_LANGUAGE)
        self.show_editors = _as_bool(os.getenv("MARKED_SHOW_EDITORS"))


def configure_logging(level: int = logging.INFO):
    """Configure root logging the same way for the app and scripts."""
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler()
        ]
    )
