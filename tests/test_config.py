import pytest

from marked_view.components.marked_directive import MarkedDirectiveFactory
from marked_view.config import MarkedConfig, Settings
from marked_view.services.marked_provider import MarkedProvider

ENV_VARS = [
    "MARKED_DATA_BASE_URL",
    "MARKED_DATA_PATH",
    "MARKED_HTTP_TIMEOUT",
    "MARKED_PRESET",
    "MARKED_ENABLED_RULES",
    "MARKED_DEFAULT_LANGUAGE",
    "MARKED_SHOW_EDITORS",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return tmp_path / ".env"


def test_defaults(clean_env):
    settings = Settings(env_path=clean_env)

    assert settings.data_base_url == ""
    assert settings.data_path == ""
    assert settings.http_timeout == 30.0
    assert settings.preset == "commonmark"
    assert settings.enabled_rules == ("table", "strikethrough")
    assert settings.default_language == "en"
    assert settings.show_editors is False


def test_environment_overrides(clean_env, monkeypatch):
    monkeypatch.setenv("MARKED_DATA_PATH", "docs/")
    monkeypatch.setenv("MARKED_HTTP_TIMEOUT", "5")
    monkeypatch.setenv("MARKED_ENABLED_RULES", "table")
    monkeypatch.setenv("MARKED_DEFAULT_LANGUAGE", "fr")
    monkeypatch.setenv("MARKED_SHOW_EDITORS", "yes")

    settings = Settings(env_path=clean_env)

    assert settings.data_path == "docs/"
    assert settings.http_timeout == 5.0
    assert settings.enabled_rules == ("table",)
    assert settings.default_language == "fr"
    assert settings.show_editors is True


def test_dotenv_file_is_loaded(clean_env, monkeypatch):
    # Registered with monkeypatch so the value load_dotenv writes is undone
    monkeypatch.setenv("MARKED_DEFAULT_LANGUAGE", "unset")
    monkeypatch.delenv("MARKED_DEFAULT_LANGUAGE")
    clean_env.write_text("MARKED_DEFAULT_LANGUAGE=de\n", encoding="utf-8")

    assert Settings(env_path=clean_env).default_language == "de"


def test_factory_from_settings(clean_env, monkeypatch):
    monkeypatch.setenv("MARKED_DATA_PATH", "docs/")
    monkeypatch.setenv("MARKED_DEFAULT_LANGUAGE", "fr")
    monkeypatch.setenv("MARKED_SHOW_EDITORS", "1")
    provider = MarkedProvider()

    factory = MarkedDirectiveFactory.from_settings(Settings(env_path=clean_env), provider=provider)

    assert provider.is_frozen
    assert factory.marked.data_path == "docs/"
    assert factory.data_file.resolve("intro.md") == "docs/intro.md"
    assert factory.locale.get().language == "fr"
    assert factory.editor_state.show_editors is True


def test_language_display_name():
    assert MarkedConfig.get_language_display_name("fr") == "Français"
    assert MarkedConfig.get_language_display_name("pt") == "pt"


def test_factory_from_settings_enables_configured_rules(clean_env, monkeypatch):
    monkeypatch.setenv("MARKED_ENABLED_RULES", "table")

    factory = MarkedDirectiveFactory.from_settings(Settings(env_path=clean_env))

    assert "<table>" in factory.marked("| a |\n|---|\n| 1 |\n")
    assert "<s>" not in factory.marked("~~gone~~")
