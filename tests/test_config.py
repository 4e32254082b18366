from pathlib import Path

import pytest
from pydantic import ValidationError

from yalla_traffic import Settings

ENV_VARS = [
    "GEMINI_API_KEY",
    "GOOGLE_API_KEY",
    "OPENAI_API_KEY",
    "OPENAI_BASE_URL",
    "YALLA_LLM_PROVIDER",
    "YALLA_MODEL",
    "TOMTOM_API_KEY",
    "GOOGLE_PLACES_API_KEY",
    "YALLA_TOOL_TIMEOUT",
    "YALLA_HTTP_TIMEOUT",
    "YALLA_MAX_TOOL_CYCLES",
    "YALLA_MAX_HISTORY_TURNS",
    "YALLA_MAX_MESSAGE_LENGTH",
    "YALLA_ENV",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        # setenv first so the original value is restored after the test
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def test_defaults() -> None:
    settings = Settings.from_env(load_env_file=False)

    assert settings.llm_provider == "gemini"
    assert settings.resolved_model_name == "gemini-2.0-flash"
    assert settings.tool_timeout == 10.0
    assert settings.max_tool_cycles == 5
    assert settings.max_history_turns == 10
    assert settings.max_message_length == 1000
    assert settings.expose_error_details is False


def test_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GOOGLE_API_KEY", "g-key")
    monkeypatch.setenv("TOMTOM_API_KEY", "t-key")
    monkeypatch.setenv("GOOGLE_PLACES_API_KEY", "p-key")
    monkeypatch.setenv("YALLA_MAX_TOOL_CYCLES", "3")
    monkeypatch.setenv("YALLA_TOOL_TIMEOUT", "2.5")
    monkeypatch.setenv("YALLA_ENV", "development")

    settings = Settings.from_env(load_env_file=False)

    assert settings.gemini_api_key == "g-key"
    assert settings.tomtom_api_key == "t-key"
    assert settings.google_places_api_key == "p-key"
    assert settings.max_tool_cycles == 3
    assert settings.tool_timeout == 2.5
    assert settings.expose_error_details is True


def test_openai_provider_default_model(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("YALLA_LLM_PROVIDER", "openai")
    monkeypatch.setenv("YALLA_MODEL", "")

    settings = Settings.from_env(load_env_file=False)

    assert settings.llm_provider == "openai"
    assert settings.resolved_model_name == "gpt-4o-mini"


def test_invalid_values_are_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("YALLA_MAX_TOOL_CYCLES", "0")

    with pytest.raises(ValidationError):
        Settings.from_env(load_env_file=False)


def test_loads_dotenv_file(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("TOMTOM_API_KEY=from-dotenv\n")
    monkeypatch.chdir(tmp_path)

    settings = Settings.from_env()

    assert settings.tomtom_api_key == "from-dotenv"
