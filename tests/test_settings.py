import pytest
from pydantic import ValidationError

from voice_bridge.config.settings import BridgeSettings, load_settings

ENV_VARS = [
    "OPENAI_API_KEY",
    "OPENAI_REALTIME_MODEL",
    "OPENAI_REALTIME_URL",
    "REALTIME_AUTH_MODE",
    "REALTIME_VOICE",
    "VAD_THRESHOLD",
    "VAD_PREFIX_PADDING_MS",
    "VAD_SILENCE_DURATION_MS",
    "ASSISTANT_BUSINESS_NAME",
    "CRM_API_URL",
    "API_SECRET_KEY",
    "CRM_USER_ID",
    "CRM_API_TIMEOUT",
    "HOST",
    "PORT",
]


@pytest.fixture
def clean_env(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    settings = load_settings()

    assert settings.openai_api_key is None
    assert settings.auth_mode == "header"
    assert settings.voice == "alloy"
    assert settings.crm_api_url is None
    assert settings.port == 8000
    assert settings.realtime_endpoint == (
        "wss://api.openai.com/v1/realtime?model=gpt-4o-realtime-preview-2024-10-01"
    )


def test_values_from_environment(clean_env):
    clean_env.setenv("OPENAI_API_KEY", "sk-test")
    clean_env.setenv("OPENAI_REALTIME_MODEL", "gpt-4o-mini-realtime-preview")
    clean_env.setenv("REALTIME_AUTH_MODE", "Subprotocol")
    clean_env.setenv("VAD_THRESHOLD", "0.7")
    clean_env.setenv("VAD_SILENCE_DURATION_MS", "800")
    clean_env.setenv("CRM_API_URL", "https://crm.example.com")
    clean_env.setenv("CRM_API_TIMEOUT", "2.5")
    clean_env.setenv("PORT", "9000")

    settings = load_settings()

    assert settings.openai_api_key == "sk-test"
    assert settings.auth_mode == "subprotocol"
    assert settings.vad_threshold == 0.7
    assert settings.vad_silence_duration_ms == 800
    assert settings.crm_api_url == "https://crm.example.com"
    assert settings.crm_api_timeout == 2.5
    assert settings.port == 9000
    assert settings.realtime_endpoint.endswith("?model=gpt-4o-mini-realtime-preview")


def test_invalid_auth_mode(clean_env):
    clean_env.setenv("REALTIME_AUTH_MODE", "query")
    with pytest.raises(ValidationError):
        load_settings()


def test_invalid_number():
    with pytest.raises(ValidationError):
        BridgeSettings(port="not-a-port")
