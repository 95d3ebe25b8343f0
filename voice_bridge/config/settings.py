"""
Environment-based settings for the bridge.

Settings are read from the process environment (optionally populated from a
``.env`` file by ``voice_bridge.main``) into a pydantic model so that the rest
of the code receives one validated object instead of calling ``os.getenv``
in many places.
"""

import os
from typing import Literal, Optional

from pydantic import BaseModel, Field

from voice_bridge.config.constants import (
    AUTH_MODE_HEADER,
    DEFAULT_REALTIME_MODEL,
    DEFAULT_REALTIME_URL,
    DEFAULT_VAD_PREFIX_PADDING_MS,
    DEFAULT_VAD_SILENCE_DURATION_MS,
    DEFAULT_VAD_THRESHOLD,
    DEFAULT_VOICE,
)


class BridgeSettings(BaseModel):
    """Deployment configuration for the voice bridge."""

    openai_api_key: Optional[str] = Field(None, description="Voice model credential")
    realtime_model: str = DEFAULT_REALTIME_MODEL
    realtime_url: str = DEFAULT_REALTIME_URL
    auth_mode: Literal["header", "subprotocol"] = AUTH_MODE_HEADER
    voice: str = DEFAULT_VOICE

    vad_threshold: float = DEFAULT_VAD_THRESHOLD
    vad_prefix_padding_ms: int = DEFAULT_VAD_PREFIX_PADDING_MS
    vad_silence_duration_ms: int = DEFAULT_VAD_SILENCE_DURATION_MS

    business_name: str = "our team"

    crm_api_url: Optional[str] = Field(None, description="Base URL of the CRM web app")
    api_secret_key: Optional[str] = Field(None, description="Bearer secret for the CRM API")
    crm_user_id: Optional[str] = Field(None, description="Owner of booked calendar events")
    crm_api_timeout: float = 10.0

    host: str = "0.0.0.0"
    port: int = 8000

    @property
    def realtime_endpoint(self) -> str:
        """Full WebSocket URL including the model query parameter."""
        return f"{self.realtime_url}?model={self.realtime_model}"


def load_settings() -> BridgeSettings:
    """Build settings from environment variables, leaving defaults for unset ones."""
    env_map = {
        "openai_api_key": "OPENAI_API_KEY",
        "realtime_model": "OPENAI_REALTIME_MODEL",
        "realtime_url": "OPENAI_REALTIME_URL",
        "auth_mode": "REALTIME_AUTH_MODE",
        "voice": "REALTIME_VOICE",
        "vad_threshold": "VAD_THRESHOLD",
        "vad_prefix_padding_ms": "VAD_PREFIX_PADDING_MS",
        "vad_silence_duration_ms": "VAD_SILENCE_DURATION_MS",
        "business_name": "ASSISTANT_BUSINESS_NAME",
        "crm_api_url": "CRM_API_URL",
        "api_secret_key": "API_SECRET_KEY",
        "crm_user_id": "CRM_USER_ID",
        "crm_api_timeout": "CRM_API_TIMEOUT",
        "host": "HOST",
        "port": "PORT",
    }
    values = {
        field: os.environ[var] for field, var in env_map.items() if os.getenv(var)
    }
    if "auth_mode" in values:
        values["auth_mode"] = values["auth_mode"].lower()
    return BridgeSettings(**values)
