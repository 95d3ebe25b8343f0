"""
Pydantic models for the Twilio Media Streams WebSocket protocol.

This module defines structured data models for the telephony messages the bridge
consumes (connected, start, media, stop) and the media frame it produces,
providing type validation and a discriminated union over the ``event`` field.
"""

import json
import logging
from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from voice_bridge.config.constants import (
    DEFAULT_LEAD_NAME,
    LOGGER_NAME,
    TELEPHONY_EVENT_CONNECTED,
    TELEPHONY_EVENT_MEDIA,
    TELEPHONY_EVENT_START,
    TELEPHONY_EVENT_STOP,
)

logger = logging.getLogger(LOGGER_NAME)

KNOWN_TELEPHONY_EVENTS = {
    TELEPHONY_EVENT_CONNECTED,
    TELEPHONY_EVENT_START,
    TELEPHONY_EVENT_MEDIA,
    TELEPHONY_EVENT_STOP,
}


class TelephonyBaseMessage(BaseModel):
    """Base model for all Media Streams messages."""

    model_config = ConfigDict(extra="allow")

    event: str = Field(..., description="Message event identifier")
    sequenceNumber: Optional[str] = None


class ConnectedMessage(TelephonyBaseMessage):
    """First message sent once the media stream socket is open."""

    event: Literal["connected"]
    protocol: Optional[str] = None
    version: Optional[str] = None


class StreamStart(BaseModel):
    """Metadata carried by the start message."""

    model_config = ConfigDict(extra="allow")

    callSid: str = Field(..., description="Telephony call identifier")
    streamSid: str = Field(..., description="Media stream identifier")
    customParameters: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("callSid", "streamSid")
    def validate_sid(cls, v):
        """Identifiers are used to address frames and records, so they cannot be blank."""
        if not v.strip():
            raise ValueError("Identifier cannot be empty")
        return v

    @field_validator("customParameters", mode="before")
    def default_parameters(cls, v):
        """Twilio omits or nulls the parameter map when no parameters were set."""
        return v or {}

    @property
    def lead_id(self) -> Optional[str]:
        value = self.customParameters.get("leadId")
        return str(value) if value else None

    @property
    def lead_name(self) -> str:
        return self.customParameters.get("leadName") or DEFAULT_LEAD_NAME


class StartMessage(TelephonyBaseMessage):
    """Stream metadata; arrives once before any media for the call."""

    event: Literal["start"]
    start: StreamStart
    streamSid: Optional[str] = None


class MediaPayload(BaseModel):
    """Base64 u-law audio, passed through without decoding."""

    model_config = ConfigDict(extra="allow")

    payload: str = Field(..., description="Base64-encoded G.711 u-law audio")


class MediaMessage(TelephonyBaseMessage):
    """Caller audio frame."""

    event: Literal["media"]
    media: MediaPayload
    streamSid: Optional[str] = None


class StopMessage(TelephonyBaseMessage):
    """The stream has stopped or the call has ended."""

    event: Literal["stop"]
    streamSid: Optional[str] = None


class OutgoingMediaMessage(BaseModel):
    """Model audio frame sent back to the caller."""

    event: Literal["media"] = "media"
    streamSid: str = Field(..., description="Stream to play the audio on")
    media: MediaPayload


TelephonyMessage = Annotated[
    Union[ConnectedMessage, StartMessage, MediaMessage, StopMessage],
    Field(discriminator="event"),
]

_telephony_message_adapter = TypeAdapter(TelephonyMessage)


def parse_telephony_message(raw: str) -> Optional[TelephonyMessage]:
    """
    Parse one text frame from the telephony socket.

    Args:
        raw: The JSON text received from the media stream

    Returns:
        The typed message, or None when the frame is not valid JSON or carries an
        event the bridge does not handle

    Raises:
        pydantic.ValidationError: If a known event is missing required fields
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning(f"Discarding non-JSON telephony message: {e}")
        return None

    if not isinstance(data, dict):
        logger.warning(f"Discarding telephony message that is not an object: {raw[:100]}")
        return None

    event = data.get("event")
    if event not in KNOWN_TELEPHONY_EVENTS:
        logger.info(f"Ignoring telephony event: {event}")
        return None

    return _telephony_message_adapter.validate_python(data)
