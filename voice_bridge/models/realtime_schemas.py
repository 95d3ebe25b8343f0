"""
Pydantic models for OpenAI Realtime API message structures.

This module provides type-safe models for the messages exchanged with the
Realtime API: the client events the bridge sends (session configuration, caller
audio, tool results) and the server events it reacts to.
"""

import json
import logging
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Type

from pydantic import BaseModel, ConfigDict, Field

from voice_bridge.config.constants import (
    AUDIO_FORMAT_G711_ULAW,
    LOGGER_NAME,
    MODEL_EVENT_AUDIO_DELTA,
    MODEL_EVENT_ERROR,
    MODEL_EVENT_FUNCTION_CALL_DONE,
    MODEL_EVENT_SESSION_CREATED,
    MODEL_EVENT_TRANSCRIPT_DELTA,
)

logger = logging.getLogger(LOGGER_NAME)


class ServerEventType(str, Enum):
    """Server event types the bridge handles."""
    SESSION_CREATED = MODEL_EVENT_SESSION_CREATED
    RESPONSE_AUDIO_DELTA = MODEL_EVENT_AUDIO_DELTA
    RESPONSE_AUDIO_TRANSCRIPT_DELTA = MODEL_EVENT_TRANSCRIPT_DELTA
    RESPONSE_FUNCTION_CALL_ARGUMENTS_DONE = MODEL_EVENT_FUNCTION_CALL_DONE
    ERROR = MODEL_EVENT_ERROR


class RealtimeBaseMessage(BaseModel):
    """Base model for Realtime API messages."""

    model_config = ConfigDict(extra="allow")

    type: str
    event_id: Optional[str] = None


# Server events

class SessionCreatedEvent(RealtimeBaseMessage):
    """Sent once the model session exists."""
    type: Literal["session.created"]
    session: Dict[str, Any] = Field(default_factory=dict)


class ResponseAudioDeltaEvent(RealtimeBaseMessage):
    """A chunk of synthesized speech, base64 g711_ulaw."""
    type: Literal["response.audio.delta"]
    delta: str
    response_id: Optional[str] = None
    item_id: Optional[str] = None


class ResponseAudioTranscriptDeltaEvent(RealtimeBaseMessage):
    """Text of what the model is saying."""
    type: Literal["response.audio_transcript.delta"]
    delta: str = ""
    response_id: Optional[str] = None


class FunctionCallArgumentsDoneEvent(RealtimeBaseMessage):
    """The model finished streaming the arguments of a tool call."""
    type: Literal["response.function_call_arguments.done"]
    name: str
    arguments: str
    call_id: str
    item_id: Optional[str] = None


class ErrorEvent(RealtimeBaseMessage):
    """Error reported by the model service; the session stays open."""
    type: Literal["error"]
    error: Dict[str, Any] = Field(default_factory=dict)

    @property
    def message(self) -> str:
        return self.error.get("message") or self.error.get("code") or "unknown error"


SERVER_EVENT_MODELS: Dict[str, Type[RealtimeBaseMessage]] = {
    ServerEventType.SESSION_CREATED.value: SessionCreatedEvent,
    ServerEventType.RESPONSE_AUDIO_DELTA.value: ResponseAudioDeltaEvent,
    ServerEventType.RESPONSE_AUDIO_TRANSCRIPT_DELTA.value: ResponseAudioTranscriptDeltaEvent,
    ServerEventType.RESPONSE_FUNCTION_CALL_ARGUMENTS_DONE.value: FunctionCallArgumentsDoneEvent,
    ServerEventType.ERROR.value: ErrorEvent,
}


def parse_server_event(raw: str) -> Optional[RealtimeBaseMessage]:
    """
    Parse one text frame from the voice model socket.

    Args:
        raw: JSON text received from the Realtime API

    Returns:
        The typed event, or None for invalid JSON and event types the bridge ignores

    Raises:
        pydantic.ValidationError: If a handled event type is missing fields
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning(f"Received invalid JSON from voice model: {raw[:100]}...")
        return None

    if not isinstance(data, dict):
        logger.warning(f"Received non-object message from voice model: {raw[:100]}...")
        return None

    event_type = data.get("type")
    model = SERVER_EVENT_MODELS.get(event_type)
    if model is None:
        logger.debug(f"Received message of type: {event_type or 'unknown'}")
        return None
    return model.model_validate(data)


# Client events

class TurnDetection(BaseModel):
    """Server-side voice activity detection parameters."""
    type: Literal["server_vad"] = "server_vad"
    threshold: float
    prefix_padding_ms: int
    silence_duration_ms: int


class FunctionTool(BaseModel):
    """A function the model may call."""
    type: Literal["function"] = "function"
    name: str
    description: str
    parameters: Dict[str, Any]


class SessionConfig(BaseModel):
    """Session parameters sent in session.update."""
    modalities: List[str] = Field(default_factory=lambda: ["text", "audio"])
    instructions: str
    voice: str
    input_audio_format: str = AUDIO_FORMAT_G711_ULAW
    output_audio_format: str = AUDIO_FORMAT_G711_ULAW
    turn_detection: TurnDetection
    tools: List[FunctionTool] = Field(default_factory=list)


class SessionUpdateEvent(BaseModel):
    """Configure the model session."""
    type: Literal["session.update"] = "session.update"
    session: SessionConfig


class InputAudioBufferAppendEvent(BaseModel):
    """Append caller audio to the model's input buffer."""
    type: Literal["input_audio_buffer.append"] = "input_audio_buffer.append"
    audio: str


class FunctionCallOutputItem(BaseModel):
    """Result of a tool call, correlated by the model's call id."""
    type: Literal["function_call_output"] = "function_call_output"
    call_id: str
    output: str


class ConversationItemCreateEvent(BaseModel):
    """Insert an item into the model conversation."""
    type: Literal["conversation.item.create"] = "conversation.item.create"
    item: FunctionCallOutputItem
