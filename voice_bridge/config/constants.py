"""
Constants and configuration values used throughout the application.

This module defines constants that are used across different parts of the bridge,
providing a single place for protocol event names, audio formats and tool
defaults so the telephony and voice model sides agree on naming.
"""

# Logger name used throughout the application
LOGGER_NAME = "voice_bridge"

# Default OpenAI model and endpoint for the Realtime API
DEFAULT_REALTIME_MODEL = "gpt-4o-realtime-preview-2024-10-01"
DEFAULT_REALTIME_URL = "wss://api.openai.com/v1/realtime"
DEFAULT_VOICE = "alloy"

# Authentication modes for the voice model connection
AUTH_MODE_HEADER = "header"
AUTH_MODE_SUBPROTOCOL = "subprotocol"

# G.711 u-law at 8kHz on both sides, payloads are passed through untouched
AUDIO_FORMAT_G711_ULAW = "g711_ulaw"

# Server-side voice activity detection defaults
DEFAULT_VAD_THRESHOLD = 0.5
DEFAULT_VAD_PREFIX_PADDING_MS = 300
DEFAULT_VAD_SILENCE_DURATION_MS = 500

# Telephony (Twilio Media Streams) event names
TELEPHONY_EVENT_CONNECTED = "connected"
TELEPHONY_EVENT_START = "start"
TELEPHONY_EVENT_MEDIA = "media"
TELEPHONY_EVENT_STOP = "stop"

# Voice model server event types
MODEL_EVENT_SESSION_CREATED = "session.created"
MODEL_EVENT_AUDIO_DELTA = "response.audio.delta"
MODEL_EVENT_TRANSCRIPT_DELTA = "response.audio_transcript.delta"
MODEL_EVENT_FUNCTION_CALL_DONE = "response.function_call_arguments.done"
MODEL_EVENT_ERROR = "error"

# Meeting booking tool
BOOK_MEETING_TOOL_NAME = "book_meeting"
DEFAULT_MEETING_DURATION_MINUTES = 60

# Used when the telephony start event carries no lead name
DEFAULT_LEAD_NAME = "there"
