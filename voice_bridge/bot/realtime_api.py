"""
Connection to the OpenAI Realtime API for one call.

Two connectors cover the authentication schemes the deployment may use:
an ``Authorization`` header, or the API key embedded in the WebSocket
subprotocol list for environments that cannot set upgrade headers.
The ``RealtimeModelLink`` owns the socket once it is open. A dropped link is
never reconnected; the call is over.
"""

import asyncio
import logging
from typing import AsyncIterator, Optional, Protocol

import websockets
from pydantic import BaseModel, ValidationError
from websockets.exceptions import ConnectionClosed, ConnectionClosedOK

from voice_bridge.config.constants import AUTH_MODE_SUBPROTOCOL, LOGGER_NAME
from voice_bridge.config.settings import BridgeSettings
from voice_bridge.models.call_session import CallSession, ModelLinkState
from voice_bridge.models.realtime_schemas import (
    ConversationItemCreateEvent,
    FunctionCallOutputItem,
    InputAudioBufferAppendEvent,
    RealtimeBaseMessage,
    SessionUpdateEvent,
    parse_server_event,
)

logger = logging.getLogger(LOGGER_NAME)

CONNECTION_TIMEOUT = 30  # seconds

# WebSocket configuration for low latency
WS_MAX_SIZE = 16 * 1024 * 1024  # 16MB - large enough for audio chunks
WS_PING_INTERVAL = 20
WS_PING_TIMEOUT = 20


class RealtimeConnector(Protocol):
    """Opens an authenticated socket to the voice model."""

    async def connect(self): ...


class HeaderAuthConnector:
    """Authenticates with ``Authorization: Bearer`` and ``OpenAI-Beta`` headers."""

    def __init__(self, url: str, api_key: str):
        self.url = url
        self.api_key = api_key

    async def connect(self):
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "OpenAI-Beta": "realtime=v1",
        }
        logger.info(f"Connecting to voice model at {self.url} (header auth)")
        return await asyncio.wait_for(
            websockets.connect(
                self.url,
                max_size=WS_MAX_SIZE,
                ping_interval=WS_PING_INTERVAL,
                ping_timeout=WS_PING_TIMEOUT,
                compression=None,
                additional_headers=headers,
            ),
            timeout=CONNECTION_TIMEOUT,
        )


class SubprotocolAuthConnector:
    """Authenticates by offering the key inside the subprotocol list."""

    def __init__(self, url: str, api_key: str):
        self.url = url
        self.api_key = api_key

    @property
    def subprotocols(self):
        return [
            "realtime",
            f"openai-insecure-api-key.{self.api_key}",
            "openai-beta.realtime-v1",
        ]

    async def connect(self):
        logger.info(f"Connecting to voice model at {self.url} (subprotocol auth)")
        return await asyncio.wait_for(
            websockets.connect(
                self.url,
                max_size=WS_MAX_SIZE,
                ping_interval=WS_PING_INTERVAL,
                ping_timeout=WS_PING_TIMEOUT,
                compression=None,
                subprotocols=self.subprotocols,
            ),
            timeout=CONNECTION_TIMEOUT,
        )


def build_connector(settings: BridgeSettings) -> RealtimeConnector:
    """Pick the connector matching the configured auth mode."""
    if settings.auth_mode == AUTH_MODE_SUBPROTOCOL:
        return SubprotocolAuthConnector(settings.realtime_endpoint, settings.openai_api_key)
    return HeaderAuthConnector(settings.realtime_endpoint, settings.openai_api_key)


class RealtimeModelLink:
    """
    The voice model side of one call.

    State moves forward only: connecting -> open -> configured -> streaming ->
    closed. Caller audio is accepted once the session.update has been sent.
    """

    def __init__(self, connector: RealtimeConnector, session: Optional[CallSession] = None):
        self.connector = connector
        self.session = session
        self.ws = None
        self._state: Optional[ModelLinkState] = None
        self._closed = False
        self._connecting = False

    @property
    def call_label(self) -> str:
        if self.session is not None and self.session.call_id:
            return f"call {self.session.call_id}"
        return "unknown call"

    @property
    def state(self) -> Optional[ModelLinkState]:
        return self._state

    @state.setter
    def state(self, value: ModelLinkState) -> None:
        self._state = value
        if self.session is not None:
            self.session.model_link_state = value

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def accepts_audio(self) -> bool:
        return self.state in (ModelLinkState.CONFIGURED, ModelLinkState.STREAMING)

    @property
    def connecting(self) -> bool:
        return self._connecting

    async def connect(self) -> bool:
        """
        Open the socket.

        Returns:
            bool: True if the connection was established, False otherwise. A
            socket that opens after the link was closed is closed at once.
        """
        if self._closed:
            logger.warning(f"Cannot connect voice model for {self.call_label} - link is closed")
            return False

        self.state = ModelLinkState.CONNECTING
        self._connecting = True
        try:
            ws = await self.connector.connect()
        except asyncio.TimeoutError:
            logger.error(
                f"Timeout while connecting to voice model for {self.call_label} "
                f"(after {CONNECTION_TIMEOUT}s)"
            )
            self.state = ModelLinkState.CLOSED
            return False
        except Exception as e:
            logger.error(f"Failed to connect to voice model for {self.call_label}: {e}")
            self.state = ModelLinkState.CLOSED
            return False
        finally:
            self._connecting = False

        if self._closed:
            logger.info(f"Voice model link for {self.call_label} closed while connecting")
            try:
                await ws.close()
            except Exception as e:
                logger.error(f"Error closing voice model connection for {self.call_label}: {e}")
            return False

        self.ws = ws
        self.state = ModelLinkState.OPEN
        logger.info(f"Voice model connected for {self.call_label}")
        return True

    async def send_event(self, event: BaseModel) -> bool:
        """Serialize and send a client event; returns False if it could not be sent."""
        if self.ws is None or self._closed:
            logger.warning(
                f"Cannot send {getattr(event, 'type', 'event')} for {self.call_label} - link not open"
            )
            return False
        try:
            await self.ws.send(event.model_dump_json())
            return True
        except ConnectionClosed as e:
            logger.warning(f"Voice model connection closed while sending for {self.call_label}: {e}")
            return False

    async def configure(self, session_update: SessionUpdateEvent) -> bool:
        """Send the session configuration; audio is accepted afterwards."""
        if self.state != ModelLinkState.OPEN:
            logger.warning(f"Cannot configure voice model in state {self.state}")
            return False
        if not await self.send_event(session_update):
            return False
        self.state = ModelLinkState.CONFIGURED
        logger.info(f"Voice model session configured for {self.call_label}")
        return True

    async def send_audio(self, payload: str) -> bool:
        """
        Append one caller audio frame to the model input buffer.

        Args:
            payload: base64 g711_ulaw audio exactly as received from telephony

        Returns:
            bool: False if the link is not accepting audio or the send failed
        """
        if not self.accepts_audio:
            return False
        if not await self.send_event(InputAudioBufferAppendEvent(audio=payload)):
            return False
        if self.state == ModelLinkState.CONFIGURED:
            self.state = ModelLinkState.STREAMING
        return True

    async def send_function_output(self, call_id: str, output: str) -> bool:
        """Return a tool result to the model, correlated by the model's call id."""
        event = ConversationItemCreateEvent(
            item=FunctionCallOutputItem(call_id=call_id, output=output)
        )
        return await self.send_event(event)

    async def events(self) -> AsyncIterator[RealtimeBaseMessage]:
        """
        Yield parsed server events until the socket closes.

        Malformed messages and event types the bridge does not handle are
        skipped. A normal close ends the iteration; an abnormal close raises
        ConnectionClosedError.
        """
        if self.ws is None:
            return
        try:
            async for message in self.ws:
                if isinstance(message, bytes):
                    logger.debug(f"Ignoring binary frame of {len(message)} bytes from voice model")
                    continue
                try:
                    event = parse_server_event(message)
                except ValidationError as e:
                    logger.warning(f"Discarding malformed voice model event: {e}")
                    continue
                if event is not None:
                    yield event
        except ConnectionClosedOK:
            logger.info(f"Voice model connection closed normally for {self.call_label}")

    async def close(self) -> None:
        """Close the socket. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self.state = ModelLinkState.CLOSED
        if self.ws is not None:
            try:
                await self.ws.close()
            except Exception as e:
                logger.error(f"Error closing voice model connection for {self.call_label}: {e}")
        logger.info(f"Voice model link closed for {self.call_label}")
