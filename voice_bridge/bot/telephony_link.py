"""
Server side of the telephony media stream for one call.

Wraps the FastAPI WebSocket accepted on ``/media-stream``: turns incoming text
frames into typed telephony messages and writes model audio back as media
frames addressed to the stream.
"""

import logging
from typing import AsyncIterator, Optional

from fastapi import WebSocket
from fastapi.websockets import WebSocketDisconnect
from pydantic import ValidationError

from voice_bridge.config.constants import LOGGER_NAME
from voice_bridge.models.call_session import CallSession, TelephonyLinkState
from voice_bridge.models.telephony_schemas import (
    MediaPayload,
    OutgoingMediaMessage,
    TelephonyMessage,
    parse_telephony_message,
)

logger = logging.getLogger(LOGGER_NAME)

# normal closure, going away, no status code
CLEAN_CLOSE_CODES = (1000, 1001, 1005)


class TelephonyLink:
    """The caller side of one call."""

    def __init__(self, websocket: WebSocket, session: Optional[CallSession] = None):
        self.websocket = websocket
        self.session = session
        self._state = TelephonyLinkState.CONNECTED
        self._closed = False

    @property
    def state(self) -> TelephonyLinkState:
        return self._state

    @state.setter
    def state(self, value: TelephonyLinkState) -> None:
        self._state = value
        if self.session is not None:
            self.session.telephony_link_state = value

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def streaming(self) -> bool:
        return self.state == TelephonyLinkState.STREAMING and not self._closed

    async def accept(self) -> None:
        await self.websocket.accept()
        logger.info("Telephony media stream connected")

    def mark_streaming(self) -> None:
        if self.state == TelephonyLinkState.CONNECTED:
            self.state = TelephonyLinkState.STREAMING

    def mark_stopped(self) -> None:
        self.state = TelephonyLinkState.STOPPED

    async def events(self) -> AsyncIterator[TelephonyMessage]:
        """
        Yield typed messages until the peer disconnects.

        Frames that are not JSON, carry unknown events or fail validation are
        logged and skipped. A clean close, or any close after ``stop`` or after
        our own close, ends the iteration. An abnormal close code before
        ``stop`` and other transport errors propagate.
        """
        while True:
            try:
                raw = await self.websocket.receive_text()
            except WebSocketDisconnect as e:
                if (
                    e.code not in CLEAN_CLOSE_CODES
                    and not self._closed
                    and self.state != TelephonyLinkState.STOPPED
                ):
                    logger.warning(f"Telephony media stream dropped (code {e.code})")
                    raise
                logger.info(f"Telephony media stream disconnected (code {e.code})")
                return
            except RuntimeError:
                # receive after our own close
                if self._closed:
                    return
                raise

            try:
                message = parse_telephony_message(raw)
            except ValidationError as e:
                logger.warning(f"Discarding invalid telephony message: {e}")
                continue
            if message is not None:
                yield message

    async def send_media(self, stream_id: str, payload: str) -> bool:
        """
        Play one audio frame to the caller.

        Returns:
            bool: False when the stream is not live or the write failed
        """
        if not self.streaming:
            return False
        frame = OutgoingMediaMessage(streamSid=stream_id, media=MediaPayload(payload=payload))
        try:
            await self.websocket.send_text(frame.model_dump_json())
            return True
        except (WebSocketDisconnect, RuntimeError) as e:
            logger.warning(f"Could not send audio to telephony stream {stream_id}: {e}")
            return False

    async def close(self) -> None:
        """Close the media stream socket. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            await self.websocket.close()
        except RuntimeError as e:
            # already closed by the peer
            logger.debug(f"Telephony socket already closed: {e}")
        except Exception as e:
            logger.error(f"Error closing telephony connection: {e}")
        logger.info("Telephony media stream closed")
