"""Bridge between a Twilio Media Streams call and the OpenAI Realtime API.

One CallBridge is created per accepted telephony connection. It owns the
CallSession for that call, opens the voice model link when the stream starts,
relays audio in both directions without transcoding, runs the book_meeting tool
and reports the call lifecycle to the call status sink.

Caller audio is forwarded from the telephony receive loop and model output from
a separate task, so neither direction waits on the other. Nothing is queued or
retried: a frame that cannot be delivered immediately is dropped.
"""

import asyncio
import logging
import uuid
from datetime import date
from typing import Optional

from fastapi import WebSocket
from websockets.exceptions import ConnectionClosed

from voice_bridge.bot.realtime_api import RealtimeConnector, RealtimeModelLink
from voice_bridge.bot.session_config import build_session_update
from voice_bridge.bot.telephony_link import TelephonyLink
from voice_bridge.config.constants import (
    LOGGER_NAME,
    TELEPHONY_EVENT_CONNECTED,
    TELEPHONY_EVENT_MEDIA,
    TELEPHONY_EVENT_START,
    TELEPHONY_EVENT_STOP,
)
from voice_bridge.config.settings import BridgeSettings
from voice_bridge.handlers.tool_handlers import BookMeetingHandler, format_tool_output
from voice_bridge.models.booking import ToolInvocation
from voice_bridge.models.call_registry import CallRegistry
from voice_bridge.models.call_session import (
    CallSession,
    CallStatus,
    CallStatusUpdate,
    TelephonyLinkState,
)
from voice_bridge.models.realtime_schemas import (
    ErrorEvent,
    FunctionCallArgumentsDoneEvent,
    ResponseAudioDeltaEvent,
    ResponseAudioTranscriptDeltaEvent,
    ServerEventType,
    SessionCreatedEvent,
)
from voice_bridge.models.telephony_schemas import (
    ConnectedMessage,
    MediaMessage,
    StartMessage,
    StopMessage,
)
from voice_bridge.services.call_status import CallStatusSink
from voice_bridge.services.scheduling import MeetingBookingSink

logger = logging.getLogger(LOGGER_NAME)


class CallBridge:
    """Relays one phone call between the telephony media stream and the voice model.

    Attributes:
        connection_id (str): Identifier used for the active call registry
        session (CallSession): State of this call, private to this bridge
        telephony (TelephonyLink): The inbound media stream
        model_link (Optional[RealtimeModelLink]): The voice model connection, set on start
        telephony_event_handlers (dict): Handler per telephony ``event``
        model_event_handlers (dict): Handler per model event ``type``
    """

    def __init__(
        self,
        websocket: WebSocket,
        settings: BridgeSettings,
        connector: RealtimeConnector,
        status_sink: CallStatusSink,
        booking_sink: MeetingBookingSink,
        registry: Optional[CallRegistry] = None,
        today: Optional[date] = None,
    ):
        self.connection_id = str(uuid.uuid4())
        self.settings = settings
        self.connector = connector
        self.status_sink = status_sink
        self.registry = registry
        self.today = today

        self.session = CallSession()
        self.telephony = TelephonyLink(websocket, self.session)
        self.model_link: Optional[RealtimeModelLink] = None
        self.tool_handler = BookMeetingHandler(booking_sink)

        self._connect_task: Optional[asyncio.Task] = None
        self._model_task: Optional[asyncio.Task] = None
        self._closing = False

        self.telephony_event_handlers = {
            TELEPHONY_EVENT_CONNECTED: self.handle_connected,
            TELEPHONY_EVENT_START: self.handle_start,
            TELEPHONY_EVENT_MEDIA: self.handle_media,
            TELEPHONY_EVENT_STOP: self.handle_stop,
        }

        self.model_event_handlers = {
            ServerEventType.SESSION_CREATED.value: self.handle_session_created,
            ServerEventType.RESPONSE_AUDIO_DELTA.value: self.handle_audio_delta,
            ServerEventType.RESPONSE_AUDIO_TRANSCRIPT_DELTA.value: self.handle_transcript_delta,
            ServerEventType.RESPONSE_FUNCTION_CALL_ARGUMENTS_DONE.value: self.handle_function_call_done,
            ServerEventType.ERROR.value: self.handle_model_error,
        }

    @property
    def call_label(self) -> str:
        return self.session.call_id or self.connection_id

    async def run(self) -> None:
        """Accept the media stream and relay the call until either side ends it."""
        await self.telephony.accept()
        if self.registry is not None:
            self.registry.add_call(self.connection_id, self)

        try:
            async for message in self.telephony.events():
                handler = self.telephony_event_handlers[message.event]
                try:
                    await handler(message)
                except Exception as e:
                    logger.error(
                        f"Error handling telephony {message.event} for {self.call_label}: {e}",
                        exc_info=True,
                    )
                if self._closing or self.session.telephony_link_state == TelephonyLinkState.STOPPED:
                    break
        except Exception as e:
            logger.error(f"Telephony transport error for {self.call_label}: {e}")
            await self.fail(f"Telephony transport error: {e}")
        finally:
            await self.shutdown()

    # Telephony event handlers

    async def handle_connected(self, message: ConnectedMessage) -> None:
        logger.info(
            f"Telephony stream connected (protocol {message.protocol}, version {message.version})"
        )

    async def handle_start(self, message: StartMessage) -> None:
        """Bind the call identifiers, record the call as in progress and open the model link.

        The model link is opened in its own task so caller frames that arrive
        while it connects are read and dropped rather than left in the socket.
        """
        start = message.start
        if not self.session.bind_stream(
            start.callSid, start.streamSid, start.lead_id, start.lead_name
        ):
            logger.warning(f"Ignoring repeated start event for call {self.session.call_id}")
            return

        self.telephony.mark_streaming()
        logger.info(
            f"Stream started - Call: {self.session.call_id}, Stream: {self.session.stream_id}, "
            f"Lead: {self.session.lead_id or 'N/A'}"
        )

        await self.record_status(CallStatusUpdate(status=CallStatus.IN_PROGRESS))
        self.model_link = RealtimeModelLink(self.connector, self.session)
        self._connect_task = asyncio.create_task(self.open_model_link())

    async def handle_media(self, message: MediaMessage) -> None:
        """Forward one caller audio frame; dropped when the model is not ready."""
        if self.model_link is None or not self.model_link.accepts_audio:
            logger.debug("Dropping caller audio - voice model not ready")
            return

        if not await self.model_link.send_audio(message.media.payload) and not self._closing:
            await self.fail("Voice model link closed while forwarding caller audio")

    async def handle_stop(self, message: StopMessage) -> None:
        """Record the final call state and close the model link."""
        logger.info(f"Telephony stream stopped for call {self.session.call_id}")
        self.telephony.mark_stopped()
        self._closing = True

        if self.session.call_id:
            await self.record_terminal_status(self.session.final_update())
        await self.close_model_link()

    # Voice model side

    async def open_model_link(self) -> None:
        """Connect to the voice model, configure the session and start relaying its events."""
        if not await self.model_link.connect():
            if not self._closing:
                await self.fail("Could not connect to the voice model")
            return

        session_update = build_session_update(
            self.settings, self.session.lead_display_name, self.today
        )
        if not await self.model_link.configure(session_update):
            if not self._closing:
                await self.fail("Could not configure the voice model session")
            return

        self._model_task = asyncio.create_task(self.receive_from_model())

    async def receive_from_model(self) -> None:
        """Dispatch voice model events until the link closes."""
        link = self.model_link
        try:
            async for event in link.events():
                handler = self.model_event_handlers.get(event.type)
                if handler is None:
                    continue
                try:
                    await handler(event)
                except Exception as e:
                    logger.error(
                        f"Error handling voice model {event.type} for {self.call_label}: {e}",
                        exc_info=True,
                    )
        except ConnectionClosed as e:
            if not self._closing:
                await self.fail(f"Voice model connection lost: {e}")
            return
        except Exception as e:
            if not self._closing:
                await self.fail(f"Voice model receive error: {e}")
            return

        if not self._closing:
            await self.fail("Voice model connection closed unexpectedly")

    async def handle_session_created(self, event: SessionCreatedEvent) -> None:
        logger.info(f"Voice model session created: {event.session.get('id', 'unknown')}")

    async def handle_audio_delta(self, event: ResponseAudioDeltaEvent) -> None:
        """Play model audio to the caller; dropped if the stream has not started.

        The write is awaited here to keep frames in order, so a slow caller
        socket also delays the transcript and tool events queued behind it.
        """
        if not self.session.stream_id:
            logger.debug("Dropping model audio - no telephony stream yet")
            return
        await self.telephony.send_media(self.session.stream_id, event.delta)

    async def handle_transcript_delta(self, event: ResponseAudioTranscriptDeltaEvent) -> None:
        self.session.append_transcript(event.delta)

    async def handle_function_call_done(self, event: FunctionCallArgumentsDoneEvent) -> None:
        """Run the requested tool and return its result under the same call_id."""
        logger.info(f"Tool call {event.name} (call_id {event.call_id}) for {self.call_label}")
        invocation = ToolInvocation(
            call_id=event.call_id, tool_name=event.name, raw_arguments=event.arguments
        )
        result = await self.tool_handler.execute(invocation, self.session)
        if result is None:
            return

        sent = await self.model_link.send_function_output(event.call_id, format_tool_output(result))
        if not sent and not self._closing:
            await self.fail("Voice model link closed before the tool result could be sent")

    async def handle_model_error(self, event: ErrorEvent) -> None:
        logger.error(f"Voice model error for {self.call_label}: {event.message}")

    # Status reporting and teardown

    async def record_status(self, update: CallStatusUpdate) -> None:
        """Send a status update for this call; failures are logged, never raised."""
        if not self.session.call_id:
            logger.debug(f"No call id yet, not recording status {update.status.value}")
            return
        try:
            await self.status_sink.update_call_status(self.session.call_id, update)
        except Exception as e:
            logger.error(f"Call status sink failed for {self.session.call_id}: {e}")

    async def record_terminal_status(self, update: CallStatusUpdate) -> None:
        """Record completed or failed, at most once per call."""
        if self.session.terminal_status is not None:
            logger.info(
                f"Call {self.session.call_id} already recorded as "
                f"{self.session.terminal_status.value}; skipping {update.status.value}"
            )
            return
        self.session.terminal_status = update.status
        await self.record_status(update)

    async def fail(self, reason: str) -> None:
        """Mark the call failed and close both links."""
        if self._closing:
            return
        self._closing = True
        logger.error(f"Call {self.call_label} failed: {reason}")

        if self.session.call_id:
            await self.record_terminal_status(
                CallStatusUpdate(status=CallStatus.FAILED, error_message=reason)
            )
        await self.close_model_link()
        await self.telephony.close()

    async def close_model_link(self) -> None:
        if self.model_link is not None:
            await self.model_link.close()

    async def shutdown(self) -> None:
        """Close both links and stop the bridge tasks. Safe to call more than once."""
        self._closing = True
        await self.close_model_link()

        # a connect still in flight is abandoned; a finished one may be recording status
        connecting = self.model_link is not None and self.model_link.connecting
        await self.stop_task(self._connect_task, cancel=connecting)
        await self.stop_task(self._model_task, cancel=True)

        await self.telephony.close()
        if self.registry is not None:
            self.registry.remove_call(self.connection_id)
        logger.info(f"Bridge closed for {self.call_label}")

    async def stop_task(self, task: Optional[asyncio.Task], cancel: bool) -> None:
        if task is None or task.done() or task is asyncio.current_task():
            return
        if cancel:
            task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error(f"Bridge task failed for {self.call_label}: {e}", exc_info=True)
