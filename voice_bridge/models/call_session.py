"""
Per-call state for one bridged phone call.

A CallSession is created by the bridge when a telephony media stream connects
and lives until that call is torn down. It holds the identifiers learned from
the telephony ``start`` event, the assistant transcript, the meeting flag and
the lifecycle state of both sockets. Nothing in here is shared between calls.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from voice_bridge.config.constants import DEFAULT_LEAD_NAME


class ModelLinkState(str, Enum):
    """Lifecycle of the voice model connection."""
    CONNECTING = "connecting"
    OPEN = "open"
    CONFIGURED = "configured"
    STREAMING = "streaming"
    CLOSED = "closed"


class TelephonyLinkState(str, Enum):
    """Lifecycle of the telephony media stream."""
    CONNECTED = "connected"
    STREAMING = "streaming"
    STOPPED = "stopped"


class CallStatus(str, Enum):
    """Call states recorded by the CRM."""
    INITIATED = "initiated"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATUSES = {CallStatus.COMPLETED, CallStatus.FAILED}


class CallStatusUpdate(BaseModel):
    """Fields written to the call record; unset fields are left untouched."""

    status: CallStatus
    transcript: Optional[str] = None
    meeting_scheduled: Optional[bool] = None
    error_message: Optional[str] = Field(None, description="Why the call failed")

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class CallSession:
    """
    State of a single bridged call.

    Identifiers are bound once from the telephony start event and never change
    afterwards. The transcript only grows and the meeting flag only goes from
    False to True.
    """

    def __init__(self):
        self.call_id: Optional[str] = None
        self.stream_id: Optional[str] = None
        self.lead_id: Optional[str] = None
        self.lead_display_name: str = DEFAULT_LEAD_NAME
        self.transcript_buffer: List[str] = []
        self.meeting_scheduled = False
        self.model_link_state: Optional[ModelLinkState] = None
        self.telephony_link_state = TelephonyLinkState.CONNECTED
        self.terminal_status: Optional[CallStatus] = None

    @property
    def started(self) -> bool:
        """Whether the telephony start event has been processed."""
        return self.stream_id is not None

    def bind_stream(
        self,
        call_id: str,
        stream_id: str,
        lead_id: Optional[str] = None,
        lead_name: Optional[str] = None,
    ) -> bool:
        """
        Record the identifiers from the telephony start event.

        Returns:
            False if the session was already bound, in which case nothing changes
        """
        if self.started:
            return False
        self.call_id = call_id
        self.stream_id = stream_id
        self.lead_id = lead_id
        self.lead_display_name = lead_name or DEFAULT_LEAD_NAME
        return True

    def append_transcript(self, fragment: str) -> None:
        if fragment:
            self.transcript_buffer.append(fragment)

    @property
    def transcript(self) -> Optional[str]:
        """The accumulated transcript, or None when nothing was said."""
        text = "".join(self.transcript_buffer)
        return text or None

    def mark_meeting_scheduled(self) -> None:
        self.meeting_scheduled = True

    def final_update(self) -> CallStatusUpdate:
        """Status update for a call that ended normally."""
        return CallStatusUpdate(
            status=CallStatus.COMPLETED,
            transcript=self.transcript,
            meeting_scheduled=self.meeting_scheduled,
        )

    def __repr__(self):
        return (
            f"CallSession(call_id={self.call_id!r}, stream_id={self.stream_id!r}, "
            f"lead_id={self.lead_id!r}, meeting_scheduled={self.meeting_scheduled})"
        )
