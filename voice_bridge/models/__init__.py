"""
Models module for data structures and state management in the voice bridge.

Key components:
- telephony_schemas: Pydantic models for the Twilio Media Streams messages,
  with a discriminated union over the ``event`` field.
- realtime_schemas: Pydantic models for the OpenAI Realtime API client and
  server events used by the bridge.
- call_session: Per-call state (identifiers, transcript, meeting flag and link
  lifecycle) plus the call status records sent to the CRM.
- booking: The book_meeting tool arguments and calendar booking request/result.
- call_registry: Registry of live calls for health reporting.

Usage examples:
```python
from voice_bridge.models.telephony_schemas import parse_telephony_message

message = parse_telephony_message(
    '{"event": "start", "start": {"callSid": "CA1", "streamSid": "MZ1",'
    ' "customParameters": {"leadId": "L1", "leadName": "Sam"}}}'
)
print(message.start.lead_name)  # Sam
```
"""

from voice_bridge.models.booking import (
    BookingResult,
    BookMeetingArguments,
    MeetingRequest,
    ToolInvocation,
)
from voice_bridge.models.call_registry import CallRegistry
from voice_bridge.models.call_session import (
    CallSession,
    CallStatus,
    CallStatusUpdate,
    ModelLinkState,
    TelephonyLinkState,
)
from voice_bridge.models.realtime_schemas import (
    ConversationItemCreateEvent,
    ErrorEvent,
    FunctionCallArgumentsDoneEvent,
    FunctionCallOutputItem,
    InputAudioBufferAppendEvent,
    ResponseAudioDeltaEvent,
    ResponseAudioTranscriptDeltaEvent,
    ServerEventType,
    SessionCreatedEvent,
    SessionUpdateEvent,
)
from voice_bridge.models.telephony_schemas import (
    ConnectedMessage,
    MediaMessage,
    OutgoingMediaMessage,
    StartMessage,
    StopMessage,
    TelephonyMessage,
)
