"""
Bot module bridging telephony calls to the OpenAI Realtime API.

Key components:
- call_bridge: CallBridge, one per call, which wires the telephony link to the
  voice model link, dispatches events from both sides and reports the call
  lifecycle.
- realtime_api: RealtimeModelLink and the header or subprotocol connectors used
  to authenticate against the Realtime API.
- telephony_link: TelephonyLink, the server side of the Twilio media stream.
- session_config: The session.update message (instructions, voice, VAD and the
  book_meeting tool schema).

Usage examples:
```python
from voice_bridge.bot.call_bridge import CallBridge
from voice_bridge.bot.realtime_api import build_connector

@app.websocket("/media-stream")
async def media_stream(websocket: WebSocket):
    bridge = CallBridge(
        websocket, settings, build_connector(settings), status_sink, booking_sink
    )
    await bridge.run()
```
"""

from voice_bridge.bot.call_bridge import CallBridge
from voice_bridge.bot.realtime_api import (
    HeaderAuthConnector,
    RealtimeModelLink,
    SubprotocolAuthConnector,
    build_connector,
)
from voice_bridge.bot.telephony_link import TelephonyLink

__all__ = [
    "CallBridge",
    "HeaderAuthConnector",
    "RealtimeModelLink",
    "SubprotocolAuthConnector",
    "TelephonyLink",
    "build_connector",
]
