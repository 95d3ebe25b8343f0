"""
CRM Voice Bridge - Twilio Media Streams to OpenAI Realtime API

This application connects the live audio of an outbound sales call, delivered
by Twilio Media Streams, to OpenAI's Realtime API. The voice model talks to the
lead, qualifies them and books a follow-up meeting through the CRM calendar
while the call is still in progress.

Architecture Overview:
- FastAPI server exposing the telephony media stream WebSocket endpoint
- One bridge per call, owning its state; nothing is shared between calls
- G.711 u-law audio relayed in both directions without transcoding
- book_meeting tool executed against the CRM and reported back to the model
- Call lifecycle (in-progress, completed, failed) recorded in the CRM

Key Components:
- bot: The call bridge, the voice model link, the telephony link and the
  session configuration sent to the model
- config: Constants, environment settings and logging setup
- handlers: Tool call execution (meeting booking)
- models: Pydantic message schemas and per-call state
- services: CRM API adapters for call status and calendar booking

Getting Started:
1. Set up environment variables:
   - OPENAI_API_KEY: Your OpenAI API key
   - CRM_API_URL / API_SECRET_KEY: CRM web app and its internal API secret
   - PORT / HOST: Server bind (default 0.0.0.0:8000)
   - LOG_LEVEL: Logging level (default INFO)

2. Start the server:
   ```bash
   python -m voice_bridge.main
   ```

3. Point the Twilio ``<Stream>`` of the outbound call TwiML at
   ``wss://your-server/media-stream`` with ``leadId`` and ``leadName``
   custom parameters.
"""
