"""
Builds the session.update message sent when the voice model link opens.

Audio is G.711 u-law in both directions so telephony payloads can be forwarded
without transcoding. The assistant instructions get today's date and the lead's
name interpolated for every call.
"""

from datetime import date
from typing import Optional

from voice_bridge.config.constants import BOOK_MEETING_TOOL_NAME, DEFAULT_LEAD_NAME
from voice_bridge.config.settings import BridgeSettings
from voice_bridge.models.realtime_schemas import (
    FunctionTool,
    SessionConfig,
    SessionUpdateEvent,
    TurnDetection,
)

SYSTEM_INSTRUCTIONS = """You are a friendly scheduling assistant calling on behalf of {business_name}.

TODAY'S DATE: {today}

The person you are calling filled out a form or chatted with us before, so you already know their name: {lead_name}. Do not ask for it again.

ON THE CALL:
- Keep responses short; this is a phone call, not a chat.
- Answer their questions before moving on, and never be pushy.
- Ask what kind of business they run, roughly what their annual revenue is, and what challenges they are dealing with.

BOOKING:
- Ask when would be a good time for a follow-up meeting; suggest weekday business hours if they are unsure.
- Once they choose, call the {tool_name} tool with the date (YYYY-MM-DD), the start time (HH:MM, 24-hour) and everything you learned.
- If the tool reports success, confirm the date and time out loud.
- If it reports a failure, apologise, and offer to have someone follow up to confirm a time.
"""

BOOK_MEETING_TOOL = FunctionTool(
    name=BOOK_MEETING_TOOL_NAME,
    description="Books a meeting in the calendar with the business qualification information from the call",
    parameters={
        "type": "object",
        "properties": {
            "date": {
                "type": "string",
                "description": "Meeting date in YYYY-MM-DD format",
            },
            "time": {
                "type": "string",
                "description": "Meeting start time in HH:MM format (24-hour)",
            },
            "duration_minutes": {
                "type": "number",
                "description": "Duration of the meeting in minutes (default 60)",
            },
            "contact_name": {
                "type": "string",
                "description": "Name of the person you spoke with",
            },
            "business_type": {
                "type": "string",
                "description": "Type of business (e.g., roofing, plumbing, HVAC)",
            },
            "annual_revenue": {
                "type": "string",
                "description": "Approximate annual revenue (e.g., \"$500K\", \"$1M-2M\")",
            },
            "notes": {
                "type": "string",
                "description": "Challenges, goals, or other context discussed",
            },
        },
        "required": ["date", "time"],
    },
)


def build_instructions(
    settings: BridgeSettings, lead_name: Optional[str] = None, today: Optional[date] = None
) -> str:
    """Fill the instruction template for one call."""
    today = today or date.today()
    return SYSTEM_INSTRUCTIONS.format(
        business_name=settings.business_name,
        today=today.isoformat(),
        lead_name=lead_name or DEFAULT_LEAD_NAME,
        tool_name=BOOK_MEETING_TOOL_NAME,
    )


def build_session_update(
    settings: BridgeSettings, lead_name: Optional[str] = None, today: Optional[date] = None
) -> SessionUpdateEvent:
    """
    Create the session.update event for a new call.

    Args:
        settings: Deployment settings (voice and VAD parameters)
        lead_name: Display name of the lead being called
        today: Date to put in the instructions, defaults to the current date

    Returns:
        SessionUpdateEvent ready to be serialized onto the model link
    """
    return SessionUpdateEvent(
        session=SessionConfig(
            instructions=build_instructions(settings, lead_name, today),
            voice=settings.voice,
            turn_detection=TurnDetection(
                threshold=settings.vad_threshold,
                prefix_padding_ms=settings.vad_prefix_padding_ms,
                silence_duration_ms=settings.vad_silence_duration_ms,
            ),
            tools=[BOOK_MEETING_TOOL],
        )
    )
