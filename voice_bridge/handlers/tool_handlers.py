"""
Executes tool calls made by the voice model during a call.

The only registered tool is ``book_meeting``. The handler parses and validates
the arguments, computes the meeting end time, asks the booking sink to create
the calendar event and turns the outcome into the JSON payload that goes back
to the model as a ``function_call_output`` item. It never raises: booking
failures become ``{"success": false}`` so the assistant can recover out loud.
"""

import json
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from voice_bridge.config.constants import (
    BOOK_MEETING_TOOL_NAME,
    DEFAULT_LEAD_NAME,
    LOGGER_NAME,
)
from voice_bridge.models.booking import BookMeetingArguments, MeetingRequest, ToolInvocation
from voice_bridge.models.call_session import CallSession
from voice_bridge.services.scheduling import MeetingBookingSink

logger = logging.getLogger(LOGGER_NAME)


def compute_end_time(start_time: str, duration_minutes: int) -> str:
    """
    Add a duration to an HH:MM start time on a 24-hour clock.

    Hours wrap modulo 24, so a meeting may end after midnight on the same date:
    ``compute_end_time("23:30", 90) == "01:00"``.
    """
    hours, minutes = (int(part) for part in start_time.split(":"))
    total_minutes = minutes + duration_minutes
    end_hours = (hours + total_minutes // 60) % 24
    end_minutes = total_minutes % 60
    return f"{end_hours:02d}:{end_minutes:02d}"


def build_meeting_description(
    arguments: BookMeetingArguments, contact_name: str, lead_id: Optional[str]
) -> str:
    """Calendar event body with the qualification details gathered on the call."""
    return (
        f"Interview with {contact_name}\n\n"
        f"Business: {arguments.business_type or 'Unknown business'}\n"
        f"Annual Revenue: {arguments.annual_revenue or 'Not disclosed'}\n\n"
        f"Notes:\n{arguments.notes or 'No additional notes'}\n\n"
        f"Lead ID: {lead_id or 'N/A'}"
    )


class BookMeetingHandler:
    """Books meetings requested by the voice model."""

    def __init__(self, booking_sink: MeetingBookingSink):
        self.booking_sink = booking_sink

    def parse_arguments(self, invocation: ToolInvocation) -> Optional[BookMeetingArguments]:
        """Parse the raw JSON arguments, returning None if they are unusable."""
        try:
            return BookMeetingArguments.model_validate_json(invocation.raw_arguments)
        except ValidationError as e:
            logger.error(
                f"Invalid arguments for {invocation.tool_name} (call_id {invocation.call_id}): {e}"
            )
            return None

    def build_request(self, arguments: BookMeetingArguments, session: CallSession) -> MeetingRequest:
        """Turn validated tool arguments into a booking request for this call's lead."""
        contact_name = arguments.contact_name
        if not contact_name:
            if session.lead_display_name != DEFAULT_LEAD_NAME:
                contact_name = session.lead_display_name
            else:
                contact_name = "Prospect"

        return MeetingRequest(
            lead_id=session.lead_id,
            date=arguments.date,
            start_time=arguments.time,
            end_time=compute_end_time(arguments.time, arguments.effective_duration),
            contact_name=contact_name,
            business_type=arguments.business_type,
            annual_revenue=arguments.annual_revenue,
            notes=arguments.notes,
            description=build_meeting_description(arguments, contact_name, session.lead_id),
        )

    async def execute(
        self, invocation: ToolInvocation, session: CallSession
    ) -> Optional[Dict[str, Any]]:
        """
        Run a tool invocation against the booking sink.

        Args:
            invocation: The tool call emitted by the model
            session: The call the tool was invoked in; its meeting flag is set on success

        Returns:
            The result payload for the model, or None when the call cannot be
            answered (unknown tool or unparsable arguments)
        """
        if invocation.tool_name != BOOK_MEETING_TOOL_NAME:
            logger.warning(f"Ignoring call to unknown tool: {invocation.tool_name}")
            return None

        arguments = self.parse_arguments(invocation)
        if arguments is None:
            return None

        if session.meeting_scheduled:
            logger.warning(
                f"Call {session.call_id} already has a meeting booked; booking again "
                f"(call_id {invocation.call_id})"
            )

        try:
            request = self.build_request(arguments, session)
        except Exception as e:
            logger.error(
                f"Could not build booking request for call_id {invocation.call_id}: {e}",
                exc_info=True,
            )
            return {"success": False, "message": "Failed to schedule the meeting"}

        logger.info(
            f"Booking meeting for lead {session.lead_id or 'N/A'} on {request.date} "
            f"{request.start_time}-{request.end_time}"
        )

        try:
            result = await self.booking_sink.book_meeting(request)
        except Exception as e:
            logger.error(f"Booking sink raised for call_id {invocation.call_id}: {e}", exc_info=True)
            return {"success": False, "message": "Failed to schedule the meeting"}

        if result.success:
            session.mark_meeting_scheduled()
            return {"success": True, "message": "Meeting scheduled successfully"}

        logger.warning(f"Meeting booking failed: {result.error}")
        return {"success": False, "message": "Failed to schedule the meeting"}


def format_tool_output(result: Dict[str, Any]) -> str:
    """Serialize a tool result for the function_call_output item."""
    return json.dumps(result)
