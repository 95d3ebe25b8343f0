"""
Models for the book_meeting tool call and the calendar booking it triggers.
"""

import re
from typing import Any, Optional, Pattern

from pydantic import BaseModel, Field, field_validator

from voice_bridge.config.constants import DEFAULT_MEETING_DURATION_MINUTES

DATE_PATTERN: Pattern = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_PATTERN: Pattern = re.compile(r"^(\d{1,2}):(\d{2})$")


class ToolInvocation(BaseModel):
    """A tool call emitted by the voice model, before its arguments are parsed."""

    call_id: str = Field(..., description="Model tool-call id, echoed in the result")
    tool_name: str
    raw_arguments: str = Field(..., description="Arguments JSON as received")


class BookMeetingArguments(BaseModel):
    """Arguments of the book_meeting tool."""

    date: str = Field(..., description="Meeting date in YYYY-MM-DD format")
    time: str = Field(..., description="Start time in HH:MM, 24-hour")
    duration_minutes: Optional[float] = Field(None, allow_inf_nan=False)
    contact_name: Optional[str] = None
    business_type: Optional[str] = None
    annual_revenue: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("date")
    def validate_date(cls, v):
        """Validate that the date looks like YYYY-MM-DD."""
        v = v.strip()
        if not DATE_PATTERN.match(v):
            raise ValueError(f"Date must be YYYY-MM-DD: {v}")
        return v

    @field_validator("time")
    def validate_time(cls, v):
        """Validate a 24-hour time and zero-pad it to HH:MM."""
        match = TIME_PATTERN.match(v.strip())
        if not match:
            raise ValueError(f"Time must be HH:MM: {v}")
        hours, minutes = int(match.group(1)), int(match.group(2))
        if hours > 23 or minutes > 59:
            raise ValueError(f"Time out of range: {v}")
        return f"{hours:02d}:{minutes:02d}"

    @property
    def effective_duration(self) -> int:
        """Whole minutes, falling back to the default when omitted or under one minute."""
        minutes = round(self.duration_minutes) if self.duration_minutes else 0
        if minutes <= 0:
            return DEFAULT_MEETING_DURATION_MINUTES
        return minutes


class MeetingRequest(BaseModel):
    """What the bridge asks the calendar to book."""

    lead_id: Optional[str] = None
    date: str
    start_time: str
    end_time: str
    contact_name: Optional[str] = None
    business_type: Optional[str] = None
    annual_revenue: Optional[str] = None
    notes: Optional[str] = None
    description: Optional[str] = None


class BookingResult(BaseModel):
    """Outcome reported by the booking sink."""

    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
