"""
Meeting booking adapter.

Books the meeting the assistant agreed on with the caller by creating a
calendar event in the CRM. Every outcome, including transport failures, comes
back as a BookingResult so the tool handler never has to catch anything.
"""

import logging
from typing import Optional, Protocol

import httpx

from voice_bridge.config.constants import LOGGER_NAME
from voice_bridge.models.booking import BookingResult, MeetingRequest
from voice_bridge.services.crm_client import CrmApiClient

logger = logging.getLogger(LOGGER_NAME)

BOOK_MEETING_PATH = "/api/book-meeting"


class MeetingBookingSink(Protocol):
    """Anything that can book a meeting."""

    async def book_meeting(self, request: MeetingRequest) -> BookingResult:
        ...


class HttpMeetingBookingSink:
    """Books meetings through the CRM ``book-meeting`` route."""

    def __init__(self, client: CrmApiClient, user_id: Optional[str] = None):
        self.client = client
        self.user_id = user_id

    def _payload(self, request: MeetingRequest) -> dict:
        return {
            "leadId": request.lead_id,
            "contactName": request.contact_name,
            "businessType": request.business_type,
            "annualRevenue": request.annual_revenue,
            "notes": request.notes,
            "date": request.date,
            "startTime": request.start_time,
            "endTime": request.end_time,
            "userId": self.user_id,
            "description": request.description,
        }

    async def book_meeting(self, request: MeetingRequest) -> BookingResult:
        try:
            response = await self.client.post(BOOK_MEETING_PATH, self._payload(request))
        except httpx.HTTPError as e:
            logger.error(f"Booking request failed: {e}")
            return BookingResult(success=False, error=f"Booking service unreachable: {e}")

        try:
            body = response.json()
        except ValueError:
            body = {"raw": response.text}

        if not response.is_success:
            error = body.get("error") if isinstance(body, dict) else None
            logger.warning(f"Booking rejected with {response.status_code}: {body}")
            return BookingResult(success=False, error=error or f"HTTP {response.status_code}")

        data = body.get("data") if isinstance(body, dict) else body
        logger.info(f"Meeting booked for {request.date} {request.start_time}-{request.end_time}")
        return BookingResult(success=True, data=data)


class UnconfiguredBookingSink:
    """Used when no CRM is configured; every booking fails cleanly."""

    async def book_meeting(self, request: MeetingRequest) -> BookingResult:
        logger.warning(
            f"Cannot book meeting on {request.date} at {request.start_time}: CRM API not configured"
        )
        return BookingResult(success=False, error="Calendar booking is not configured")
