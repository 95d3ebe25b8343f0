"""
Call record persistence adapter.

The bridge reports call lifecycle transitions (in-progress, completed, failed)
to the CRM. Writes are best effort: a failed write is logged and never
interrupts the live call.
"""

import logging
from typing import Protocol

import httpx

from voice_bridge.config.constants import LOGGER_NAME
from voice_bridge.models.call_session import CallStatusUpdate
from voice_bridge.services.crm_client import CrmApiClient

logger = logging.getLogger(LOGGER_NAME)

UPDATE_CALL_PATH = "/api/update-call"


class CallStatusSink(Protocol):
    """Anything that can record a call status update."""

    async def update_call_status(self, call_id: str, update: CallStatusUpdate) -> None:
        ...


class HttpCallStatusSink:
    """Records call status through the CRM ``update-call`` route."""

    def __init__(self, client: CrmApiClient):
        self.client = client

    async def update_call_status(self, call_id: str, update: CallStatusUpdate) -> None:
        payload = {
            "callSid": call_id,
            "updates": update.model_dump(mode="json", exclude_none=True),
        }
        try:
            response = await self.client.post(UPDATE_CALL_PATH, payload)
        except httpx.HTTPError as e:
            logger.error(f"Failed to update call {call_id} to {update.status.value}: {e}")
            return

        if response.is_success:
            logger.info(f"Call {call_id} recorded as {update.status.value}")
        else:
            logger.warning(
                f"CRM rejected status update for call {call_id}: "
                f"{response.status_code} {response.text[:200]}"
            )


class LoggingCallStatusSink:
    """Used when no CRM is configured; status changes only go to the log."""

    async def update_call_status(self, call_id: str, update: CallStatusUpdate) -> None:
        logger.info(
            f"Call {call_id} status {update.status.value} "
            f"(meeting_scheduled={update.meeting_scheduled}, error={update.error_message})"
        )
