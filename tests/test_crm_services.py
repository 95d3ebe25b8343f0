"""
Tests for the CRM API adapters (call status and meeting booking).

Requests are answered by an ``httpx.MockTransport`` so nothing leaves the process.
"""

import json

import httpx
import pytest

from voice_bridge.models.booking import MeetingRequest
from voice_bridge.models.call_session import CallStatus, CallStatusUpdate
from voice_bridge.services.call_status import HttpCallStatusSink, LoggingCallStatusSink
from voice_bridge.services.crm_client import CrmApiClient
from voice_bridge.services.scheduling import HttpMeetingBookingSink, UnconfiguredBookingSink


def make_client(handler, requests):
    def recording_handler(request):
        requests.append(request)
        return handler(request)

    return CrmApiClient(
        "https://crm.example.com/",
        secret="s3cret",
        transport=httpx.MockTransport(recording_handler),
    )


@pytest.fixture
def meeting_request():
    return MeetingRequest(
        lead_id="L1",
        date="2025-03-10",
        start_time="14:00",
        end_time="15:00",
        contact_name="Sam",
        business_type="roofing",
        description="Interview with Sam",
    )


@pytest.mark.asyncio
async def test_status_update_payload():
    requests = []
    client = make_client(lambda request: httpx.Response(200, json={"success": True}), requests)
    sink = HttpCallStatusSink(client)

    await sink.update_call_status(
        "CA1",
        CallStatusUpdate(status=CallStatus.COMPLETED, transcript="Hello", meeting_scheduled=True),
    )
    await client.close()

    assert len(requests) == 1
    request = requests[0]
    assert request.method == "POST"
    assert str(request.url) == "https://crm.example.com/api/update-call"
    assert request.headers["Authorization"] == "Bearer s3cret"
    assert json.loads(request.content) == {
        "callSid": "CA1",
        "updates": {"status": "completed", "transcript": "Hello", "meeting_scheduled": True},
    }


@pytest.mark.asyncio
async def test_failed_status_update_payload():
    requests = []
    client = make_client(lambda request: httpx.Response(200, json={}), requests)

    await HttpCallStatusSink(client).update_call_status(
        "CA1", CallStatusUpdate(status=CallStatus.FAILED, error_message="Voice model connection lost")
    )
    await client.close()

    assert json.loads(requests[0].content)["updates"] == {
        "status": "failed",
        "error_message": "Voice model connection lost",
    }


@pytest.mark.asyncio
async def test_status_update_errors_are_swallowed():
    def unreachable(request):
        raise httpx.ConnectError("connection refused", request=request)

    requests = []
    client = make_client(unreachable, requests)
    sink = HttpCallStatusSink(client)

    await sink.update_call_status("CA1", CallStatusUpdate(status=CallStatus.IN_PROGRESS))

    rejected = make_client(lambda request: httpx.Response(500, text="boom"), [])
    await HttpCallStatusSink(rejected).update_call_status(
        "CA1", CallStatusUpdate(status=CallStatus.IN_PROGRESS)
    )
    await client.close()
    await rejected.close()


@pytest.mark.asyncio
async def test_logging_status_sink():
    await LoggingCallStatusSink().update_call_status(
        "CA1", CallStatusUpdate(status=CallStatus.COMPLETED)
    )


@pytest.mark.asyncio
async def test_booking_success(meeting_request):
    requests = []
    client = make_client(
        lambda request: httpx.Response(200, json={"success": True, "data": {"eventId": "evt_1"}}),
        requests,
    )
    sink = HttpMeetingBookingSink(client, user_id="user_1")

    result = await sink.book_meeting(meeting_request)
    await client.close()

    assert result.success is True
    assert result.data == {"eventId": "evt_1"}
    assert str(requests[0].url) == "https://crm.example.com/api/book-meeting"
    payload = json.loads(requests[0].content)
    assert payload["leadId"] == "L1"
    assert payload["date"] == "2025-03-10"
    assert payload["startTime"] == "14:00"
    assert payload["endTime"] == "15:00"
    assert payload["userId"] == "user_1"
    assert payload["contactName"] == "Sam"
    assert payload["description"] == "Interview with Sam"


@pytest.mark.asyncio
async def test_booking_rejected(meeting_request):
    client = make_client(
        lambda request: httpx.Response(409, json={"error": "Slot already booked"}), []
    )

    result = await HttpMeetingBookingSink(client).book_meeting(meeting_request)
    await client.close()

    assert result.success is False
    assert result.error == "Slot already booked"


@pytest.mark.asyncio
async def test_booking_rejected_without_json(meeting_request):
    client = make_client(lambda request: httpx.Response(502, text="Bad gateway"), [])

    result = await HttpMeetingBookingSink(client).book_meeting(meeting_request)
    await client.close()

    assert result.success is False
    assert result.error == "HTTP 502"


@pytest.mark.asyncio
async def test_booking_unreachable(meeting_request):
    def timeout(request):
        raise httpx.ReadTimeout("timed out", request=request)

    client = make_client(timeout, [])

    result = await HttpMeetingBookingSink(client).book_meeting(meeting_request)
    await client.close()

    assert result.success is False
    assert "unreachable" in result.error


@pytest.mark.asyncio
async def test_unconfigured_booking(meeting_request):
    result = await UnconfiguredBookingSink().book_meeting(meeting_request)
    assert result.success is False
    assert result.error == "Calendar booking is not configured"


@pytest.mark.asyncio
async def test_client_without_secret_sends_no_auth_header():
    requests = []
    client = CrmApiClient(
        "https://crm.example.com",
        transport=httpx.MockTransport(lambda request: requests.append(request) or httpx.Response(200)),
    )

    await client.post("/api/update-call", {})
    await client.close()

    assert "Authorization" not in requests[0].headers
