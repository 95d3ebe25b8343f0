import json
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient
from fastapi.websockets import WebSocketDisconnect

from voice_bridge import main
from voice_bridge.config.settings import BridgeSettings
from voice_bridge.main import app, build_sinks
from voice_bridge.models.call_session import CallStatus
from voice_bridge.services.call_status import HttpCallStatusSink, LoggingCallStatusSink
from voice_bridge.services.scheduling import HttpMeetingBookingSink, UnconfiguredBookingSink

client = TestClient(app)


def test_health_check():
    """Test the health check endpoint returns correct response"""
    response = client.get("/health")
    assert response.status_code == 200

    response_json = response.json()
    assert response_json["status"] == "healthy"
    assert isinstance(response_json["openai_api_key_configured"], bool)
    assert isinstance(response_json["crm_api_configured"], bool)
    assert response_json["active_calls"] == 0


def test_root_endpoint():
    """Test the root endpoint returns the correct API information"""
    response = client.get("/")
    assert response.status_code == 200

    response_json = response.json()
    assert response_json["name"] == "CRM Voice Bridge"
    assert response_json["version"] == "1.0.0"
    assert "/media-stream" in response_json["endpoints"]
    assert "/health" in response_json["endpoints"]


def test_build_sinks_without_crm():
    crm_client, status_sink, booking_sink = build_sinks(BridgeSettings())
    assert crm_client is None
    assert isinstance(status_sink, LoggingCallStatusSink)
    assert isinstance(booking_sink, UnconfiguredBookingSink)


def test_build_sinks_with_crm():
    settings = BridgeSettings(
        crm_api_url="https://crm.example.com", api_secret_key="s3cret", crm_user_id="user_1"
    )
    crm_client, status_sink, booking_sink = build_sinks(settings)

    assert crm_client.base_url == "https://crm.example.com"
    assert isinstance(status_sink, HttpCallStatusSink)
    assert isinstance(booking_sink, HttpMeetingBookingSink)
    assert booking_sink.user_id == "user_1"
    assert status_sink.client is booking_sink.client


def test_media_stream_closes_when_model_is_unreachable(fakes):
    """A call whose voice model cannot be reached is marked failed and hung up"""
    start = {
        "event": "start",
        "start": {"callSid": "CA1", "streamSid": "MZ1", "customParameters": {"leadId": "L1"}},
    }
    status_sink = AsyncMock()

    with patch.object(main, "build_connector", return_value=fakes.Connector(error=OSError("refused"))), \
            patch.object(main, "status_sink", status_sink):
        with client.websocket_connect("/media-stream") as websocket:
            websocket.send_text(json.dumps({"event": "connected", "protocol": "Call"}))
            websocket.send_text(json.dumps(start))
            with pytest.raises(WebSocketDisconnect):
                websocket.receive_text()

    statuses = [call.args[1].status for call in status_sink.update_call_status.await_args_list]
    assert statuses == [CallStatus.IN_PROGRESS, CallStatus.FAILED]
