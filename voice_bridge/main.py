"""
FastAPI server bridging Twilio Media Streams calls to the OpenAI Realtime API.

This module initializes the FastAPI application that receives the telephony
media stream of each outbound sales call, hands every connection to its own
CallBridge and exposes health information for monitoring.

The CRM integrations (call status records and calendar booking) are optional:
when ``CRM_API_URL`` is not set, status changes are only logged and booking
requests fail cleanly so the assistant can tell the caller.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional, Tuple

import dotenv
from fastapi import FastAPI, WebSocket

from voice_bridge.bot.call_bridge import CallBridge
from voice_bridge.bot.realtime_api import build_connector
from voice_bridge.config.logging_config import configure_logging
from voice_bridge.config.settings import BridgeSettings, load_settings
from voice_bridge.models.call_registry import CallRegistry
from voice_bridge.services.call_status import (
    CallStatusSink,
    HttpCallStatusSink,
    LoggingCallStatusSink,
)
from voice_bridge.services.crm_client import CrmApiClient
from voice_bridge.services.scheduling import (
    HttpMeetingBookingSink,
    MeetingBookingSink,
    UnconfiguredBookingSink,
)

# Load environment variables from .env file if it exists
env_path = Path(".") / ".env"
if env_path.exists():
    dotenv.load_dotenv(env_path)

# Configure logging
logger = configure_logging()

APP_NAME = "CRM Voice Bridge"
APP_DESCRIPTION = "Bridge between Twilio Media Streams and the OpenAI Realtime API for lead calls"
APP_VERSION = "1.0.0"


def build_sinks(
    settings: BridgeSettings,
) -> Tuple[Optional[CrmApiClient], CallStatusSink, MeetingBookingSink]:
    """
    Create the CRM adapters for the given settings.

    Returns:
        tuple: The shared HTTP client (None without a CRM), the call status sink
        and the meeting booking sink
    """
    if not settings.crm_api_url:
        logger.warning("CRM_API_URL not set - call status is logged only and booking is disabled")
        return None, LoggingCallStatusSink(), UnconfiguredBookingSink()

    client = CrmApiClient(
        settings.crm_api_url,
        secret=settings.api_secret_key,
        timeout=settings.crm_api_timeout,
    )
    return (
        client,
        HttpCallStatusSink(client),
        HttpMeetingBookingSink(client, user_id=settings.crm_user_id),
    )


settings = load_settings()
crm_client, status_sink, booking_sink = build_sinks(settings)
call_registry = CallRegistry()

if not settings.openai_api_key:
    logger.warning("OPENAI_API_KEY not set - calls will fail to reach the voice model")


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    if crm_client is not None:
        await crm_client.close()
    logger.info("Server shut down")


# Create FastAPI application
app = FastAPI(
    title=APP_NAME,
    description=APP_DESCRIPTION,
    version=APP_VERSION,
    lifespan=lifespan,
)


@app.websocket("/media-stream")
async def media_stream_endpoint(websocket: WebSocket):
    """WebSocket endpoint for the Twilio media stream of one call.

    Each connection gets its own CallBridge, which opens the voice model link
    when the stream starts and tears both sides down when the call ends.
    """
    bridge = CallBridge(
        websocket,
        settings,
        build_connector(settings),
        status_sink,
        booking_sink,
        registry=call_registry,
    )
    await bridge.run()


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring system status.

    Returns:
        dict: Whether credentials are configured and how many calls are live.
    """
    return {
        "status": "healthy",
        "openai_api_key_configured": bool(settings.openai_api_key),
        "crm_api_configured": bool(settings.crm_api_url),
        "active_calls": len(call_registry),
    }


@app.get("/")
async def root():
    """Root endpoint to display basic information about the API."""
    return {
        "name": APP_NAME,
        "description": APP_DESCRIPTION,
        "version": APP_VERSION,
        "endpoints": {
            "/media-stream": "WebSocket endpoint for Twilio Media Streams",
            "/health": "Health check endpoint",
        },
    }


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting server on http://{settings.host}:{settings.port}")
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        websocket_ping_interval=20,
        websocket_ping_timeout=20,
        websocket_max_size=16777216,  # 16MB - large enough for audio chunks
    )
