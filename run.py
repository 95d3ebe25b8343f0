"""
Run script for starting the CRM Voice Bridge server.

This script configures and starts the FastAPI server with WebSocket settings
suited to streaming call audio between Twilio and the OpenAI Realtime API.

Usage:
    python run.py [--port PORT] [--host HOST] [--log-level LEVEL]
"""

import argparse
import os
import sys

import dotenv
import uvicorn

from voice_bridge.config.logging_config import configure_logging
from voice_bridge.config.settings import load_settings

# Load environment variables from .env file if it exists
dotenv.load_dotenv()


def parse_args(argv=None):
    """Parse command line arguments."""
    settings = load_settings()
    parser = argparse.ArgumentParser(description="Start the CRM Voice Bridge server")
    parser.add_argument(
        "--port",
        type=int,
        default=settings.port,
        help="Port to run the server on (default: 8000 or PORT env var)",
    )
    parser.add_argument(
        "--host",
        default=settings.host,
        help="Host to bind the server to (default: 0.0.0.0 or HOST env var)",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO").upper(),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO or LOG_LEVEL env var)",
    )
    return parser.parse_args(argv)


def main():
    """Main entry point for starting the server."""
    args = parse_args()
    os.environ["LOG_LEVEL"] = args.log_level
    logger = configure_logging(args.log_level)

    settings = load_settings()
    if not settings.openai_api_key:
        logger.error("OPENAI_API_KEY environment variable not set")
        sys.exit(1)

    logger.info(f"Starting server on http://{args.host}:{args.port}")
    logger.info(f"Voice model: {settings.realtime_model} ({settings.auth_mode} auth)")
    logger.info(f"CRM API configured: {bool(settings.crm_api_url)}")

    uvicorn.run(
        "voice_bridge.main:app",
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
        websocket_ping_interval=20,
        websocket_ping_timeout=20,
        # Disable access logs, call lifecycle is logged by the bridge
        access_log=False,
        reload=os.getenv("ENV", "production").lower() == "development",
    )


if __name__ == "__main__":
    main()
