"""Main entry point for Fairweather."""

import argparse
import logging
import os

import uvicorn
from dotenv import load_dotenv

from fairweather.models.config import FairweatherConfig


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )
    # Keep request URLs (which carry the API key) out of the logs
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def main():
    """Run the Fairweather HTTP server."""
    load_dotenv()
    config = FairweatherConfig()

    parser = argparse.ArgumentParser(description="Fairweather - weather-aware event planning API")
    parser.add_argument("--host", default=config.http_host, help="Interface to bind")
    parser.add_argument("--port", type=int, default=config.http_port, help="Port to listen on")
    parser.add_argument("--db-path", default=config.db_path, help="Path of the JSON event store")
    parser.add_argument("--log-level", default=config.log_level, help="Logging level")
    args = parser.parse_args()

    configure_logging(args.log_level)
    logger = logging.getLogger(__name__)

    if not config.weather_api_key:
        logger.warning("WEATHER_API_KEY is not set; events will be stored without weather")

    # The server builds its own config at startup, so pass overrides through the environment
    os.environ["DB_PATH"] = args.db_path

    logger.info(f"Starting HTTP server on {args.host}:{args.port}")
    uvicorn.run(
        "fairweather.http_server:app",
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
    )


if __name__ == "__main__":
    main()
