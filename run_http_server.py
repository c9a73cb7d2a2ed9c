#!/usr/bin/env python
"""Entry point for running the HTTP server."""

import logging
import os
import sys

import uvicorn
from dotenv import load_dotenv

# Add the project root to the Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from fairweather.models.config import FairweatherConfig

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(
    level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


def main():
    """Run the HTTP server."""
    config = FairweatherConfig()

    if not config.weather_api_key:
        logger.warning("WEATHER_API_KEY is not set; events will be stored without weather")

    logger.info(f"Starting HTTP server on {config.http_host}:{config.http_port}")

    uvicorn.run(
        "fairweather.http_server:app",
        host=config.http_host,
        port=config.http_port,
        reload=os.getenv("DEBUG", "false").lower() == "true",
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
