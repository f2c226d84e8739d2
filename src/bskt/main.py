"""Main entry point - runs the API server."""

import logging

import uvicorn

from bskt.api.app import create_app
from bskt.config import get_settings

logger = logging.getLogger(__name__)


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def main():
    """Main entry point."""
    settings = get_settings()
    configure_logging(settings.debug)

    logger.info("Starting bskt...")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Starting API server on {settings.api_host}:{settings.api_port}")

    uvicorn.run(
        create_app(),
        host=settings.api_host,
        port=settings.api_port,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()
