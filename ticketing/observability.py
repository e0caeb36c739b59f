"""Logfire observability for SDK consumers and the CLI."""

import logging

import logfire

from ticketing import __version__
from ticketing.config import Settings

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def initialize_logfire(settings: Settings) -> bool:
    """
    Initialize Logfire and instrument outgoing API traffic.

    Instruments:
    - HTTPX clients (every TickeTing API request)
    - Python logging (bridges SDK loggers to Logfire)

    Args:
        settings: Settings containing the Logfire token

    Returns:
        True when Logfire was configured, False otherwise.
    """
    if not settings.logfire_token:
        logger.warning("Logfire token not set - observability disabled")
        return False

    try:
        logfire.configure(
            token=settings.logfire_token,
            service_name="ticketing-sdk",
            service_version=__version__,
            environment="sandbox" if settings.sandbox else "production",
        )

        logfire.instrument_httpx()

        root_logger = logging.getLogger()
        root_logger.addHandler(logfire.LogfireLoggingHandler())

        logger.info("Logfire tracking initialized")
        return True

    except Exception as e:
        # Continue running - observability is optional
        logger.warning(f"Failed to initialize Logfire: {e}")
        return False
