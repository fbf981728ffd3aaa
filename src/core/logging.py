"""Logging setup shared by the API process and scripts."""
import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install the root handler and level. Safe to call more than once."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, force=True)
    # Access logging is done by RequestLoggingMiddleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
