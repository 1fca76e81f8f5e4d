"""
Logging setup for the account service.
"""
import logging
import os
import sys

from ..config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s:%(message)s"


def configure_logging(settings: Settings) -> None:
    """
    Send logs to stdout and, when LOG_DIR is set, to LOG_DIR/account_service.log.

    Args:
        settings: Application settings providing LOG_LEVEL and LOG_DIR
    """
    handlers = [logging.StreamHandler(sys.stdout)]

    # Try to add file handler, but continue without it if directory creation fails
    if settings.LOG_DIR:
        try:
            os.makedirs(settings.LOG_DIR, exist_ok=True)
            handlers.append(logging.FileHandler(os.path.join(settings.LOG_DIR, "account_service.log")))
        except OSError as e:
            print(f"WARNING: Could not set up file logging: {e}", file=sys.stderr)

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
