"""Logging configuration for the application."""

import logging
import sys

from lawdesk.core.config import get_settings

# Third-party loggers that are chatty at DEBUG.
_QUIET_LOGGERS = ("botocore", "boto3", "urllib3", "s3transfer", "asyncio")


def setup_logging() -> None:
    """Configure application-wide logging.

    Level is DEBUG when settings.debug is True, otherwise INFO.
    Output goes to stdout.
    """
    settings = get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.INFO))
