"""Process-wide logging configuration."""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Third-party loggers that report every collaborator call at INFO.
NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging(level: str | None = None) -> None:
    root = logging.getLogger()
    if root.handlers:
        return

    logging.basicConfig(level=(level or os.getenv("LOG_LEVEL", "INFO")).upper(), format=LOG_FORMAT)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
