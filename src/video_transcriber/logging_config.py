from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging(log_level: str = "INFO") -> None:
    """Send log records to the console at ``log_level``."""

    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(numeric_level)

    # Remove existing handlers
    while root.handlers:
        root.handlers.pop()

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(console)

    # urllib3 logs every connection at DEBUG, including request URLs.
    logging.getLogger("urllib3").setLevel(max(numeric_level, logging.INFO))
