"""Logging configuration shared by the CLI and the web service."""

from __future__ import annotations

import logging
import sys

NOISY_LOGGERS = ("httpx", "httpcore", "urllib3", "uvicorn.access", "multipart")


def setup_logging(level: str = "INFO", verbose: bool = False):
    """Configure root logging.

    Verbose mode logs at DEBUG with module names and timestamps; otherwise
    only the message is printed.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            handlers=[logging.StreamHandler(sys.stdout)],
        )
    else:
        logging.basicConfig(
            level=getattr(logging, level.upper(), logging.INFO),
            format="%(message)s",
            handlers=[logging.StreamHandler(sys.stdout)],
        )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
