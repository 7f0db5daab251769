"""Logging setup for the API process and the reminder worker."""

from __future__ import annotations

import logging
import sys
from typing import Union

_NOISY_LOGGERS = ("sqlalchemy.engine", "httpx", "httpcore", "uvicorn.access")


def configure_logging(level: Union[str, int] = logging.INFO, debug: bool = False) -> None:
    """
    Install a single stream handler on the root logger.

    Safe to call more than once: existing handlers are replaced so the
    lifespan hook and the CLI scripts do not double-log.
    """
    root = logging.getLogger()
    root.setLevel(level)

    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    root.addHandler(handler)

    # Third-party chatter only when debugging
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if debug else logging.WARNING)
