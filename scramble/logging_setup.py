"""Centralised logging initialisation for Scramble.

- Configures a Rich console handler and a rotating file handler.
- Avoids duplicate handlers on repeated calls.
- Provides `TURN_ID_VAR`, a ContextVar carrying the current game/turn id.
"""
from __future__ import annotations

import logging
import os
from contextvars import ContextVar
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.logging import RichHandler

# Id of the game turn in progress, set by the turn controller
TURN_ID_VAR: ContextVar[str] = ContextVar("turn_id", default="-")


class _TurnIdFilter(logging.Filter):
    """Copies `turn_id` from the ContextVar onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.turn_id = TURN_ID_VAR.get()
        return True


def default_log_path() -> str:
    """Default log file location, overridable with `SCRAMBLE_LOG_PATH`."""

    env = os.getenv("SCRAMBLE_LOG_PATH")
    if env:
        return env
    return str(Path.home() / ".scramble" / "scramble.log")


def configure_logging(*, log_path: str | None = None) -> logging.Logger:
    """Set up logging once and return the project logger.

    - Rich on the console (readable tracebacks)
    - Rotating file handler (~1 MB, 5 backups)
    - Format includes `turn_id` from `TURN_ID_VAR`
    """

    root = logging.getLogger()
    if root.handlers:
        return logging.getLogger("scramble")

    root.setLevel(logging.INFO)
    turn_filter = _TurnIdFilter()

    ch = RichHandler(rich_tracebacks=True)
    ch.setLevel(logging.INFO)
    ch.addFilter(turn_filter)
    ch.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(ch)

    path = Path(log_path or default_log_path())
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(path, maxBytes=1_000_000, backupCount=5, encoding="utf-8")
    except OSError as exc:
        # Keep console logging when the file is unavailable
        logging.getLogger("scramble").warning("log_file_unavailable path=%s error=%s", path, exc)
    else:
        fh.setLevel(logging.DEBUG)
        fh.addFilter(turn_filter)
        fh.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)s %(name)s [turn=%(turn_id)s] %(message)s"
            )
        )
        root.addHandler(fh)

    return logging.getLogger("scramble")
