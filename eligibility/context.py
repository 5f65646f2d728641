"""Per-run log buffer."""

import logging
from datetime import datetime, timezone
from typing import List, Optional

logger = logging.getLogger(__name__)


class RunContext:
    """Carries the log lines of one pipeline run.

    Every line is timestamped, kept in order for the caller and mirrored to
    the module logger. A context is never shared between runs.
    """

    def __init__(self, name: Optional[str] = None):
        self.name = name or "run"
        self.logs: List[str] = []

    def log(self, message: str, level: int = logging.INFO) -> None:
        stamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
        self.logs.append(f"[{stamp}] {message}")
        logger.log(level, f"[{self.name}] {message}")

    def info(self, message: str) -> None:
        self.log(message, logging.INFO)

    def warning(self, message: str) -> None:
        self.log(message, logging.WARNING)

    def error(self, message: str) -> None:
        self.log(message, logging.ERROR)


def log_to(ctx: Optional[RunContext], message: str, level: int = logging.INFO) -> None:
    """Log through the run context when there is one, else through the module logger."""
    if ctx is not None:
        ctx.log(message, level)
    else:
        logger.log(level, message)
