"""
Notification sinks.

The batch flow reports user-facing notices (added files, rejections,
submission results) to a sink. The sink is an external collaborator;
two in-process implementations are provided.
"""

import logging
from typing import List, Protocol, Tuple

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """User notification channel."""

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LoggingNotifier:
    """Writes notices to the log. Used when no UI sink is attached."""

    def success(self, message: str) -> None:
        logger.info(f"[NOTICE] {message}")

    def error(self, message: str) -> None:
        logger.warning(f"[NOTICE] {message}")


class RecordingNotifier:
    """Keeps notices in memory as (level, message) pairs."""

    def __init__(self):
        self.notices: List[Tuple[str, str]] = []

    def success(self, message: str) -> None:
        self.notices.append(("success", message))

    def error(self, message: str) -> None:
        self.notices.append(("error", message))

    @property
    def errors(self) -> List[str]:
        return [m for level, m in self.notices if level == "error"]

    @property
    def successes(self) -> List[str]:
        return [m for level, m in self.notices if level == "success"]

    def clear(self) -> None:
        self.notices.clear()
