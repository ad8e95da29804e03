"""User-facing notices raised by the wizard."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


class NoticeLevel(str, Enum):
    """Severity of a notice shown to the user."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class Notice:
    """A short, actionable message for the user.

    Attributes:
        level: Notice severity
        message: Text shown to the user
        timestamp: When the notice was raised
    """

    level: NoticeLevel
    message: str
    timestamp: datetime = field(default_factory=datetime.utcnow)

    def __str__(self) -> str:
        return f"[{self.level.value}] {self.message}"


class Notifier:
    """Collects notices and fans them out to listeners.

    Views subscribe with `add_listener`; tests inspect `notices`.
    """

    def __init__(self) -> None:
        self.notices: list[Notice] = []
        self._listeners: list[Callable[[Notice], None]] = []

    def add_listener(self, listener: Callable[[Notice], None]) -> None:
        """Register a callback invoked for every new notice."""
        self._listeners.append(listener)

    def notify(self, level: NoticeLevel, message: str) -> Notice:
        notice = Notice(level=level, message=message)
        self.notices.append(notice)
        logger.debug(f"Notice raised: {notice}")
        for listener in self._listeners:
            listener(notice)
        return notice

    def info(self, message: str) -> Notice:
        return self.notify(NoticeLevel.INFO, message)

    def success(self, message: str) -> Notice:
        return self.notify(NoticeLevel.SUCCESS, message)

    def warning(self, message: str) -> Notice:
        return self.notify(NoticeLevel.WARNING, message)

    def error(self, message: str) -> Notice:
        return self.notify(NoticeLevel.ERROR, message)

    @property
    def last(self) -> Notice | None:
        """Most recent notice, if any."""
        return self.notices[-1] if self.notices else None

    def messages(self, level: NoticeLevel | None = None) -> list[str]:
        """Messages raised so far, optionally filtered by level."""
        return [n.message for n in self.notices if level is None or n.level == level]

    def clear(self) -> None:
        self.notices.clear()
