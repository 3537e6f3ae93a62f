"""User-facing notification channel.

Orchestrators surface each outcome as exactly one notification. The CLI
installs a handler that prints them; tests read ``history``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum


class Level(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    level: Level
    title: str
    message: str


NotificationHandler = Callable[[Notification], None]


class Notifier:
    """Collects notifications and forwards them to an optional handler."""

    def __init__(self, handler: NotificationHandler | None = None) -> None:
        self.handler = handler
        self.history: list[Notification] = []

    def notify(self, level: Level, title: str, message: str) -> Notification:
        notification = Notification(level=level, title=title, message=message)
        self.history.append(notification)
        if self.handler is not None:
            self.handler(notification)
        return notification

    def success(self, title: str, message: str) -> Notification:
        return self.notify(Level.SUCCESS, title, message)

    def info(self, title: str, message: str) -> Notification:
        return self.notify(Level.INFO, title, message)

    def error(self, title: str, message: str) -> Notification:
        return self.notify(Level.ERROR, title, message)

    @property
    def last(self) -> Notification | None:
        return self.history[-1] if self.history else None

    @property
    def errors(self) -> list[Notification]:
        return [n for n in self.history if n.level == Level.ERROR]
