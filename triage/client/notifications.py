"""
Toast-style feedback ("Analysis complete", "Emergency contact notified").
Components receive a Notifier through their constructor; there is no global instance.
"""

from typing import Literal, NamedTuple, Protocol

from triage.logging_structured import log_client_event

Variant = Literal["default", "success", "destructive"]


class Notifier(Protocol):
    def notify(self, title: str, message: str = "", *, variant: Variant = "default") -> None: ...


class Notification(NamedTuple):
    title: str
    message: str
    variant: Variant


class LoggingNotifier:
    """Default notifier for headless use: one JSON log line per notification."""

    def notify(self, title: str, message: str = "", *, variant: Variant = "default") -> None:
        log_client_event("notification", title=title, message=message, variant=variant)


class RecordingNotifier:
    """Keeps notifications in memory, newest last."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def notify(self, title: str, message: str = "", *, variant: Variant = "default") -> None:
        self.notifications.append(Notification(title, message, variant))
