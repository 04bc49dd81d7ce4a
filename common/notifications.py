"""User-visible transient notifications (toasts).

Services emit notifications through a notifier injected at construction time.
Views hand a ``CollectingNotifier`` to the service and return what it gathered
alongside the response payload.
"""

from dataclasses import dataclass

SUCCESS = "success"
INFO = "info"
ERROR = "error"


@dataclass(frozen=True)
class Notification:
    level: str
    message: str

    def as_dict(self) -> dict:
        return {"level": self.level, "message": self.message}


class Notifier:
    """Base notifier; discards everything."""

    def notify(self, level: str, message: str) -> None:
        return None

    def success(self, message: str) -> None:
        self.notify(SUCCESS, message)

    def info(self, message: str) -> None:
        self.notify(INFO, message)

    def error(self, message: str) -> None:
        self.notify(ERROR, message)


class CollectingNotifier(Notifier):
    def __init__(self):
        self.notifications: list[Notification] = []

    def notify(self, level: str, message: str) -> None:
        self.notifications.append(Notification(level=level, message=message))

    @property
    def errors(self) -> list[Notification]:
        return [n for n in self.notifications if n.level == ERROR]

    def as_list(self) -> list[dict]:
        return [n.as_dict() for n in self.notifications]
