"""User-visible notifications.

Operations report success or failure as short dismissable messages. A
``Notifier`` lives for one request, collects the messages, and the view
returns them in the ``notifications`` field of its JSON body.
"""

from typing import Literal

from pydantic import BaseModel

from libs.common.logging import get_logger

logger = get_logger(__name__)

NotificationVariant = Literal["default", "destructive"]


class Notification(BaseModel):
    title: str
    description: str
    variant: NotificationVariant = "default"


class Notifier:
    """Collects notifications raised while handling a request."""

    def __init__(self) -> None:
        self._items: list[Notification] = []

    def notify(
        self, title: str, description: str, variant: NotificationVariant = "default"
    ) -> Notification:
        notification = Notification(
            title=title, description=description, variant=variant
        )
        self._items.append(notification)

        log = logger.warning if variant == "destructive" else logger.info
        log(
            "Notification raised",
            extra={"extra_fields": {"title": title, "variant": variant}},
        )
        return notification

    def success(self, title: str, description: str) -> Notification:
        return self.notify(title, description)

    def error(self, title: str, description: str) -> Notification:
        return self.notify(title, description, variant="destructive")

    def as_list(self) -> list[Notification]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)
