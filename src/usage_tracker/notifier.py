"""User alerts and the cooldown that rate-limits them."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional, Protocol

from plyer import notification

logger = logging.getLogger(__name__)

APP_TITLE = "Usage Tracker"


class Notifier(Protocol):
    def notify(self, title: str, message: str) -> None:
        ...


class PlyerNotifier:
    """Desktop toast notifications through plyer."""

    def __init__(self, timeout: int = 5) -> None:
        self.timeout = timeout

    def notify(self, title: str, message: str) -> None:
        logger.debug("Showing notification: %s - %s", title, message)
        notification.notify(
            title=title,
            message=message,
            app_name=APP_TITLE,
            timeout=self.timeout,
        )


class LogNotifier:
    """Console fallback used when desktop notifications are turned off."""

    def notify(self, title: str, message: str) -> None:
        logger.warning("[Notification] %s - %s", title, message)


class NotificationCooldown:
    """Tracks when the last alert fired for the open session."""

    def __init__(self, period: timedelta) -> None:
        self.period = period
        self.last_fired_at: Optional[datetime] = None

    def ready(self, now: datetime) -> bool:
        return self.last_fired_at is None or now - self.last_fired_at >= self.period

    def mark(self, now: datetime) -> None:
        self.last_fired_at = now

    def reset(self) -> None:
        self.last_fired_at = None
