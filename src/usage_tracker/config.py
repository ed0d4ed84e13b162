"""Configuration models and helpers for the usage tracker."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta

from .models import ActiveItem, Category


@dataclass(slots=True, frozen=True)
class CategoryPolicy:
    """Category applied to a finished session whose item has no category hint."""

    application: Category = Category.PRODUCTIVE
    website: Category = Category.DISTRACTING

    def resolve(self, item: ActiveItem) -> Category:
        if item.category_hint is not Category.UNKNOWN:
            return item.category_hint
        return self.website if item.is_website else self.application


@dataclass(slots=True)
class TrackerSettings:
    """Runtime configuration for the session tracker."""

    poll_interval: timedelta = timedelta(seconds=4)
    debounce_count: int = 2
    min_log_duration: timedelta = timedelta(seconds=2)
    notification_cooldown: timedelta = timedelta(seconds=30)
    stop_timeout: timedelta = timedelta(seconds=3)
    category_policy: CategoryPolicy = field(default_factory=CategoryPolicy)

    def __post_init__(self) -> None:
        if self.debounce_count < 1:
            raise ValueError("debounce_count must be at least 1")
        if self.poll_interval <= timedelta(0):
            raise ValueError("poll_interval must be positive")

    @property
    def min_log_seconds(self) -> int:
        return int(self.min_log_duration.total_seconds())

    @classmethod
    def from_intervals(
        cls,
        poll_seconds: float,
        debounce_count: int = 2,
        min_log_seconds: float = 2.0,
        cooldown_seconds: float = 30.0,
        stop_timeout_seconds: float = 3.0,
        category_policy: CategoryPolicy | None = None,
    ) -> "TrackerSettings":
        return cls(
            poll_interval=timedelta(seconds=poll_seconds),
            debounce_count=debounce_count,
            min_log_duration=timedelta(seconds=min_log_seconds),
            notification_cooldown=timedelta(seconds=cooldown_seconds),
            stop_timeout=timedelta(seconds=stop_timeout_seconds),
            category_policy=category_policy or CategoryPolicy(),
        )
