"""Domain models for tracked usage."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, IntEnum
from typing import Optional


class Category(IntEnum):
    """Productivity category; values match the ``categories`` table ids."""

    UNKNOWN = 0
    PRODUCTIVE = 1
    DISTRACTING = 2


class ItemKind(Enum):
    APPLICATION = "application"
    WEBSITE = "website"


@dataclass(slots=True, frozen=True)
class Observation:
    """Raw foreground snapshot taken on one poll tick."""

    process_executable: Optional[str] = None
    window_title: Optional[str] = None


@dataclass(slots=True, frozen=True)
class ActiveItem:
    """What the user is doing right now, after normalization."""

    label: str
    kind: ItemKind
    category_hint: Category = Category.UNKNOWN

    @property
    def is_website(self) -> bool:
        return self.kind is ItemKind.WEBSITE


UNKNOWN_ITEM = ActiveItem(label="Unknown", kind=ItemKind.APPLICATION)


@dataclass(slots=True)
class PendingCandidate:
    item: ActiveItem
    stable_count: int = 1


@dataclass(slots=True)
class Session:
    """The currently open stretch of attention on a single item."""

    item: ActiveItem
    start_time: datetime


@dataclass(slots=True, frozen=True)
class SessionRecord:
    """A finished session, ready to be persisted."""

    item: ActiveItem
    start_time: datetime
    end_time: datetime
    duration_seconds: int
