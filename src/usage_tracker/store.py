"""Persistence boundary used by the session tracker."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol

from . import db
from .models import Category

logger = logging.getLogger(__name__)


class ActivityStore(Protocol):
    def lookup_or_create_application(self, name: str, category: Category) -> int:
        ...

    def lookup_or_create_website(self, domain: str, category: Category) -> int:
        ...

    def append_activity_record(
        self,
        app_id: Optional[int],
        site_id: Optional[int],
        start_time: datetime,
        end_time: datetime,
        duration_seconds: int,
    ) -> None:
        ...

    def is_focus_mode_enabled(self) -> bool:
        ...

    def is_application_blocked(self, name: str) -> bool:
        ...

    def is_website_blocked(self, domain: str) -> bool:
        ...


class SqliteActivityStore:
    """ActivityStore backed by a single shared SQLite connection."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self._conn = db.open_database(self.db_path, check_same_thread=False)
        self._lock = threading.Lock()

    def lookup_or_create_application(self, name: str, category: Category) -> int:
        with self._lock:
            return db.upsert_application(self._conn, name, category)

    def lookup_or_create_website(self, domain: str, category: Category) -> int:
        with self._lock:
            return db.upsert_website(self._conn, domain, category)

    def append_activity_record(
        self,
        app_id: Optional[int],
        site_id: Optional[int],
        start_time: datetime,
        end_time: datetime,
        duration_seconds: int,
    ) -> None:
        with self._lock:
            db.insert_activity_record(
                self._conn, app_id, site_id, start_time, end_time, duration_seconds
            )

    def is_focus_mode_enabled(self) -> bool:
        with self._lock:
            return db.get_focus_mode(self._conn)

    def is_application_blocked(self, name: str) -> bool:
        with self._lock:
            return db.is_application_blocked(self._conn, name)

    def is_website_blocked(self, domain: str) -> bool:
        with self._lock:
            return db.is_website_blocked(self._conn, domain)

    def close(self) -> None:
        with self._lock:
            self._conn.close()
        logger.debug("Closed activity store at %s", self.db_path)
