"""SQLite database layer for applications, websites and activity sessions."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterator, Optional

from .domains import normalize_domain
from .models import Category
from .normalization import normalize_app_name, normalize_site_key


DATETIME_FMT = "%Y-%m-%d %H:%M:%S.%f"

FOCUS_MODE_KEY = "focus_mode_enabled"


def open_database(path: Path, *, check_same_thread: bool = True) -> sqlite3.Connection:
    """Open (and initialize) the SQLite database."""
    conn = sqlite3.connect(
        path,
        isolation_level=None,
        check_same_thread=check_same_thread,
    )
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode = WAL;")
    enable_foreign_keys(conn)
    initialize_schema(conn)
    return conn


@contextmanager
def database_connection(
    path: Path, *, check_same_thread: bool = True
) -> Iterator[sqlite3.Connection]:
    conn = open_database(path, check_same_thread=check_same_thread)
    try:
        yield conn
    finally:
        conn.close()


def enable_foreign_keys(conn: sqlite3.Connection) -> None:
    conn.execute("PRAGMA foreign_keys = ON;")


def initialize_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS categories (
            category_id INTEGER PRIMARY KEY,
            name TEXT UNIQUE NOT NULL
        );

        CREATE TABLE IF NOT EXISTS applications (
            app_id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT UNIQUE NOT NULL,
            category_id INTEGER REFERENCES categories(category_id)
        );

        CREATE TABLE IF NOT EXISTS websites (
            site_id INTEGER PRIMARY KEY AUTOINCREMENT,
            url TEXT UNIQUE NOT NULL,
            category_id INTEGER REFERENCES categories(category_id)
        );

        CREATE TABLE IF NOT EXISTS activity_log (
            log_id INTEGER PRIMARY KEY AUTOINCREMENT,
            app_id INTEGER REFERENCES applications(app_id),
            site_id INTEGER REFERENCES websites(site_id),
            start_time TEXT NOT NULL,
            end_time TEXT NOT NULL,
            duration_seconds INTEGER NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_activity_start_time
            ON activity_log(start_time);

        CREATE TABLE IF NOT EXISTS blocked_apps (
            app_id INTEGER PRIMARY KEY REFERENCES applications(app_id)
        );

        CREATE TABLE IF NOT EXISTS blocked_websites (
            site_id INTEGER PRIMARY KEY REFERENCES websites(site_id)
        );

        CREATE TABLE IF NOT EXISTS settings (
            key TEXT PRIMARY KEY,
            value TEXT
        );
        """
    )
    conn.executemany(
        "INSERT OR IGNORE INTO categories (category_id, name) VALUES (?, ?)",
        [(int(category), category.name.title()) for category in Category],
    )


def upsert_application(
    conn: sqlite3.Connection, raw_name: str, category: Category
) -> int:
    """Insert the application if it is new and return its id (-1 if missing)."""
    name = normalize_app_name(raw_name)
    if not name:
        return -1
    conn.execute(
        "INSERT OR IGNORE INTO applications (name, category_id) VALUES (?, ?)",
        (name, int(category)),
    )
    row = conn.execute(
        "SELECT app_id FROM applications WHERE name = ?", (name,)
    ).fetchone()
    return row["app_id"] if row else -1


def upsert_website(conn: sqlite3.Connection, domain: str, category: Category) -> int:
    """Insert the website if it is new and return its id (-1 if missing)."""
    url = domain.strip()
    if not url:
        return -1
    conn.execute(
        "INSERT OR IGNORE INTO websites (url, category_id) VALUES (?, ?)",
        (url, int(category)),
    )
    row = conn.execute("SELECT site_id FROM websites WHERE url = ?", (url,)).fetchone()
    return row["site_id"] if row else -1


def insert_activity_record(
    conn: sqlite3.Connection,
    app_id: Optional[int],
    site_id: Optional[int],
    start_time: datetime,
    end_time: datetime,
    duration_seconds: int,
) -> None:
    if (app_id is None) == (site_id is None):
        raise ValueError("exactly one of app_id and site_id is required")
    conn.execute(
        """
        INSERT INTO activity_log (
            app_id,
            site_id,
            start_time,
            end_time,
            duration_seconds
        ) VALUES (?, ?, ?, ?, ?)
        """,
        (
            app_id,
            site_id,
            start_time.strftime(DATETIME_FMT),
            end_time.strftime(DATETIME_FMT),
            duration_seconds,
        ),
    )


def fetch_sessions_for_day(
    conn: sqlite3.Connection, day: datetime
) -> list[sqlite3.Row]:
    """Fetch individual session records that started on the provided day."""
    start = day.replace(hour=0, minute=0, second=0, microsecond=0)
    end = start + timedelta(days=1)
    return list(
        conn.execute(
            """
            SELECT
                l.log_id,
                l.start_time,
                l.end_time,
                l.duration_seconds,
                COALESCE(a.name, w.url) AS label,
                CASE WHEN l.site_id IS NULL THEN 'application' ELSE 'website' END
                    AS kind,
                COALESCE(a.category_id, w.category_id) AS category_id
            FROM activity_log AS l
            LEFT JOIN applications AS a ON a.app_id = l.app_id
            LEFT JOIN websites AS w ON w.site_id = l.site_id
            WHERE l.start_time >= ? AND l.start_time < ?
            ORDER BY l.start_time;
            """,
            (start.strftime(DATETIME_FMT), end.strftime(DATETIME_FMT)),
        )
    )


def get_focus_mode(conn: sqlite3.Connection) -> bool:
    row = conn.execute(
        "SELECT value FROM settings WHERE key = ?", (FOCUS_MODE_KEY,)
    ).fetchone()
    return bool(row) and row["value"] == "true"


def set_focus_mode(conn: sqlite3.Connection, enabled: bool) -> None:
    conn.execute(
        "INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)",
        (FOCUS_MODE_KEY, "true" if enabled else "false"),
    )


def is_application_blocked(conn: sqlite3.Connection, raw_name: str) -> bool:
    row = conn.execute(
        """
        SELECT 1
        FROM blocked_apps AS b
        JOIN applications AS a ON a.app_id = b.app_id
        WHERE a.name = ?
        """,
        (normalize_app_name(raw_name),),
    ).fetchone()
    return row is not None


def is_website_blocked(conn: sqlite3.Connection, raw_url: str) -> bool:
    """Fuzzy match: any blocked website whose url contains the queried host.

    Known imprecision: querying ``x.com`` matches a blocked ``netflix.com``.
    """
    key = normalize_site_key(raw_url)
    if not key:
        return False
    row = conn.execute(
        """
        SELECT 1
        FROM blocked_websites AS b
        JOIN websites AS w ON w.site_id = b.site_id
        WHERE w.url LIKE ?
        """,
        (f"%{key}%",),
    ).fetchone()
    return row is not None


def block_application(conn: sqlite3.Connection, raw_name: str) -> int:
    app_id = upsert_application(conn, raw_name, Category.DISTRACTING)
    if app_id == -1:
        raise ValueError(f"Invalid application name: {raw_name!r}")
    conn.execute("INSERT OR IGNORE INTO blocked_apps (app_id) VALUES (?)", (app_id,))
    return app_id


def unblock_application(conn: sqlite3.Connection, raw_name: str) -> bool:
    cur = conn.execute(
        """
        DELETE FROM blocked_apps
        WHERE app_id IN (SELECT app_id FROM applications WHERE name = ?)
        """,
        (normalize_app_name(raw_name),),
    )
    return cur.rowcount > 0


def block_website(conn: sqlite3.Connection, domain: str) -> int:
    site_id = upsert_website(conn, normalize_domain(domain) or "", Category.DISTRACTING)
    if site_id == -1:
        raise ValueError(f"Invalid website: {domain!r}")
    conn.execute(
        "INSERT OR IGNORE INTO blocked_websites (site_id) VALUES (?)", (site_id,)
    )
    return site_id


def unblock_website(conn: sqlite3.Connection, domain: str) -> bool:
    cur = conn.execute(
        """
        DELETE FROM blocked_websites
        WHERE site_id IN (SELECT site_id FROM websites WHERE url = ?)
        """,
        (normalize_domain(domain),),
    )
    return cur.rowcount > 0


def fetch_blocked(conn: sqlite3.Connection) -> dict[str, list[str]]:
    applications = [
        row["name"]
        for row in conn.execute(
            """
            SELECT a.name FROM blocked_apps AS b
            JOIN applications AS a ON a.app_id = b.app_id
            ORDER BY a.name
            """
        )
    ]
    websites = [
        row["url"]
        for row in conn.execute(
            """
            SELECT w.url FROM blocked_websites AS b
            JOIN websites AS w ON w.site_id = b.site_id
            ORDER BY w.url
            """
        )
    ]
    return {"applications": applications, "websites": websites}


def fetch_applications(conn: sqlite3.Connection) -> list[sqlite3.Row]:
    """All known applications with their current category."""
    return list(
        conn.execute("SELECT app_id, name, category_id FROM applications ORDER BY name")
    )


def fetch_websites(conn: sqlite3.Connection) -> list[sqlite3.Row]:
    """All known websites with their current category."""
    return list(
        conn.execute("SELECT site_id, url, category_id FROM websites ORDER BY url")
    )


def set_application_category(
    conn: sqlite3.Connection, raw_name: str, category: Category
) -> bool:
    """Re-categorize a known application. Returns False if it was never seen."""
    cur = conn.execute(
        "UPDATE applications SET category_id = ? WHERE name = ?",
        (int(category), normalize_app_name(raw_name)),
    )
    return cur.rowcount > 0


def set_website_category(
    conn: sqlite3.Connection, domain: str, category: Category
) -> bool:
    cur = conn.execute(
        "UPDATE websites SET category_id = ? WHERE url = ?",
        (int(category), normalize_domain(domain)),
    )
    return cur.rowcount > 0
