"""Console listing of recorded sessions."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from .db import DATETIME_FMT, database_connection, fetch_sessions_for_day
from .models import Category


class SessionPrinter:
    """Render the raw session log for a day."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)

    def print_sessions(self, day: datetime) -> None:
        with database_connection(self.db_path) as conn:
            rows = fetch_sessions_for_day(conn, day)
        if not rows:
            print("No sessions recorded for the selected day.")
            return

        print(f"Sessions for {day.strftime('%Y-%m-%d')}")
        print("-" * 72)
        for row in rows:
            start = datetime.strptime(row["start_time"], DATETIME_FMT)
            end = datetime.strptime(row["end_time"], DATETIME_FMT)
            print(
                f"{start:%H:%M:%S}-{end:%H:%M:%S}  "
                f"{row['label'][:32]:<32} {row['kind']:<11} "
                f"{category_name(row['category_id']):<11} "
                f"{format_duration(row['duration_seconds'])}"
            )


def category_name(category_id: int | None) -> str:
    try:
        return Category(category_id).name.title()
    except ValueError:
        return "Unknown"


def format_duration(seconds: float) -> str:
    total_seconds = int(round(seconds))
    hours, remainder = divmod(total_seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
