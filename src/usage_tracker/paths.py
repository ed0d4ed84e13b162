"""Locations of the tracker's database and log file."""

from __future__ import annotations

import os
from pathlib import Path

from platformdirs import PlatformDirs


APP_NAME = "UsageTracker"
APP_AUTHOR = "UsageTracker"
DATA_DIR_ENV = "USAGE_TRACKER_DATA_DIR"


def get_data_dir() -> Path:
    """Return the data directory, honouring ``USAGE_TRACKER_DATA_DIR``."""
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        path = Path(override).expanduser()
    else:
        dirs = PlatformDirs(appname=APP_NAME, appauthor=APP_AUTHOR, roaming=True)
        path = Path(dirs.user_data_path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_db_path() -> Path:
    return get_data_dir() / "usage.sqlite3"


def get_log_path() -> Path:
    return get_data_dir() / "tracker.log"
