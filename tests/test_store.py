from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from usage_tracker import db
from usage_tracker.models import Category
from usage_tracker.store import SqliteActivityStore
from usage_tracker.tracker import SessionTracker


@pytest.fixture
def conn(tmp_path):
    with db.database_connection(tmp_path / "usage.sqlite3") as connection:
        yield connection


@pytest.fixture
def sqlite_store(tmp_path):
    store = SqliteActivityStore(tmp_path / "usage.sqlite3")
    yield store
    store.close()


def test_schema_seeds_categories(conn):
    rows = conn.execute("SELECT category_id, name FROM categories ORDER BY category_id")
    assert [(r["category_id"], r["name"]) for r in rows] == [
        (0, "Unknown"),
        (1, "Productive"),
        (2, "Distracting"),
    ]


def test_upsert_application_is_idempotent(conn):
    first = db.upsert_application(conn, "Slack", Category.PRODUCTIVE)
    again = db.upsert_application(conn, "C:\\Apps\\Slack.exe", Category.DISTRACTING)
    assert first == again
    row = conn.execute("SELECT category_id FROM applications WHERE app_id = ?", (first,)).fetchone()
    assert row["category_id"] == Category.PRODUCTIVE


def test_upsert_rejects_blank_names(conn):
    assert db.upsert_application(conn, "   ", Category.PRODUCTIVE) == -1
    assert db.upsert_website(conn, "", Category.DISTRACTING) == -1


def test_activity_record_requires_one_target(conn):
    now = datetime(2024, 5, 6, 10, 0)
    with pytest.raises(ValueError):
        db.insert_activity_record(conn, None, None, now, now, 5)


def test_fetch_sessions_for_day(conn):
    day = datetime(2024, 5, 6)
    app_id = db.upsert_application(conn, "Visual Studio Code", Category.PRODUCTIVE)
    site_id = db.upsert_website(conn, "youtube.com", Category.DISTRACTING)
    start = day.replace(hour=9)
    db.insert_activity_record(conn, app_id, None, start, start + timedelta(seconds=90), 90)
    db.insert_activity_record(
        conn, None, site_id, start + timedelta(minutes=5), start + timedelta(minutes=6), 60
    )
    db.insert_activity_record(
        conn, app_id, None, day - timedelta(hours=1), day - timedelta(minutes=59), 60
    )

    rows = db.fetch_sessions_for_day(conn, day)
    assert [(r["label"], r["kind"], r["duration_seconds"]) for r in rows] == [
        ("Visual Studio Code", "application", 90),
        ("youtube.com", "website", 60),
    ]
    assert rows[1]["category_id"] == Category.DISTRACTING


def test_focus_mode_defaults_off(conn):
    assert db.get_focus_mode(conn) is False
    db.set_focus_mode(conn, True)
    assert db.get_focus_mode(conn) is True
    db.set_focus_mode(conn, False)
    assert db.get_focus_mode(conn) is False


def test_application_blocking_matches_normalized_name(conn):
    db.block_application(conn, "steam.exe")
    assert db.is_application_blocked(conn, "steam")
    assert db.is_application_blocked(conn, "C:\\Games\\steam.exe")
    assert not db.is_application_blocked(conn, "Steam Helper")

    assert db.unblock_application(conn, "steam")
    assert not db.is_application_blocked(conn, "steam")
    assert not db.unblock_application(conn, "steam")


def test_website_blocking_is_substring_match(conn):
    db.block_website(conn, "https://www.netflix.com/")
    assert db.fetch_blocked(conn)["websites"] == ["netflix.com"]
    assert db.is_website_blocked(conn, "netflix.com")
    assert db.is_website_blocked(conn, "https://netflix.com/browse")
    # Known imprecision of the fuzzy lookup.
    assert db.is_website_blocked(conn, "x.com")
    assert not db.is_website_blocked(conn, "youtube.com")
    assert not db.is_website_blocked(conn, "")


def test_fetch_blocked_lists_both_kinds(conn):
    db.block_application(conn, "Valorant")
    db.block_application(conn, "Steam")
    db.block_website(conn, "reddit.com")
    assert db.fetch_blocked(conn) == {
        "applications": ["Steam", "Valorant"],
        "websites": ["reddit.com"],
    }


def test_block_application_rejects_blank(conn):
    with pytest.raises(ValueError):
        db.block_application(conn, " ")


def test_recategorize_known_items(conn):
    db.upsert_application(conn, "Slack", Category.PRODUCTIVE)
    db.upsert_website(conn, "github.com", Category.DISTRACTING)

    assert db.set_application_category(conn, "C:\\Apps\\Slack.exe", Category.DISTRACTING)
    assert db.set_website_category(conn, "https://www.github.com/", Category.PRODUCTIVE)
    assert not db.set_application_category(conn, "Zoom", Category.PRODUCTIVE)
    assert not db.set_website_category(conn, "zoom.us", Category.PRODUCTIVE)

    # Later sessions keep the edited category.
    db.upsert_application(conn, "Slack", Category.PRODUCTIVE)
    assert [(r["name"], r["category_id"]) for r in db.fetch_applications(conn)] == [
        ("Slack", Category.DISTRACTING)
    ]
    assert [(r["url"], r["category_id"]) for r in db.fetch_websites(conn)] == [
        ("github.com", Category.PRODUCTIVE)
    ]


def test_sqlite_store_round_trip(sqlite_store, tmp_path):
    app_id = sqlite_store.lookup_or_create_application("Slack", Category.PRODUCTIVE)
    assert sqlite_store.lookup_or_create_application("Slack", Category.PRODUCTIVE) == app_id
    start = datetime(2024, 5, 6, 11, 0)
    sqlite_store.append_activity_record(app_id, None, start, start + timedelta(seconds=30), 30)

    with db.database_connection(tmp_path / "usage.sqlite3") as conn:
        rows = db.fetch_sessions_for_day(conn, start)
        db.set_focus_mode(conn, True)
        db.block_application(conn, "Slack")
    assert [r["label"] for r in rows] == ["Slack"]
    assert sqlite_store.is_focus_mode_enabled()
    assert sqlite_store.is_application_blocked("Slack")
    assert not sqlite_store.is_website_blocked("slack.com")


def test_tracker_writes_through_sqlite_store(sqlite_store, inspector, notifier, clock, tmp_path):
    tracker = SessionTracker(inspector, sqlite_store, notifier, clock=clock)
    for executable, title in [
        ("chrome.exe", "Dashboard - YouTube - Google Chrome"),
        ("chrome.exe", "Dashboard - YouTube - Google Chrome"),
        ("code.exe", None),
        ("code.exe", None),
        ("steam.exe", None),
        ("steam.exe", None),
    ]:
        clock.advance(4)
        inspector.push(executable, title)
        tracker.poll_once()

    with db.database_connection(tmp_path / "usage.sqlite3") as conn:
        rows = db.fetch_sessions_for_day(conn, clock.now)
    assert [(r["label"], r["kind"], r["duration_seconds"], r["category_id"]) for r in rows] == [
        ("youtube.com", "website", 8, Category.DISTRACTING),
        ("Visual Studio Code", "application", 8, Category.PRODUCTIVE),
    ]
