from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from typer.testing import CliRunner

from usage_tracker import db
from usage_tracker.cli import CategoryName, app
from usage_tracker.models import Category

runner = CliRunner()


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "usage.sqlite3"


def test_focus_mode_commands(db_path):
    result = runner.invoke(app, ["focus", "--db", str(db_path)])
    assert result.exit_code == 0
    assert "Focus mode is off." in result.output

    result = runner.invoke(app, ["focus", "on", "--db", str(db_path)])
    assert result.exit_code == 0
    assert "Focus mode is on." in result.output

    with db.database_connection(db_path) as conn:
        assert db.get_focus_mode(conn)


def test_block_and_unblock(db_path):
    assert runner.invoke(app, ["block-app", "steam.exe", "--db", str(db_path)]).exit_code == 0
    assert runner.invoke(app, ["block-site", "www.reddit.com", "--db", str(db_path)]).exit_code == 0

    result = runner.invoke(app, ["blocked", "--db", str(db_path)])
    assert result.exit_code == 0
    assert "steam" in result.output
    assert "reddit.com" in result.output

    assert runner.invoke(app, ["unblock-app", "steam", "--db", str(db_path)]).exit_code == 0
    assert runner.invoke(app, ["unblock-app", "steam", "--db", str(db_path)]).exit_code == 1
    assert runner.invoke(app, ["unblock-site", "reddit.com", "--db", str(db_path)]).exit_code == 0

    result = runner.invoke(app, ["blocked", "--db", str(db_path)])
    assert result.output.count("(none)") == 2


def test_sessions_listing(db_path):
    with db.database_connection(db_path) as conn:
        site_id = db.upsert_website(conn, "github.com", Category.PRODUCTIVE)
        start = datetime(2024, 5, 6, 14, 0, 5)
        db.insert_activity_record(
            conn, None, site_id, start, start + timedelta(minutes=3, seconds=7), 187
        )

    result = runner.invoke(app, ["sessions", "--date", "2024-05-06", "--db", str(db_path)])
    assert result.exit_code == 0
    assert "Sessions for 2024-05-06" in result.output
    assert "14:00:05-14:03:12" in result.output
    assert "github.com" in result.output
    assert "Productive" in result.output
    assert "00:03:07" in result.output

    result = runner.invoke(app, ["sessions", "--date", "2024-05-07", "--db", str(db_path)])
    assert "No sessions recorded" in result.output


def test_category_name_maps_to_category():
    assert CategoryName.productive.to_category() is Category.PRODUCTIVE
    assert CategoryName.unknown.to_category() is Category.UNKNOWN


def test_categorize_and_list_items(db_path):
    with db.database_connection(db_path) as conn:
        db.upsert_application(conn, "Slack", Category.PRODUCTIVE)
        db.upsert_website(conn, "reddit.com", Category.DISTRACTING)

    result = runner.invoke(app, ["categorize", "app", "Slack.exe", "distracting", "--db", str(db_path)])
    assert result.exit_code == 0
    result = runner.invoke(app, ["categorize", "site", "www.reddit.com", "productive", "--db", str(db_path)])
    assert result.exit_code == 0
    result = runner.invoke(app, ["categorize", "app", "Zoom", "productive", "--db", str(db_path)])
    assert result.exit_code == 1

    result = runner.invoke(app, ["items", "--db", str(db_path)])
    assert result.exit_code == 0
    lines = [line.split() for line in result.output.splitlines()]
    assert ["Slack", "Distracting"] in lines
    assert ["reddit.com", "Productive"] in lines


def test_serve_passes_stop_timeout(db_path, monkeypatch):
    captured = {}

    def fake_run_server(**kwargs):
        captured.update(kwargs)

    monkeypatch.setattr("usage_tracker.server_runner.run_server", fake_run_server)
    result = runner.invoke(app, ["serve", "--db", str(db_path)])
    assert result.exit_code == 0
    assert captured["settings"].stop_timeout == timedelta(seconds=3)

    runner.invoke(app, ["serve", "--stop-timeout", "1.5", "--db", str(db_path)])
    assert captured["settings"].stop_timeout == timedelta(seconds=1.5)
