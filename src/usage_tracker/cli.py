"""Command-line interface for the usage tracker."""

from __future__ import annotations

import logging
import time
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

import typer

from .config import CategoryPolicy, TrackerSettings
from .db import (
    block_application,
    block_website,
    database_connection,
    fetch_applications,
    fetch_blocked,
    fetch_websites,
    get_focus_mode,
    set_application_category,
    set_focus_mode,
    set_website_category,
    unblock_application,
    unblock_website,
)
from .models import Category
from .paths import get_db_path, get_log_path
from .reporting import category_name

app = typer.Typer(help="Track which application or website has your attention.")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


class CategoryName(str, Enum):
    productive = "productive"
    distracting = "distracting"
    unknown = "unknown"

    def to_category(self) -> Category:
        return Category[self.name.upper()]


class ItemKindName(str, Enum):
    app = "app"
    site = "site"


class FocusAction(str, Enum):
    on = "on"
    off = "off"
    status = "status"


DbOption = typer.Option(
    None,
    "--db",
    path_type=Path,
    help="Location of the usage SQLite database.",
)


@app.callback(no_args_is_help=True)
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs.")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )


def _settings(
    poll_seconds: float,
    debounce_count: int,
    min_log_seconds: float,
    cooldown_seconds: float,
    stop_timeout_seconds: float,
    app_default: CategoryName,
    site_default: CategoryName,
) -> TrackerSettings:
    return TrackerSettings.from_intervals(
        poll_seconds=poll_seconds,
        debounce_count=debounce_count,
        min_log_seconds=min_log_seconds,
        cooldown_seconds=cooldown_seconds,
        stop_timeout_seconds=stop_timeout_seconds,
        category_policy=CategoryPolicy(
            application=app_default.to_category(),
            website=site_default.to_category(),
        ),
    )


@app.command()
def track(
    db_path: Optional[Path] = DbOption,
    poll_seconds: float = typer.Option(4.0, "--interval", min=0.5, help="Polling interval in seconds."),
    debounce_count: int = typer.Option(
        2, "--debounce", min=1, help="Consecutive identical readings required to switch."
    ),
    min_log_seconds: float = typer.Option(
        2.0, "--min-duration", min=0.0, help="Sessions shorter than this are discarded."
    ),
    cooldown_seconds: float = typer.Option(
        30.0, "--alert-cooldown", min=0.0, help="Seconds between focus-mode alerts."
    ),
    stop_timeout_seconds: float = typer.Option(
        3.0, "--stop-timeout", min=0.0, help="Seconds to wait for a running tick on shutdown."
    ),
    app_default: CategoryName = typer.Option(
        CategoryName.productive, "--app-default", help="Category for unmapped applications."
    ),
    site_default: CategoryName = typer.Option(
        CategoryName.distracting, "--site-default", help="Category for websites."
    ),
    notify: bool = typer.Option(
        True, "--notify/--no-notify", help="Show desktop notifications for blocked items."
    ),
) -> None:
    """Run the session tracker until interrupted."""
    from .inspector import WindowsForegroundInspector
    from .notifier import LogNotifier, PlyerNotifier
    from .store import SqliteActivityStore
    from .tracker import SessionTracker

    file_handler = logging.FileHandler(get_log_path(), encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.getLogger().addHandler(file_handler)

    settings = _settings(
        poll_seconds,
        debounce_count,
        min_log_seconds,
        cooldown_seconds,
        stop_timeout_seconds,
        app_default,
        site_default,
    )
    store = SqliteActivityStore(db_path or get_db_path())
    tracker = SessionTracker(
        inspector=WindowsForegroundInspector(),
        store=store,
        notifier=PlyerNotifier() if notify else LogNotifier(),
        settings=settings,
    )
    tracker.start()
    try:
        while tracker.is_running:
            time.sleep(1.0)
    except KeyboardInterrupt:
        logging.getLogger(__name__).info("Tracker interrupted; flushing open session.")
    finally:
        tracker.stop()
        store.close()


@app.command()
def sessions(
    date: Optional[str] = typer.Option(
        None,
        "--date",
        help="Date (YYYY-MM-DD) to list. Defaults to today.",
    ),
    db_path: Optional[Path] = DbOption,
) -> None:
    """Print the recorded sessions for a specific day."""
    from .reporting import SessionPrinter

    target = datetime.strptime(date, "%Y-%m-%d") if date else datetime.now()
    SessionPrinter(db_path=db_path or get_db_path()).print_sessions(target)


@app.command()
def focus(
    action: FocusAction = typer.Argument(FocusAction.status, help="on, off or status."),
    db_path: Optional[Path] = DbOption,
) -> None:
    """Turn focus mode on or off, or show its state."""
    with database_connection(db_path or get_db_path()) as conn:
        if action is not FocusAction.status:
            set_focus_mode(conn, action is FocusAction.on)
        enabled = get_focus_mode(conn)
    typer.echo(f"Focus mode is {'on' if enabled else 'off'}.")


@app.command("block-app")
def block_app(
    name: str = typer.Argument(..., help="Application display name or executable."),
    db_path: Optional[Path] = DbOption,
) -> None:
    """Alert in focus mode whenever this application is in the foreground."""
    with database_connection(db_path or get_db_path()) as conn:
        try:
            block_application(conn, name)
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
    typer.echo(f"Blocked application {name}.")


@app.command("unblock-app")
def unblock_app(
    name: str = typer.Argument(..., help="Application display name or executable."),
    db_path: Optional[Path] = DbOption,
) -> None:
    """Remove an application from the block list."""
    with database_connection(db_path or get_db_path()) as conn:
        removed = unblock_application(conn, name)
    if not removed:
        typer.echo(f"{name} was not blocked.", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Unblocked application {name}.")


@app.command("block-site")
def block_site(
    domain: str = typer.Argument(..., help="Website domain, e.g. youtube.com."),
    db_path: Optional[Path] = DbOption,
) -> None:
    """Alert in focus mode whenever this website is in the foreground."""
    with database_connection(db_path or get_db_path()) as conn:
        try:
            block_website(conn, domain)
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
    typer.echo(f"Blocked website {domain}.")


@app.command("unblock-site")
def unblock_site(
    domain: str = typer.Argument(..., help="Website domain, e.g. youtube.com."),
    db_path: Optional[Path] = DbOption,
) -> None:
    """Remove a website from the block list."""
    with database_connection(db_path or get_db_path()) as conn:
        removed = unblock_website(conn, domain)
    if not removed:
        typer.echo(f"{domain} was not blocked.", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Unblocked website {domain}.")


@app.command()
def blocked(db_path: Optional[Path] = DbOption) -> None:
    """List blocked applications and websites."""
    with database_connection(db_path or get_db_path()) as conn:
        entries = fetch_blocked(conn)
    for kind in ("applications", "websites"):
        typer.echo(f"{kind.title()}:")
        for name in entries[kind] or ["(none)"]:
            typer.echo(f"  {name}")


@app.command()
def categorize(
    kind: ItemKindName = typer.Argument(..., help="app or site."),
    name: str = typer.Argument(..., help="Application name or website domain."),
    category: CategoryName = typer.Argument(..., help="productive, distracting or unknown."),
    db_path: Optional[Path] = DbOption,
) -> None:
    """Change the category of an application or website seen before."""
    with database_connection(db_path or get_db_path()) as conn:
        if kind is ItemKindName.app:
            updated = set_application_category(conn, name, category.to_category())
        else:
            updated = set_website_category(conn, name, category.to_category())
    if not updated:
        typer.echo(f"{name} has not been recorded yet.", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"{name} is now {category.value}.")


@app.command()
def items(db_path: Optional[Path] = DbOption) -> None:
    """List known applications and websites with their categories."""
    with database_connection(db_path or get_db_path()) as conn:
        applications = fetch_applications(conn)
        websites = fetch_websites(conn)
    for title, rows, key in (
        ("Applications", applications, "name"),
        ("Websites", websites, "url"),
    ):
        typer.echo(f"{title}:")
        if not rows:
            typer.echo("  (none)")
        for row in rows:
            typer.echo(f"  {row[key]:<32} {category_name(row['category_id'])}")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind the API."),
    port: int = typer.Option(8766, "--port", min=1, max=65535, help="TCP port for the API."),
    db_path: Optional[Path] = DbOption,
    poll_seconds: float = typer.Option(4.0, "--interval", min=0.5, help="Polling interval in seconds."),
    debounce_count: int = typer.Option(
        2, "--debounce", min=1, help="Consecutive identical readings required to switch."
    ),
    min_log_seconds: float = typer.Option(
        2.0, "--min-duration", min=0.0, help="Sessions shorter than this are discarded."
    ),
    cooldown_seconds: float = typer.Option(
        30.0, "--alert-cooldown", min=0.0, help="Seconds between focus-mode alerts."
    ),
    stop_timeout_seconds: float = typer.Option(
        3.0, "--stop-timeout", min=0.0, help="Seconds to wait for a running tick on shutdown."
    ),
    app_default: CategoryName = typer.Option(
        CategoryName.productive, "--app-default", help="Category for unmapped applications."
    ),
    site_default: CategoryName = typer.Option(
        CategoryName.distracting, "--site-default", help="Category for websites."
    ),
) -> None:
    """Start the control API with the tracker running in the background."""
    from .server_runner import run_server

    run_server(
        host=host,
        port=port,
        db_path=db_path or get_db_path(),
        settings=_settings(
            poll_seconds,
            debounce_count,
            min_log_seconds,
            cooldown_seconds,
            stop_timeout_seconds,
            app_default,
            site_default,
        ),
    )
