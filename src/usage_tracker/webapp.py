"""FastAPI application exposing tracker status and focus-mode controls."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Literal, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict

from .config import TrackerSettings
from .db import (
    DATETIME_FMT,
    block_application,
    block_website,
    database_connection,
    fetch_applications,
    fetch_blocked,
    fetch_sessions_for_day,
    fetch_websites,
    get_focus_mode,
    set_application_category,
    set_focus_mode,
    set_website_category,
    unblock_application,
    unblock_website,
)
from .models import Category
from .paths import get_db_path
from .reporting import category_name
from .store import SqliteActivityStore
from .tracker import SessionTracker

logger = logging.getLogger(__name__)

TrackerFactory = Callable[[SqliteActivityStore, TrackerSettings], SessionTracker]


class FocusModePayload(BaseModel):
    enabled: bool

    model_config = ConfigDict(extra="forbid")


class BlockApplicationPayload(BaseModel):
    name: str

    model_config = ConfigDict(extra="forbid")


class BlockWebsitePayload(BaseModel):
    domain: str

    model_config = ConfigDict(extra="forbid")


class CategoryPayload(BaseModel):
    category: Literal["unknown", "productive", "distracting"]

    model_config = ConfigDict(extra="forbid")

    def to_category(self) -> Category:
        return Category[self.category.upper()]


def create_app(
    *,
    db_path: Optional[Path] = None,
    settings: Optional[TrackerSettings] = None,
    tracker_factory: Optional[TrackerFactory] = None,
) -> FastAPI:
    """Instantiate the FastAPI application.

    ``tracker_factory`` builds the tracker on startup; when omitted the
    Windows foreground inspector and desktop notifications are used.
    """
    resolved_db_path = Path(db_path or get_db_path())
    resolved_settings = settings or TrackerSettings()
    factory = tracker_factory or _default_tracker

    app = FastAPI(title="Usage Tracker", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.db_path = resolved_db_path
    app.state.tracker = None
    app.state.store = None

    @app.on_event("startup")
    async def _startup() -> None:
        store = SqliteActivityStore(resolved_db_path)
        tracker = factory(store, resolved_settings)
        app.state.store = store
        app.state.tracker = tracker
        tracker.start()

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        tracker: Optional[SessionTracker] = app.state.tracker
        if tracker is not None:
            tracker.stop()
        if app.state.store is not None:
            app.state.store.close()

    @app.get("/api/status")
    def status(request: Request) -> Dict[str, Any]:
        tracker: Optional[SessionTracker] = request.app.state.tracker
        session = tracker.current_session if tracker else None
        with database_connection(request.app.state.db_path) as conn:
            focus_mode = get_focus_mode(conn)
        return {
            "tracker_running": bool(tracker and tracker.is_running),
            "degraded": bool(tracker and tracker.is_degraded),
            "database_path": str(request.app.state.db_path),
            "poll_seconds": resolved_settings.poll_interval.total_seconds(),
            "focus_mode": focus_mode,
            "current_item": session.item.label if session else None,
        }

    @app.get("/api/sessions")
    def sessions(
        request: Request,
        date: Optional[str] = Query(
            default=None,
            description="Target date in YYYY-MM-DD format.",
        ),
    ) -> Dict[str, Any]:
        target_day = _parse_date(date)
        with database_connection(request.app.state.db_path) as conn:
            rows = fetch_sessions_for_day(conn, target_day)
        return {
            "date": target_day.strftime("%Y-%m-%d"),
            "sessions": [_row_to_session_payload(row) for row in rows],
        }

    @app.put("/api/focus-mode")
    def update_focus_mode(payload: FocusModePayload, request: Request) -> Dict[str, Any]:
        with database_connection(request.app.state.db_path) as conn:
            set_focus_mode(conn, payload.enabled)
        logger.info("Focus mode %s.", "enabled" if payload.enabled else "disabled")
        return {"focus_mode": payload.enabled}

    @app.get("/api/blocked")
    def list_blocked(request: Request) -> Dict[str, Any]:
        with database_connection(request.app.state.db_path) as conn:
            return fetch_blocked(conn)

    @app.post("/api/blocked/applications", status_code=201)
    def add_blocked_application(
        payload: BlockApplicationPayload, request: Request
    ) -> Dict[str, Any]:
        with database_connection(request.app.state.db_path) as conn:
            try:
                block_application(conn, payload.name)
            except ValueError as exc:
                raise HTTPException(status_code=400, detail=str(exc)) from exc
            return fetch_blocked(conn)

    @app.delete("/api/blocked/applications/{name}")
    def remove_blocked_application(name: str, request: Request) -> Dict[str, Any]:
        with database_connection(request.app.state.db_path) as conn:
            if not unblock_application(conn, name):
                raise HTTPException(status_code=404, detail="Application is not blocked")
            return fetch_blocked(conn)

    @app.post("/api/blocked/websites", status_code=201)
    def add_blocked_website(
        payload: BlockWebsitePayload, request: Request
    ) -> Dict[str, Any]:
        with database_connection(request.app.state.db_path) as conn:
            try:
                block_website(conn, payload.domain)
            except ValueError as exc:
                raise HTTPException(status_code=400, detail=str(exc)) from exc
            return fetch_blocked(conn)

    @app.delete("/api/blocked/websites/{domain}")
    def remove_blocked_website(domain: str, request: Request) -> Dict[str, Any]:
        with database_connection(request.app.state.db_path) as conn:
            if not unblock_website(conn, domain):
                raise HTTPException(status_code=404, detail="Website is not blocked")
            return fetch_blocked(conn)

    @app.get("/api/applications")
    def list_applications(request: Request) -> Dict[str, Any]:
        with database_connection(request.app.state.db_path) as conn:
            rows = fetch_applications(conn)
        return {
            "applications": [
                {"name": row["name"], "category": category_name(row["category_id"])}
                for row in rows
            ]
        }

    @app.put("/api/applications/{name}/category")
    def update_application_category(
        name: str, payload: CategoryPayload, request: Request
    ) -> Dict[str, Any]:
        with database_connection(request.app.state.db_path) as conn:
            if not set_application_category(conn, name, payload.to_category()):
                raise HTTPException(status_code=404, detail="Application not found")
        return {"name": name, "category": category_name(payload.to_category())}

    @app.get("/api/websites")
    def list_websites(request: Request) -> Dict[str, Any]:
        with database_connection(request.app.state.db_path) as conn:
            rows = fetch_websites(conn)
        return {
            "websites": [
                {"domain": row["url"], "category": category_name(row["category_id"])}
                for row in rows
            ]
        }

    @app.put("/api/websites/{domain}/category")
    def update_website_category(
        domain: str, payload: CategoryPayload, request: Request
    ) -> Dict[str, Any]:
        with database_connection(request.app.state.db_path) as conn:
            if not set_website_category(conn, domain, payload.to_category()):
                raise HTTPException(status_code=404, detail="Website not found")
        return {"domain": domain, "category": category_name(payload.to_category())}

    return app


def _default_tracker(
    store: SqliteActivityStore, settings: TrackerSettings
) -> SessionTracker:
    from .inspector import WindowsForegroundInspector
    from .notifier import PlyerNotifier

    return SessionTracker(
        inspector=WindowsForegroundInspector(),
        store=store,
        notifier=PlyerNotifier(),
        settings=settings,
    )


def _parse_date(value: Optional[str]) -> datetime:
    if not value:
        return _start_of_day(datetime.now())
    try:
        parsed = datetime.strptime(value, "%Y-%m-%d")
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Invalid date format") from exc
    return _start_of_day(parsed)


def _start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def _row_to_session_payload(row: Any) -> Dict[str, Any]:
    start = datetime.strptime(row["start_time"], DATETIME_FMT)
    end = datetime.strptime(row["end_time"], DATETIME_FMT)
    return {
        "id": row["log_id"],
        "label": row["label"],
        "kind": row["kind"],
        "category": category_name(row["category_id"]),
        "start_time": start.isoformat(),
        "end_time": end.isoformat(),
        "duration_seconds": row["duration_seconds"],
    }
