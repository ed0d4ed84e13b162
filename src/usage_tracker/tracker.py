"""Session tracking engine.

The tracker samples the foreground window at a fixed interval, turns each
sample into an :class:`ActiveItem`, and only accepts a switch to a new item
once it has been seen on ``debounce_count`` consecutive ticks. Accepted
switches close the open :class:`Session` and persist it as a
:class:`SessionRecord` when it lasted at least ``min_log_duration``.
"""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime
from typing import Callable, Optional

from .classifier import Classifier
from .config import TrackerSettings
from .domains import extract_domain, is_browser_process, normalize_domain
from .inspector import WindowInspector
from .models import (
    UNKNOWN_ITEM,
    ActiveItem,
    ItemKind,
    Observation,
    PendingCandidate,
    Session,
    SessionRecord,
)
from .notifier import NotificationCooldown, Notifier
from .store import ActivityStore

logger = logging.getLogger(__name__)

FOCUS_ALERT_TITLE = "Focus Mode Active"


class SessionTracker:
    """Turns periodic foreground samples into non-overlapping session records."""

    def __init__(
        self,
        inspector: WindowInspector,
        store: ActivityStore,
        notifier: Notifier,
        settings: Optional[TrackerSettings] = None,
        *,
        classifier: Optional[Classifier] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.settings = settings or TrackerSettings()
        self._inspector = inspector
        self._store = store
        self._notifier = notifier
        self._classifier = classifier or Classifier()
        self._clock = clock

        # Tick state; only touched while holding _state_lock.
        self._session: Optional[Session] = None
        self._pending: Optional[PendingCandidate] = None
        self._cooldown = NotificationCooldown(self.settings.notification_cooldown)
        self._degraded = False
        self._inert = False
        self._state_lock = threading.Lock()

        self._lifecycle_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None

    # ------------------------------------------------------------------ status

    @property
    def current_session(self) -> Optional[Session]:
        return self._session

    @property
    def pending_candidate(self) -> Optional[PendingCandidate]:
        return self._pending

    @property
    def is_degraded(self) -> bool:
        """True while the most recent session write has failed."""
        return self._degraded

    @property
    def is_running(self) -> bool:
        with self._lifecycle_lock:
            return bool(self._thread and self._thread.is_alive())

    # --------------------------------------------------------------- lifecycle

    def start(self) -> None:
        with self._lifecycle_lock:
            if self._inert:
                logger.warning("Tracker has been stopped; ignoring start().")
                return
            if self._thread and self._thread.is_alive():
                return
            stop_event = threading.Event()
            thread = threading.Thread(
                target=self._run_loop,
                args=(stop_event,),
                name="session-tracker",
                daemon=True,
            )
            self._thread = thread
            self._stop_event = stop_event
            thread.start()
        logger.info(
            "Session tracker started (poll every %ss).",
            self.settings.poll_interval.total_seconds(),
        )

    def stop(self) -> None:
        """Stop polling, then flush the open session. Safe to call repeatedly."""
        with self._lifecycle_lock:
            thread, stop_event = self._thread, self._stop_event
            if thread is None or stop_event is None:
                return
            self._thread = None
            self._stop_event = None
            stop_event.set()

        timeout = self.settings.stop_timeout.total_seconds()
        thread.join(timeout=timeout)
        if thread.is_alive():
            logger.warning(
                "Tracking tick still running after %.1fs; it will be abandoned.",
                timeout,
            )

        if not self._state_lock.acquire(timeout=timeout):
            logger.error(
                "Could not flush the open session: a tick is still blocked in the store or notifier."
            )
            self._inert = True
            return
        try:
            self._flush_locked()
        finally:
            self._state_lock.release()
        logger.info("Session tracker stopped.")

    def _run_loop(self, stop_event: threading.Event) -> None:
        interval = self.settings.poll_interval.total_seconds()
        next_tick = time.monotonic()
        while not stop_event.is_set():
            self.poll_once()
            next_tick += interval
            # Ticks that overran their slot run back to back rather than overlap.
            stop_event.wait(max(0.0, next_tick - time.monotonic()))

    # ------------------------------------------------------------------- ticks

    def poll_once(self) -> None:
        """Run one tick. Errors are logged and end the tick early.

        The inspector is called outside the state lock. A tick whose inspection
        returns after stop() is discarded.
        """
        if self._inert:
            return
        observation = self._observe()
        with self._state_lock:
            if self._inert:
                return
            try:
                self._tick(observation)
            except Exception:
                logger.exception("Tracking tick failed; skipping.")

    def resolve_item(self, observation: Observation) -> ActiveItem:
        executable = observation.process_executable
        if not executable:
            return UNKNOWN_ITEM
        if is_browser_process(executable):
            domain = normalize_domain(extract_domain(observation.window_title))
            if domain:
                return ActiveItem(label=domain, kind=ItemKind.WEBSITE)
        classification = self._classifier.classify(executable)
        return ActiveItem(
            label=classification.display_name,
            kind=ItemKind.APPLICATION,
            category_hint=classification.category,
        )

    def _tick(self, observation: Observation) -> None:
        item = self.resolve_item(observation)
        if not self._debounce(item):
            return

        now = self._clock()
        current = self._session
        if current is None or current.item.label != item.label:
            if current is not None:
                self._close_session(current, now)
            logger.debug("Opening session for %s", item.label)
            self._session = Session(item=item, start_time=now)
            self._cooldown.reset()
            self._pending = None

        self._check_blocked(item, now)

    def _observe(self) -> Observation:
        try:
            return self._inspector.inspect()
        except Exception:
            logger.debug("Window inspection failed; treating as unknown.", exc_info=True)
            return Observation()

    def _debounce(self, item: ActiveItem) -> bool:
        pending = self._pending
        if pending is None or pending.item.label != item.label:
            pending = self._pending = PendingCandidate(item=item)
        else:
            pending.stable_count += 1
        if pending.stable_count < self.settings.debounce_count:
            logger.debug(
                "Debouncing %s (%d/%d)",
                item.label,
                pending.stable_count,
                self.settings.debounce_count,
            )
            return False
        return True

    # ------------------------------------------------------------- focus mode

    def _check_blocked(self, item: ActiveItem, now: datetime) -> None:
        try:
            if not self._store.is_focus_mode_enabled():
                return
            if item.is_website:
                blocked = self._store.is_website_blocked(item.label)
            else:
                blocked = self._store.is_application_blocked(item.label)
        except Exception:
            logger.warning("Block lookup failed for %s", item.label, exc_info=True)
            return
        if not blocked:
            return
        if not self._cooldown.ready(now):
            logger.debug("%s is blocked; alert cooldown active.", item.label)
            return

        self._cooldown.mark(now)
        try:
            self._notifier.notify(
                FOCUS_ALERT_TITLE,
                f"Avoid {item.label} - Stay focused and try to reduce distractions!",
            )
        except Exception:
            logger.warning("Notification for %s failed", item.label, exc_info=True)

    # ---------------------------------------------------------------- records

    def _flush_locked(self) -> None:
        if self._inert:
            return
        self._inert = True
        session = self._session
        self._session = None
        self._pending = None
        if session is not None:
            self._close_session(session, self._clock())

    def _close_session(self, session: Session, end_time: datetime) -> None:
        duration = int((end_time - session.start_time).total_seconds())
        if duration < self.settings.min_log_seconds:
            logger.debug("Dropping %s session of %ds", session.item.label, duration)
            return
        self._persist(
            SessionRecord(
                item=session.item,
                start_time=session.start_time,
                end_time=end_time,
                duration_seconds=duration,
            )
        )

    def _persist(self, record: SessionRecord) -> None:
        item = record.item
        category = self.settings.category_policy.resolve(item)
        try:
            if item.is_website:
                app_id = None
                site_id = self._store.lookup_or_create_website(item.label, category)
                ok = site_id is not None and site_id != -1
            else:
                site_id = None
                app_id = self._store.lookup_or_create_application(item.label, category)
                ok = app_id is not None and app_id != -1
            if not ok:
                logger.warning("Could not resolve an id for %s; record dropped.", item.label)
                self._degraded = True
                return
            self._store.append_activity_record(
                app_id,
                site_id,
                record.start_time,
                record.end_time,
                record.duration_seconds,
            )
        except Exception:
            logger.warning(
                "Failed to persist %s session; record dropped.", item.label, exc_info=True
            )
            self._degraded = True
            return
        self._degraded = False
        logger.info(
            "Logged %s %s -> %ds", item.kind.value, item.label, record.duration_seconds
        )
