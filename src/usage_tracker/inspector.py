"""Foreground window inspection."""

from __future__ import annotations

import ctypes
import logging
import sys
from typing import Optional, Protocol

import psutil

from .models import Observation

logger = logging.getLogger(__name__)


class WindowInspector(Protocol):
    def inspect(self) -> Observation:
        """Return the current foreground window; may raise on failure."""
        ...


class WindowsForegroundInspector:
    """Retrieves the foreground window title and process executable via Win32."""

    def __init__(self) -> None:
        if sys.platform != "win32":
            raise RuntimeError("Foreground window inspection requires Windows.")
        self._user32 = ctypes.windll.user32  # type: ignore[attr-defined]

    def inspect(self) -> Observation:
        hwnd = self._user32.GetForegroundWindow()
        if not hwnd:
            return Observation()

        length = self._user32.GetWindowTextLengthW(hwnd)
        buffer = ctypes.create_unicode_buffer(length + 1)
        self._user32.GetWindowTextW(hwnd, buffer, length + 1)
        window_title = buffer.value.strip() or None

        from ctypes import wintypes

        pid = wintypes.DWORD()
        self._user32.GetWindowThreadProcessId(hwnd, ctypes.byref(pid))
        return Observation(
            process_executable=self._process_name(pid.value),
            window_title=window_title,
        )

    @staticmethod
    def _process_name(pid: int) -> Optional[str]:
        if not pid:
            return None
        try:
            return psutil.Process(pid).name().lower()
        except (psutil.Error, ProcessLookupError):
            logger.debug("Could not resolve process name for pid %s", pid)
            return None
