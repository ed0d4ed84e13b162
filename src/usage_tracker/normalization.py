"""Utilities to normalize application names and website keys."""

from __future__ import annotations

import re
from typing import Optional

_PATH_SEPARATORS = re.compile(r"[\\/]")
_SCHEME_PATTERN = re.compile(r"^(https?://)?")
_PATH_PATTERN = re.compile(r"/.*", re.DOTALL)


def normalize_app_name(raw_name: Optional[str]) -> str:
    """Strip any directory and a trailing ``.exe`` from an executable name.

    >>> normalize_app_name(r"C:\\Program Files\\Vim\\gvim.EXE")
    'gvim'
    """
    if raw_name is None:
        return ""
    name = _PATH_SEPARATORS.split(raw_name)[-1]
    if name.lower().endswith(".exe"):
        name = name[:-4]
    return name.strip()


def normalize_site_key(raw_url: Optional[str]) -> str:
    """Reduce a URL or domain to the host part used for block-list matching."""
    if raw_url is None:
        return ""
    normalized = _SCHEME_PATTERN.sub("", raw_url, count=1)
    normalized = _PATH_PATTERN.sub("", normalized, count=1)
    return normalized.strip()
