"""Recover website domains from browser window titles."""

from __future__ import annotations

import re
from typing import Optional

_BROWSER_FAMILIES: tuple[str, ...] = (
    "chrome",
    "edge",
    "firefox",
    "brave",
    "opera",
    "chromium",
)

# Checked in order; only the first matching suffix is removed.
_BROWSER_SUFFIXES: tuple[str, ...] = (
    " - google chrome",
    " — google chrome",
    " – google chrome",
    " - microsoft edge",
    " - firefox",
    " - mozilla firefox",
    " - brave",
    " - opera",
    " - chromium",
    " - chrome",
)

# Keyword -> canonical domain. Order matters: the first substring hit wins,
# so "youtube music" is shadowed by "youtube".
_KEYWORD_DOMAINS: tuple[tuple[str, str], ...] = (
    ("youtube", "youtube.com"),
    ("stack overflow", "stackoverflow.com"),
    ("stackoverflow", "stackoverflow.com"),
    ("github", "github.com"),
    ("gitlab", "gitlab.com"),
    ("gmail", "mail.google.com"),
    ("reddit", "reddit.com"),
    ("twitter", "twitter.com"),
    ("linkedin", "linkedin.com"),
    ("medium", "medium.com"),
    ("google drive", "drive.google.com"),
    ("notion", "notion.so"),
    ("discord", "discord.com"),
    ("zoom", "zoom.us"),
    ("coursera", "coursera.org"),
    ("udemy", "udemy.com"),
    ("amazon", "amazon.com"),
    ("youtube music", "music.youtube.com"),
)

_DOMAIN_PATTERN = re.compile(r"([\w.-]+\.[a-z]{2,6})", re.IGNORECASE | re.ASCII)


def is_browser_process(executable: Optional[str]) -> bool:
    """Return True when the executable belongs to a known browser family."""
    if not executable:
        return False
    lowered = executable.lower()
    return any(family in lowered for family in _BROWSER_FAMILIES)


def extract_domain(window_title: Optional[str]) -> Optional[str]:
    """Guess the website shown in a browser window from its title.

    A literal domain in the title wins over the keyword table. Returns
    ``None`` when neither yields anything, in which case the window should be
    treated as a plain application.
    """
    if window_title is None:
        return None
    title = window_title.strip().lower()

    for suffix in _BROWSER_SUFFIXES:
        if title.endswith(suffix):
            title = title[: -len(suffix)].strip()
            break

    match = _DOMAIN_PATTERN.search(title)
    if match:
        domain = match.group(1).lower()
        if domain.startswith("www."):
            domain = domain[4:]
        return domain

    for keyword, domain in _KEYWORD_DOMAINS:
        if keyword in title:
            return domain
    return None


def normalize_domain(domain: Optional[str]) -> Optional[str]:
    """Canonicalize a domain: lowercase, no scheme, no ``www.``, no trailing slash."""
    if domain is None:
        return None
    normalized = domain.strip().lower()
    if normalized.startswith("http://"):
        normalized = normalized[7:]
    if normalized.startswith("https://"):
        normalized = normalized[8:]
    if normalized.startswith("www."):
        normalized = normalized[4:]
    if normalized.endswith("/"):
        normalized = normalized[:-1]
    return normalized
