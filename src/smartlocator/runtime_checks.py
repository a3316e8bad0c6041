from __future__ import annotations

import re
from typing import Any

_MISSING_BROWSER_ERROR_HINTS = (
    "executable doesn't exist",
    "executable does not exist",
    "download new browsers",
    "playwright install",
    "could not find browser",
    "failed to launch chromium because executable",
)

_CLOSED_TARGET_HINTS = (
    "target closed",
    "target page, context or browser has been closed",
    "browser has been closed",
)

_URL_SCHEME = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)


def _is_missing_browser_error(exc: Exception) -> bool:
    message = str(exc).lower()
    return any(hint in message for hint in _MISSING_BROWSER_ERROR_HINTS)


def _is_closed_target_error(exc: Exception) -> bool:
    message = str(exc).lower()
    return any(hint in message for hint in _CLOSED_TARGET_HINTS)


def normalize_url(raw_url: Any) -> str:
    url = str(raw_url or "").strip()
    if not url:
        return ""
    if url.startswith(("about:", "data:", "file:")) or _URL_SCHEME.match(url):
        return url
    return f"https://{url}"
