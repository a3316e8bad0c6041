from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Mapping

CONFIG_DIR = Path.home() / ".smartlocator"
LOG_DIR = CONFIG_DIR / "logs"

SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")


@dataclass(frozen=True, slots=True)
class BrowserSettings:
    browser: str = "chromium"
    headless: bool = True
    viewport: tuple[int, int] = (1280, 720)
    slow_mo_ms: int = 0
    timeout_ms: int = 10_000

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> BrowserSettings:
        env = os.environ if environ is None else environ
        defaults = cls()

        browser = env.get("SMARTLOCATOR_BROWSER", "").strip().lower()
        if browser not in SUPPORTED_BROWSERS:
            browser = defaults.browser

        return cls(
            browser=browser,
            headless=_parse_bool(env.get("SMARTLOCATOR_HEADLESS"), defaults.headless),
            viewport=_parse_viewport(env.get("SMARTLOCATOR_VIEWPORT"), defaults.viewport),
            slow_mo_ms=_parse_non_negative_int(env.get("SMARTLOCATOR_SLOW_MO_MS"), defaults.slow_mo_ms),
            timeout_ms=_parse_non_negative_int(env.get("SMARTLOCATOR_TIMEOUT_MS"), defaults.timeout_ms),
        )


def _parse_bool(raw: str | None, default: bool) -> bool:
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_viewport(raw: str | None, default: tuple[int, int]) -> tuple[int, int]:
    if not raw:
        return default
    parts = raw.lower().replace(" ", "").split("x")
    if len(parts) != 2 or not all(part.isdigit() for part in parts):
        return default
    width, height = int(parts[0]), int(parts[1])
    if width <= 0 or height <= 0:
        return default
    return width, height


def _parse_non_negative_int(raw: str | None, default: int) -> int:
    if raw is None:
        return default
    value = raw.strip()
    if not value.isdigit():
        return default
    return int(value)
