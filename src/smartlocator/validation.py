from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING

from .selector_rules import is_host_api_expression, is_parameterized

if TYPE_CHECKING:
    from playwright.sync_api import Page

logger = logging.getLogger("smartlocator.browser")

# Returned instead of a count for templates and host-API call expressions.
NOT_COUNTABLE = -1


@dataclass(frozen=True, slots=True)
class LocatorValidation:
    unique: bool
    match_count: int
    message: str


def is_xpath_locator(locator: str) -> bool:
    text = locator.strip()
    return text.startswith("/") or text.startswith("(/") or text.startswith("xpath=")


def is_countable_locator(locator: str) -> bool:
    text = locator.strip()
    if not text:
        return False
    return not is_parameterized(text) and not is_host_api_expression(text)


def count_locator_matches(page: Page, locator: str) -> int:
    text = str(locator or "").strip()
    if not is_countable_locator(text):
        return NOT_COUNTABLE

    try:
        if is_xpath_locator(text):
            expression = text if text.startswith("xpath=") else f"xpath={text}"
            return page.locator(expression).count()
        return len(page.query_selector_all(text))
    except Exception:
        logger.exception("Live DOM query failed for %r", text)
        return 0


def validate_locator(page: Page, locator: str) -> LocatorValidation:
    match_count = count_locator_matches(page, locator)
    if match_count == NOT_COUNTABLE:
        return LocatorValidation(False, match_count, "Locator cannot be counted against the live DOM.")
    if match_count == 0:
        return LocatorValidation(False, match_count, "Locator matches nothing in the DOM.")
    if match_count > 1:
        return LocatorValidation(False, match_count, "Locator is not unique in DOM.")
    return LocatorValidation(True, match_count, "Locator is unique.")
