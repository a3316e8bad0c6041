from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable

from .config import BrowserSettings
from .dom_extractor import extract_element_metadata
from .errors import BrowserLaunchError, ElementNotFoundError, InvalidInputError, NavigationError, NoActivePageError
from .models import ElementMetadata
from .runtime_checks import _is_closed_target_error, _is_missing_browser_error, normalize_url
from .selector_rules import element_type_description
from .validation import LocatorValidation, count_locator_matches, is_xpath_locator, validate_locator

if TYPE_CHECKING:
    from playwright.sync_api import Browser, BrowserContext, Page, Playwright

PlaywrightFactory = Callable[[], "Playwright"]

# Records the element the user Ctrl/Cmd+clicks so it can be captured later.
ARM_CAPTURE_SCRIPT = """
() => {
  if (window.__smartLocatorArmed) return;
  window.__smartLocatorArmed = true;
  window.__smartLocatorSelected = null;
  document.addEventListener('click', (event) => {
    if (!event.ctrlKey && !event.metaKey) return;
    event.preventDefault();
    event.stopPropagation();
    window.__smartLocatorSelected = event.target;
  }, true);
}
"""


def _start_playwright() -> Playwright:
    from playwright.sync_api import sync_playwright

    return sync_playwright().start()


class BrowserSession:
    """Explicit handle over one Playwright browser, context and page.

    The capture script is re-armed on every ``load`` event, so a capture
    started after navigation keeps working without the caller doing anything.
    """

    def __init__(
        self,
        settings: BrowserSettings | None = None,
        playwright_factory: PlaywrightFactory | None = None,
    ) -> None:
        self.settings = settings or BrowserSettings()
        self.logger = logging.getLogger("smartlocator.browser")
        self._playwright_factory = playwright_factory or _start_playwright

        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None

    def __enter__(self) -> BrowserSession:
        return self

    def __exit__(self, *_exc: Any) -> None:
        self.close()

    @property
    def current_url(self) -> str | None:
        return self._page.url if self._page else None

    def open_url(self, raw_url: str) -> None:
        url = normalize_url(raw_url)
        if not url:
            raise InvalidInputError("URL is required")

        page = self._ensure_page()
        try:
            page.goto(url, wait_until="domcontentloaded", timeout=self.settings.timeout_ms)
        except Exception as exc:
            raise NavigationError(f"Failed to open {url}: {exc}") from exc
        self.logger.info("Navigated to %s", page.url)
        self._arm_capture_script()

    def capture_snapshot(self, selector: str) -> ElementMetadata:
        page = self._require_page()
        expression = selector.strip()
        if is_xpath_locator(expression) and not expression.startswith("xpath="):
            expression = f"xpath={expression}"
        try:
            locator = page.locator(expression)
            element = locator.first.element_handle(timeout=self.settings.timeout_ms) if locator.count() else None
        except Exception as exc:
            self.logger.warning("Selector %r could not be resolved: %s", selector, exc)
            raise ElementNotFoundError(selector) from exc
        if element is None:
            raise ElementNotFoundError(selector)

        metadata = extract_element_metadata(page, element)
        self.logger.info("Captured %s for selector %r", element_type_description(metadata), selector)
        return metadata

    def capture_selected(self) -> ElementMetadata | None:
        """Snapshot the element picked with Ctrl/Cmd+click, if any, and clear the pick."""
        page = self._require_page()
        if not page.evaluate("() => window.__smartLocatorSelected != null"):
            return None
        handle = page.evaluate_handle("() => window.__smartLocatorSelected")
        element = handle.as_element()
        if element is None:
            return None
        metadata = extract_element_metadata(page, element)
        page.evaluate("() => { window.__smartLocatorSelected = null; }")
        return metadata

    def count_live_matches(self, locator: str) -> int:
        return count_locator_matches(self._require_page(), locator)

    def validate_live(self, locator: str) -> LocatorValidation:
        return validate_locator(self._require_page(), locator)

    def close(self) -> None:
        self._close_page_and_context()
        if self._browser:
            try:
                self._browser.close()
            except Exception as exc:
                if not _is_closed_target_error(exc):
                    self.logger.warning("Browser close failed: %s", exc)
            self._browser = None
        if self._playwright:
            self._playwright.stop()
            self._playwright = None

    def _require_page(self) -> Page:
        if not self._page:
            raise NoActivePageError("No page is open. Please open a URL first.")
        return self._page

    def _ensure_page(self) -> Page:
        if self._page:
            return self._page

        browser = self._ensure_browser()
        width, height = self.settings.viewport
        self._context = browser.new_context(viewport={"width": width, "height": height})
        self._page = self._context.new_page()
        self._page.on("load", lambda _page: self._on_load())
        return self._page

    def _ensure_browser(self) -> Browser:
        if self._browser:
            return self._browser
        if not self._playwright:
            self._playwright = self._playwright_factory()

        browser_type = getattr(self._playwright, self.settings.browser)
        try:
            self._browser = browser_type.launch(
                headless=self.settings.headless,
                slow_mo=self.settings.slow_mo_ms,
            )
        except Exception as exc:
            if _is_missing_browser_error(exc):
                raise BrowserLaunchError(
                    f"{self.settings.browser} not installed. Run: python -m playwright install {self.settings.browser}"
                ) from exc
            raise BrowserLaunchError(f"Failed to launch {self.settings.browser}: {exc}") from exc
        self.logger.info("Launched %s (headless=%s)", self.settings.browser, self.settings.headless)
        return self._browser

    def _on_load(self) -> None:
        self.logger.info("Page loaded, re-arming capture script")
        self._arm_capture_script()

    def _arm_capture_script(self) -> None:
        if not self._page:
            return
        try:
            self._page.evaluate(ARM_CAPTURE_SCRIPT)
        except Exception as exc:
            if _is_closed_target_error(exc):
                return
            self.logger.exception("Failed to arm capture script")

    def _close_page_and_context(self) -> None:
        if self._page:
            try:
                self._page.close()
            except Exception as exc:
                if not _is_closed_target_error(exc):
                    self.logger.warning("Page close failed: %s", exc)
        self._page = None

        if self._context:
            try:
                self._context.close()
            except Exception as exc:
                if not _is_closed_target_error(exc):
                    self.logger.warning("Context close failed: %s", exc)
        self._context = None
