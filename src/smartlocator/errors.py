from __future__ import annotations


class SmartLocatorError(Exception):
    """Base class for failures surfaced to callers of smartlocator."""


class InvalidInputError(SmartLocatorError, ValueError):
    """Raised for unusable caller input: no candidates to score, an empty URL."""


class NoActivePageError(SmartLocatorError):
    pass


class NavigationError(SmartLocatorError):
    pass


class ElementNotFoundError(SmartLocatorError):
    def __init__(self, selector: str) -> None:
        super().__init__(f"Element not found: {selector}")
        self.selector = selector


class BrowserLaunchError(SmartLocatorError):
    pass
