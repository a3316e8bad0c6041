from smartlocator.validation import (
    NOT_COUNTABLE,
    count_locator_matches,
    is_countable_locator,
    is_xpath_locator,
    validate_locator,
)


class _FakeLocator:
    def __init__(self, count: int) -> None:
        self._count = count

    def count(self) -> int:
        return self._count


class _FakePage:
    def __init__(self, counts: dict[str, int]) -> None:
        self._counts = counts
        self.queries: list[str] = []

    def locator(self, selector: str) -> _FakeLocator:
        self.queries.append(selector)
        return _FakeLocator(self._counts.get(selector, 0))

    def query_selector_all(self, selector: str) -> list[object]:
        self.queries.append(selector)
        return [object()] * self._counts.get(selector, 0)


class _BrokenPage:
    def locator(self, _selector: str) -> _FakeLocator:
        raise RuntimeError("Unexpected token")

    def query_selector_all(self, _selector: str) -> list[object]:
        raise RuntimeError("is not a valid selector")


def test_is_xpath_locator() -> None:
    assert is_xpath_locator("//div")
    assert is_xpath_locator("(//div)[2]")
    assert is_xpath_locator("xpath=//div")
    assert not is_xpath_locator("div > span")


def test_templates_and_host_api_expressions_are_not_countable() -> None:
    page = _FakePage({})
    assert count_locator_matches(page, "//tr[@id='%s']/td") == NOT_COUNTABLE  # type: ignore[arg-type]
    assert count_locator_matches(page, "page.getByRole('button')") == NOT_COUNTABLE  # type: ignore[arg-type]
    assert count_locator_matches(page, "   ") == NOT_COUNTABLE  # type: ignore[arg-type]
    assert page.queries == []
    assert not is_countable_locator("page.locator(\"#id\")")
    assert is_countable_locator("#id")


def test_xpath_counts_go_through_page_locator() -> None:
    page = _FakePage({"xpath=//button[@id='save']": 1})
    assert count_locator_matches(page, "//button[@id='save']") == 1  # type: ignore[arg-type]
    assert page.queries == ["xpath=//button[@id='save']"]


def test_css_counts_go_through_query_selector_all() -> None:
    page = _FakePage({"button.btn": 3})
    assert count_locator_matches(page, "button.btn") == 3  # type: ignore[arg-type]


def test_query_errors_count_as_no_match() -> None:
    assert count_locator_matches(_BrokenPage(), "//div[") == 0  # type: ignore[arg-type]
    assert count_locator_matches(_BrokenPage(), "div[") == 0  # type: ignore[arg-type]


def test_validate_locator_messages() -> None:
    page = _FakePage({"#save": 1, ".btn": 4})

    unique = validate_locator(page, "#save")  # type: ignore[arg-type]
    assert unique.unique and unique.match_count == 1
    assert unique.message == "Locator is unique."

    many = validate_locator(page, ".btn")  # type: ignore[arg-type]
    assert not many.unique
    assert many.message == "Locator is not unique in DOM."

    missing = validate_locator(page, "#gone")  # type: ignore[arg-type]
    assert missing.match_count == 0
    assert missing.message == "Locator matches nothing in the DOM."

    template = validate_locator(page, "//a[@data-menu='%s']")  # type: ignore[arg-type]
    assert template.match_count == NOT_COUNTABLE
    assert not template.unique
