from smartlocator.__main__ import locate
from smartlocator.locator_generator import generate_all_locators
from smartlocator.models import DomNode, ElementMetadata, LocatorCandidate
from smartlocator.scoring import score_and_select_best, score_candidate


def _select(metadata: ElementMetadata):
    return score_and_select_best(generate_all_locators(metadata), metadata)


def _submit_input() -> ElementMetadata:
    return ElementMetadata(tag_name="input", id="submit-btn", attributes={"type": "submit"}, is_unique=True)


def _login_button() -> ElementMetadata:
    return ElementMetadata(
        tag_name="button",
        id="a1b2c3d4-e5f6-7890-abcd-ef1234567890",
        attributes={"data-testid": "login-btn"},
        is_unique=True,
    )


def _class_only_button() -> ElementMetadata:
    return ElementMetadata(tag_name="button", class_list=("btn", "btn-primary"), nth_index=3)


def test_stable_id_wins() -> None:
    result = _select(_submit_input())

    assert result.best_locator == "#submit-btn"
    assert result.score == 100.0
    assert result.candidates["id"] == "#submit-btn"
    assert "Unique and stable ID detected" in result.reasons


def test_stable_test_attribute_beats_generated_id() -> None:
    result = _select(_login_button())

    assert "data-testid" in result.best_locator
    assert result.best_locator == "button[data-testid='login-btn']"
    assert result.score == 95.5
    assert "id" not in result.candidates
    assert result.candidates["css"] == "button[data-testid='login-btn']"
    assert result.candidates["xpath"] == "//*[@data-testid='login-btn']"
    assert "Stable attribute detected (data-test, aria-*, role)" in result.reasons


def test_class_only_element_falls_back_to_classes() -> None:
    result = _select(_class_only_button())

    assert result.best_locator == "button.btn.btn-primary"
    assert result.score == 75.5
    assert result.score < _select(_login_button()).score


def test_stable_attribute_element_outranks_class_only_element() -> None:
    class_only = _class_only_button()
    with_attribute = ElementMetadata(
        tag_name="button",
        class_list=class_only.class_list,
        nth_index=class_only.nth_index,
        attributes={"data-testid": "save"},
    )
    assert _select(with_attribute).score > _select(class_only).score


def test_class_rule_overrides_stable_marker_in_the_same_locator() -> None:
    # Later rules win, so the tag.class rules erase the data-qa bonus.
    metadata = ElementMetadata(tag_name="a")
    marked = score_candidate(LocatorCandidate("css", "a.b[data-qa='x']", "marked"), metadata)
    unmarked = score_candidate(LocatorCandidate("css", "a.b[data-zz='x']", "unmarked"), metadata)

    assert marked == unmarked
    assert marked.total == 75.5


def test_table_cell_yields_parameterized_xpaths() -> None:
    metadata = ElementMetadata(
        tag_name="td",
        parent_tag_name="tr",
        nth_index=2,
        dom_path=(
            DomNode(tag="body"),
            DomNode(tag="table", id="users-table"),
            DomNode(tag="tbody"),
            DomNode(tag="tr"),
            DomNode(tag="td", is_current=True),
        ),
    )
    locators = [candidate.locator for candidate in generate_all_locators(metadata)]
    templates = [locator for locator in locators if "%s" in locator]

    assert templates
    assert all("table[@id='users-table']" in locator for locator in templates)
    assert _select(metadata).best_locator in locators


def test_selection_is_idempotent() -> None:
    metadata = ElementMetadata(
        tag_name="a",
        class_list=("nav-link",),
        attributes={"href": "/docs", "aria-label": "Docs"},
        inner_text="Docs",
        parent_tag_name="li",
        nth_index=2,
    )
    first = _select(metadata)
    second = _select(metadata)

    assert first.best_locator == second.best_locator
    assert first.score == second.score
    assert first.candidates == second.candidates
    assert first.reasons == second.reasons


def test_locate_returns_serializable_payload() -> None:
    payload = locate(_submit_input(), explain=True)

    assert payload["bestLocator"] == "#submit-btn"
    assert payload["score"] == 100.0
    assert payload["metadata"]["tagName"] == "input"
    assert payload["ranking"][0]["locator"] == "#submit-btn"
    assert payload["ranking"][0]["total"] == 100.0
    assert payload["element"] == {"type": "input[type=submit]", "formElement": True}
    assert "ranking" not in locate(_submit_input())
