import pytest

from smartlocator.models import DomNode, ElementMetadata, LocatorCandidate, LocatorResult


def test_metadata_from_capture_payload() -> None:
    metadata = ElementMetadata.from_dict(
        {
            "tagName": "BUTTON",
            "id": "",
            "classList": "btn  btn-primary",
            "attributes": {"data-testid": "save", "disabled": None},
            "innerText": "Save",
            "parentTagName": "FORM",
            "nthIndex": 2,
            "isUnique": True,
            "domPath": [
                {"tagName": "form", "id": "login", "classes": [], "isCurrent": False},
                {"tagName": "button", "classes": ["btn"], "isCurrent": True},
                "not-a-node",
            ],
        }
    )

    assert metadata.tag_name == "button"
    assert metadata.id is None
    assert metadata.class_list == ("btn", "btn-primary")
    assert metadata.attributes == {"data-testid": "save"}
    assert metadata.parent_tag_name == "form"
    assert metadata.nth_index == 2
    assert metadata.is_unique is True
    assert metadata.dom_path == (
        DomNode(tag="form", id="login"),
        DomNode(tag="button", classes=("btn",), is_current=True),
    )


def test_metadata_accepts_legacy_unique_key() -> None:
    assert ElementMetadata.from_dict({"tagName": "a", "unique": True}).is_unique is True
    assert ElementMetadata.from_dict({"tagName": "a"}).is_unique is False


def test_metadata_requires_tag_name() -> None:
    with pytest.raises(ValueError):
        ElementMetadata(tag_name="  ")
    with pytest.raises(ValueError):
        ElementMetadata.from_dict({"id": "x"})


def test_metadata_attr_treats_empty_as_missing() -> None:
    metadata = ElementMetadata(tag_name="input", attributes={"name": "", "type": "text"})
    assert metadata.attr("name") is None
    assert metadata.attr("type") == "text"
    assert metadata.attr("missing") is None


def test_metadata_to_dict_uses_capture_keys() -> None:
    metadata = ElementMetadata(
        tag_name="li",
        class_list=["item"],
        dom_path=[DomNode(tag="ul"), DomNode(tag="li", is_current=True)],
    )
    payload = metadata.to_dict()

    assert payload["tagName"] == "li"
    assert payload["classList"] == ["item"]
    assert payload["domPath"][1] == {"tag": "li", "id": None, "classes": [], "text": None, "isCurrent": True}
    assert ElementMetadata.from_dict(payload) == metadata


def test_candidate_rejects_empty_locator() -> None:
    with pytest.raises(ValueError):
        LocatorCandidate(locator_type="css", locator="", reason="empty")


def test_result_to_dict() -> None:
    metadata = ElementMetadata(tag_name="a")
    result = LocatorResult(
        best_locator="a",
        candidates={"css": "a"},
        score=57.5,
        reasons=["Locator is short and readable"],
        metadata=metadata,
    )
    payload = result.to_dict()

    assert payload["bestLocator"] == "a"
    assert payload["candidates"] == {"css": "a"}
    assert payload["score"] == 57.5
    assert payload["reasons"] == ["Locator is short and readable"]
    assert payload["metadata"]["tagName"] == "a"
