from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping

LocatorType = Literal["id", "css", "xpath", "playwright"]


@dataclass(frozen=True, slots=True)
class DomNode:
    tag: str
    id: str | None = None
    classes: tuple[str, ...] = ()
    text: str | None = None
    is_current: bool = False

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> DomNode:
        tag = str(payload.get("tag") or payload.get("tagName") or "").strip().lower()
        classes = payload.get("classes") or ()
        if isinstance(classes, str):
            classes = classes.split()
        return cls(
            tag=tag,
            id=_optional_str(payload.get("id")),
            classes=tuple(str(item) for item in classes if item),
            text=_optional_str(payload.get("text")),
            is_current=bool(payload.get("isCurrent", payload.get("is_current", False))),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "tag": self.tag,
            "id": self.id,
            "classes": list(self.classes),
            "text": self.text,
            "isCurrent": self.is_current,
        }


@dataclass(frozen=True, slots=True)
class ElementMetadata:
    tag_name: str
    id: str | None = None
    class_list: tuple[str, ...] = ()
    attributes: Mapping[str, str] = field(default_factory=dict)
    inner_text: str | None = None
    normalized_text: str | None = None
    parent_tag_name: str | None = None
    nth_index: int = 0
    css_path: str | None = None
    xpath_path: str | None = None
    outer_html: str | None = None
    is_unique: bool = False
    dom_path: tuple[DomNode, ...] = ()

    def __post_init__(self) -> None:
        tag = (self.tag_name or "").strip().lower()
        if not tag:
            raise ValueError("ElementMetadata requires a non-empty tag_name")
        object.__setattr__(self, "tag_name", tag)
        object.__setattr__(self, "class_list", tuple(self.class_list))
        object.__setattr__(self, "dom_path", tuple(self.dom_path))
        object.__setattr__(
            self,
            "attributes",
            {str(key): str(value) for key, value in dict(self.attributes).items() if value is not None},
        )

    def attr(self, name: str) -> str | None:
        value = self.attributes.get(name)
        return value or None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> ElementMetadata:
        """Build a snapshot from the camelCase shape produced by the capture script."""
        raw_classes = payload.get("classList") or ()
        if isinstance(raw_classes, str):
            raw_classes = raw_classes.split()
        raw_path = payload.get("domPath") or ()
        return cls(
            tag_name=str(payload.get("tagName") or ""),
            id=_optional_str(payload.get("id")),
            class_list=tuple(str(item) for item in raw_classes if item),
            attributes=dict(payload.get("attributes") or {}),
            inner_text=_optional_str(payload.get("innerText")),
            normalized_text=_optional_str(payload.get("normalizedText")),
            parent_tag_name=_optional_str(payload.get("parentTagName"), lower=True),
            nth_index=int(payload.get("nthIndex") or 0),
            css_path=_optional_str(payload.get("cssPath")),
            xpath_path=_optional_str(payload.get("xpathPath")),
            outer_html=_optional_str(payload.get("outerHTML")),
            is_unique=bool(payload.get("isUnique", payload.get("unique", False))),
            dom_path=tuple(DomNode.from_dict(item) for item in raw_path if isinstance(item, Mapping)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "tagName": self.tag_name,
            "id": self.id,
            "classList": list(self.class_list),
            "attributes": dict(self.attributes),
            "innerText": self.inner_text,
            "normalizedText": self.normalized_text,
            "parentTagName": self.parent_tag_name,
            "nthIndex": self.nth_index,
            "cssPath": self.css_path,
            "xpathPath": self.xpath_path,
            "outerHTML": self.outer_html,
            "isUnique": self.is_unique,
            "domPath": [node.to_dict() for node in self.dom_path],
        }


@dataclass(slots=True)
class LocatorCandidate:
    locator_type: LocatorType
    locator: str
    reason: str
    score: float = 0.0

    def __post_init__(self) -> None:
        if not self.locator:
            raise ValueError(f"{self.locator_type} candidate has an empty locator")


@dataclass(frozen=True, slots=True)
class ScoreBreakdown:
    stability: float
    specificity: float
    readability: float
    performance: float
    total: float


@dataclass(slots=True)
class LocatorResult:
    best_locator: str
    candidates: dict[str, str]
    score: float
    reasons: list[str]
    metadata: ElementMetadata

    def to_dict(self) -> dict[str, Any]:
        return {
            "bestLocator": self.best_locator,
            "candidates": dict(self.candidates),
            "score": self.score,
            "reasons": list(self.reasons),
            "metadata": self.metadata.to_dict(),
        }


def _optional_str(value: Any, *, lower: bool = False) -> str | None:
    if value is None:
        return None
    text = str(value)
    if not text:
        return None
    return text.lower() if lower else text
