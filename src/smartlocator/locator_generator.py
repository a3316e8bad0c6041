from __future__ import annotations

import logging
from typing import Sequence

from .models import DomNode, ElementMetadata, LocatorCandidate, LocatorType
from .selector_rules import (
    detect_framework,
    escape_css_selector,
    escape_css_string,
    escape_xpath,
    framework_attributes,
    get_most_stable_attribute,
    has_meaningful_text,
    is_stable_attribute,
    is_stable_id,
    normalize_text,
    xpath_attribute_test,
)

logger = logging.getLogger("smartlocator.core")

PLACEHOLDER = "%s"

_TAG_ROLES = {
    "button": "button",
    "textarea": "textbox",
    "select": "combobox",
    "img": "img",
    "h1": "heading",
    "h2": "heading",
    "h3": "heading",
    "h4": "heading",
    "h5": "heading",
    "h6": "heading",
    "ul": "list",
    "ol": "list",
    "li": "listitem",
    "table": "table",
    "tr": "row",
    "td": "cell",
    "form": "form",
    "nav": "navigation",
    "main": "main",
    "article": "article",
    "aside": "complementary",
    "section": "region",
    "header": "banner",
    "footer": "contentinfo",
}

_INPUT_TYPE_ROLES = {
    "checkbox": "checkbox",
    "radio": "radio",
    "button": "button",
    "submit": "button",
    "reset": "button",
}

# Direct attribute -> Playwright getter, emitted whenever the attribute is set.
_ATTRIBUTE_GETTERS = (
    ("aria-label", "getByLabel", "Playwright label locator"),
    ("placeholder", "getByPlaceholder", "Playwright placeholder locator"),
    ("title", "getByTitle", "Playwright title locator"),
    ("alt", "getByAltText", "Playwright alt text locator"),
    ("data-testid", "getByTestId", "Playwright test ID locator"),
)


class LocatorFactory:
    """Runs every sub-generator over one snapshot, in a fixed order.

    Each ``_add_*`` step only appends. Steps that lack the metadata they
    need return without emitting anything.
    """

    def __init__(self, metadata: ElementMetadata) -> None:
        self.metadata = metadata
        self.tag = metadata.tag_name
        self._candidates: list[LocatorCandidate] = []

    def generate(self) -> list[LocatorCandidate]:
        self._add_id_locator()
        self._add_attribute_locators()
        self._add_css_locators()
        self._add_xpath_locators()
        self._add_role_locators()
        if has_meaningful_text(self.metadata):
            self._add_text_locators()
        return list(self._candidates)

    def _emit(self, locator_type: LocatorType, locator: str, reason: str) -> None:
        self._candidates.append(LocatorCandidate(locator_type=locator_type, locator=locator, reason=reason))

    def _add_id_locator(self) -> None:
        id_value = self.metadata.id
        if not id_value or not is_stable_id(id_value):
            return
        self._emit("id", f"#{escape_css_selector(id_value)}", "Unique and stable ID")

    def _add_attribute_locators(self) -> None:
        for name, value in self.metadata.attributes.items():
            if not value or not is_stable_attribute(name):
                continue
            reason = f"Stable attribute: {name}"
            self._emit("css", f"{self.tag}[{name}='{escape_css_string(value)}']", reason)
            self._emit("xpath", f"//{self.tag}[{xpath_attribute_test(name)}={escape_xpath(value)}]", reason)

    def _add_css_locators(self) -> None:
        tag = self.tag
        classes = self.metadata.class_list
        self._emit("css", tag, "Simple tag selector")

        if classes:
            joined = ".".join(escape_css_selector(name) for name in classes)
            self._emit("css", f"{tag}.{joined}", "Tag with class")
            for name in classes:
                self._emit("css", f".{escape_css_selector(name)}", "Class selector")

        input_type = self.metadata.attr("type")
        if tag == "input" and input_type:
            self._emit("css", f"input[type='{escape_css_string(input_type)}']", "Input with type")

        if self.metadata.nth_index > 0:
            self._emit("css", f"{tag}:nth-of-type({self.metadata.nth_index})", "Nth-of-type (fallback)")

    def _add_xpath_locators(self) -> None:
        tag = self.tag
        metadata = self.metadata
        step_start = len(self._candidates)

        # Unlike the id locator, these ignore id stability.
        if metadata.id:
            literal = escape_xpath(metadata.id)
            self._emit("xpath", f"//{tag}[@id={literal}]", "XPath with id")
            self._emit("xpath", f"//*[@id={literal}]", "XPath with id (any tag)")

        framework = detect_framework(metadata)
        if framework:
            for name, value in framework_attributes(metadata, framework):
                if not value:
                    continue
                self._emit(
                    "xpath",
                    f"//*[{xpath_attribute_test(name)}={escape_xpath(value)}]",
                    f"{framework} attribute: {name}",
                )

        stable_attr = get_most_stable_attribute(metadata)
        if stable_attr:
            value = metadata.attributes[stable_attr]
            self._emit(
                "xpath",
                f"//{tag}[{xpath_attribute_test(stable_attr)}={escape_xpath(value)}]",
                "XPath with stable attribute",
            )

        classes = metadata.class_list
        if classes:
            self._emit("xpath", f"//{tag}[contains(@class, {escape_xpath(classes[0])})]", "XPath with class contains")
            if len(classes) >= 2:
                predicates = " and ".join(f"contains(@class, {escape_xpath(name)})" for name in classes[:2])
                self._emit("xpath", f"//{tag}[{predicates}]", "XPath with combined classes")

        text = normalize_text(metadata.inner_text)
        if has_meaningful_text(metadata) and 3 <= len(text) < 50:
            self._emit("xpath", f"//{tag}[text()={escape_xpath(text)}]", "XPath with exact text node")

        if len(self._candidates) == step_start and metadata.nth_index > 0 and metadata.parent_tag_name:
            self._emit(
                "xpath",
                f"//{metadata.parent_tag_name}/{tag}[{metadata.nth_index}]",
                "XPath with position (fallback)",
            )

        if len(metadata.dom_path) >= 3:
            levels = [_dom_level_selector(node) for node in metadata.dom_path[-3:]]
            self._emit("xpath", "//" + "/".join(levels), "Hierarchical XPath (grandparent/parent/element)")

        for locator, reason in build_dynamic_xpaths(metadata):
            self._emit("xpath", locator, reason)

    def _add_role_locators(self) -> None:
        metadata = self.metadata

        if metadata.id and is_stable_id(metadata.id):
            selector = f"#{escape_css_selector(metadata.id)}"
            self._emit("playwright", f'page.locator("{_js_string(selector)}")', "Playwright ID locator")

        stable_attr = get_most_stable_attribute(metadata)
        if stable_attr:
            value = metadata.attributes[stable_attr]
            self._emit(
                "playwright",
                f"page.locator(\"[{stable_attr}='{_js_string(escape_css_string(value))}']\")",
                "Playwright stable attribute locator",
            )

        role = infer_aria_role(metadata)
        if role:
            self._add_get_by_role(role)

        for attr, getter, reason in _ATTRIBUTE_GETTERS:
            value = metadata.attr(attr)
            if not value:
                continue
            self._emit("playwright", f'page.{getter}("{_js_string(value)}")', reason)

    def _add_get_by_role(self, role: str) -> None:
        attributes = self.metadata.attributes
        quoted_role = f"'{role}'"
        self._emit("playwright", f"page.getByRole({quoted_role})", "Playwright getByRole locator")

        text = normalize_text(self.metadata.inner_text)
        if text:
            self._emit(
                "playwright",
                f'page.getByRole({quoted_role}, {{ name: "{_js_string(text)}" }})',
                "Playwright getByRole with name",
            )

        aria_label = self.metadata.attr("aria-label")
        if aria_label:
            self._emit(
                "playwright",
                f'page.getByRole({quoted_role}, {{ name: "{_js_string(aria_label)}" }})',
                "Playwright getByRole with aria-label",
            )

        if role in {"checkbox", "radio"} and "checked" in attributes:
            self._emit(
                "playwright",
                f"page.getByRole({quoted_role}, {{ checked: true }})",
                "Playwright getByRole with checked state",
            )

        pressed = self.metadata.attr("aria-pressed")
        if role == "button" and pressed:
            state = "true" if pressed.strip().lower() == "true" else "false"
            self._emit(
                "playwright",
                f"page.getByRole({quoted_role}, {{ pressed: {state} }})",
                "Playwright getByRole with pressed state",
            )

    def _add_text_locators(self) -> None:
        tag = self.tag
        text = normalize_text(self.metadata.inner_text)
        if not text:
            return
        literal = escape_xpath(text)
        self._emit("xpath", f"//{tag}[normalize-space()={literal}]", "XPath with exact text")
        self._emit("xpath", f"//{tag}[contains(normalize-space(), {literal})]", "XPath with text contains")
        if tag in {"button", "a"}:
            self._emit(
                "playwright",
                f"page.locator(\"{tag}:has-text('{_js_string(escape_css_string(text))}')\")",
                "Playwright text-based locator",
            )


def generate_all_locators(metadata: ElementMetadata) -> list[LocatorCandidate]:
    candidates = LocatorFactory(metadata).generate()
    logger.debug("Generated %d locator candidates for <%s>", len(candidates), metadata.tag_name)
    return candidates


def infer_aria_role(metadata: ElementMetadata) -> str | None:
    explicit = metadata.attributes.get("role")
    if explicit:
        return explicit

    tag = metadata.tag_name
    if tag == "a":
        classes = " ".join(metadata.class_list).lower()
        if "btn" in classes or "button" in classes:
            return "button"
        return "link"
    if tag == "input":
        input_type = (metadata.attributes.get("type") or "").strip().lower()
        return _INPUT_TYPE_ROLES.get(input_type, "textbox")
    return _TAG_ROLES.get(tag)


def build_dynamic_xpaths(metadata: ElementMetadata) -> list[tuple[str, str]]:
    """Parameterized XPaths for repeating structures.

    Every returned locator carries a literal ``%s`` where the per-use value
    (row id, cell text, product id, menu label) is substituted.
    """
    ancestors = _ancestors_nearest_first(metadata.dom_path)
    patterns: list[tuple[str, str]] = []
    patterns.extend(_menu_item_patterns(metadata, ancestors))
    patterns.extend(_table_patterns(metadata, ancestors))
    patterns.extend(_product_list_patterns(metadata, ancestors))
    return patterns


def normalize_classes(raw: Sequence[str] | str | None) -> list[str]:
    if not raw:
        return []
    if isinstance(raw, str):
        items = raw.split()
    else:
        items = [item for item in raw if isinstance(item, str)]

    seen: set[str] = set()
    normalized: list[str] = []
    for item in items:
        clean = item.strip()
        if not clean or clean in seen:
            continue
        seen.add(clean)
        normalized.append(clean)
    return normalized


def _menu_item_patterns(metadata: ElementMetadata, ancestors: list[DomNode]) -> list[tuple[str, str]]:
    if metadata.tag_name != "a" or metadata.parent_tag_name != "li":
        return []

    patterns: list[tuple[str, str]] = []
    container = next((node for node in ancestors if node.tag in {"ul", "nav"}), None)
    if container:
        step = "/li/a" if container.tag == "ul" else "//li/a"
        patterns.append(
            (
                f"{_container_xpath(container)}{step}[text()='{PLACEHOLDER}']",
                f"Dynamic menu item inside <{container.tag}>",
            )
        )

    data_attr = next((name for name in metadata.attributes if name.startswith("data-")), None)
    if data_attr:
        patterns.append(
            (
                f"//a[{xpath_attribute_test(data_attr)}='{PLACEHOLDER}']",
                f"Dynamic menu item by {data_attr}",
            )
        )
    return patterns


def _table_patterns(metadata: ElementMetadata, ancestors: list[DomNode]) -> list[tuple[str, str]]:
    if metadata.parent_tag_name not in {"tr", "td"}:
        return []
    table = next((node for node in ancestors if node.tag == "table"), None)
    if not table or not table.id:
        return []

    table_xpath = f"//table[@id={escape_xpath(table.id)}]"
    tag = metadata.tag_name

    if tag == "button":
        classes = " ".join(metadata.class_list).lower()
        if "edit" not in classes and "delete" not in classes:
            return []
        data_action = metadata.attr("data-action")
        if data_action:
            button = f"button[@data-action={escape_xpath(data_action)}]"
            action = data_action
        else:
            action = "edit" if "edit" in classes else "delete"
            button = f"button[contains(@class, '{action}')]"
        return [
            (f"{table_xpath}//tr[@id='{PLACEHOLDER}']//{button}", f"Dynamic {action} button by row id"),
            (
                f"{table_xpath}//tr[td[contains(@class, 'name')][normalize-space()='{PLACEHOLDER}']]//{button}",
                f"Dynamic {action} button by name column",
            ),
            (
                f"{table_xpath}//tr[td[contains(@class, 'email')][normalize-space()='{PLACEHOLDER}']]//{button}",
                f"Dynamic {action} button by email column",
            ),
            (
                f"{table_xpath}//tr[td[normalize-space()='{PLACEHOLDER}']]//{button}",
                f"Dynamic {action} button by any cell text",
            ),
            (f"{table_xpath}//tbody/tr[{PLACEHOLDER}]//{button}", f"Dynamic {action} button by row position"),
        ]

    if tag == "td":
        patterns = [(f"{table_xpath}//tr[@id='{PLACEHOLDER}']/td", "Dynamic cell by row id")]
        if metadata.nth_index > 0:
            patterns.append(
                (
                    f"{table_xpath}//tr[td[normalize-space()='{PLACEHOLDER}']]/td[{metadata.nth_index}]",
                    "Dynamic cell by row text and column position",
                )
            )
        return patterns
    return []


def _product_list_patterns(metadata: ElementMetadata, ancestors: list[DomNode]) -> list[tuple[str, str]]:
    if metadata.tag_name != "button" or not metadata.attr("data-product"):
        return []
    item = next((node for node in ancestors if node.tag == "li" and "product-item" in node.classes), None)
    if not item:
        return []
    container = "//li[contains(@class, 'product-item')]"
    return [
        (f"{container}//button[@data-product='{PLACEHOLDER}']", "Dynamic product button by product id"),
        (
            f"{container}[.//*[normalize-space()='{PLACEHOLDER}']]//button[@data-product]",
            "Dynamic product button by product name",
        ),
    ]


def _ancestors_nearest_first(dom_path: Sequence[DomNode]) -> list[DomNode]:
    nodes = list(dom_path)
    if nodes and nodes[-1].is_current:
        nodes = nodes[:-1]
    return list(reversed(nodes))


def _dom_level_selector(node: DomNode) -> str:
    tag = node.tag or "*"
    if node.id:
        return f"{tag}[@id={escape_xpath(node.id)}]"
    if node.classes:
        return f"{tag}[contains(@class, {escape_xpath(node.classes[0])})]"
    return tag


def _container_xpath(node: DomNode) -> str:
    return "//" + _dom_level_selector(node)


def _js_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')
