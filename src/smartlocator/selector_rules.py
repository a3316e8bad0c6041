from __future__ import annotations

import re
from typing import Literal

from .models import ElementMetadata

Framework = Literal["Angular", "Vue", "React"]

STABLE_ATTRIBUTE_PRIORITY = (
    "data-test-id",
    "data-testid",
    "data-test",
    "data-qa",
    "data-cy",
    "aria-label",
    "aria-labelledby",
    "role",
    "name",
    "type",
    "placeholder",
)

STABLE_ATTRIBUTE_PREFIXES = ("data-test", "data-qa", "data-cy", "aria-")
STABLE_ATTRIBUTE_NAMES = {"role", "name", "type", "placeholder"}

# Substrings that mark a locator string as keyed on a stable attribute.
STABLE_LOCATOR_MARKERS = ("data-test", "data-qa", "data-cy", "aria-", "@role", "@name")

FORM_TAGS = {"input", "textarea", "select", "button"}

_UUID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)
_HASH_PATTERN = re.compile(r"[0-9a-f]{32,}", re.IGNORECASE)
_LONG_DIGIT_RUN = re.compile(r"\d{10,}")
_CSS_SPECIAL_CHARS = re.compile(r"([\s!\"#$%&'()*+,./:;<=>?@\[\\\]^`{|}~])")
_INDEX_PREDICATE = re.compile(r"\[\d+\]")
_XML_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_.-]*$")

_FRAMEWORK_PREFIXES: tuple[tuple[Framework, tuple[str, ...]], ...] = (
    ("Angular", ("ng-", "data-ng-")),
    ("Vue", ("v-", ":", "@")),
    ("React", ("data-react",)),
)


def is_stable_id(id_value: str | None) -> bool:
    if not id_value:
        return False
    if _UUID_PATTERN.search(id_value):
        return False
    if _HASH_PATTERN.fullmatch(id_value):
        return False
    if _LONG_DIGIT_RUN.search(id_value):
        return False
    return True


def is_stable_attribute(name: str) -> bool:
    if name.startswith(STABLE_ATTRIBUTE_PREFIXES):
        return True
    return name in STABLE_ATTRIBUTE_NAMES


def get_most_stable_attribute(metadata: ElementMetadata) -> str | None:
    for attr in STABLE_ATTRIBUTE_PRIORITY:
        if metadata.attributes.get(attr):
            return attr
    return None


def normalize_text(text: str | None) -> str:
    if text is None:
        return ""
    return re.sub(r"\s+", " ", text.strip())


def has_meaningful_text(metadata: ElementMetadata) -> bool:
    length = len(normalize_text(metadata.inner_text))
    return 0 < length < 100


def escape_xpath(value: str | None) -> str:
    """Quote ``value`` as an XPath 1.0 string literal.

    XPath 1.0 has no escape sequence inside literals. Values with only single
    quotes are wrapped in double quotes. Any value carrying a double quote is
    rebuilt with ``concat``, splitting on the quote kind that needs escaping.
    """
    if value is None:
        return ""
    if "'" not in value and '"' not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    if "'" not in value:
        pieces = value.split('"')
        return "concat(" + ", '\"', ".join(f"'{piece}'" for piece in pieces) + ")"
    pieces = value.split("'")
    return "concat(" + ", \"'\", ".join(f"'{piece}'" for piece in pieces) + ")"


def escape_css_selector(value: str | None) -> str:
    if value is None:
        return ""
    return _CSS_SPECIAL_CHARS.sub(r"\\\1", value)


def escape_css_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


def xpath_attribute_test(name: str) -> str:
    """Return the XPath axis step that addresses attribute ``name``.

    Vue shorthand bindings (``:prop``, ``@click``) are not valid XML names and
    have to be matched through ``name()``.
    """
    if _XML_NAME.match(name):
        return f"@{name}"
    return f"@*[name()={escape_xpath(name)}]"


def _framework_of_attribute(name: str) -> Framework | None:
    lowered = name.lower()
    for framework, prefixes in _FRAMEWORK_PREFIXES:
        if lowered.startswith(prefixes):
            return framework
    if lowered == "data-testid":
        return "React"
    return None


def detect_framework(metadata: ElementMetadata) -> Framework | None:
    for name in metadata.attributes:
        framework = _framework_of_attribute(name)
        if framework:
            return framework
    return None


def framework_attributes(metadata: ElementMetadata, framework: Framework) -> list[tuple[str, str]]:
    return [
        (name, value)
        for name, value in metadata.attributes.items()
        if _framework_of_attribute(name) == framework
    ]


def is_form_element(metadata: ElementMetadata) -> bool:
    return metadata.tag_name in FORM_TAGS


def element_type_description(metadata: ElementMetadata) -> str:
    if metadata.tag_name == "input":
        return f"input[type={metadata.attributes.get('type', 'text')}]"
    return metadata.tag_name


def contains_stable_attribute(locator: str) -> bool:
    return any(marker in locator for marker in STABLE_LOCATOR_MARKERS)


def is_role_locator(locator: str) -> bool:
    return "getByRole" in locator or "getByLabel" in locator


def is_absolute_path(locator: str) -> bool:
    return locator.startswith("/html/body")


def is_index_based(locator: str) -> bool:
    return bool(_INDEX_PREDICATE.search(locator)) or "nth-of-type" in locator


def is_parameterized(locator: str) -> bool:
    return "%s" in locator


def is_host_api_expression(locator: str) -> bool:
    text = locator.strip()
    return text.startswith("page.") or "getBy" in text
