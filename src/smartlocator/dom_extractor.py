from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .locator_generator import normalize_classes
from .models import ElementMetadata
from .validation import count_locator_matches

if TYPE_CHECKING:
    from playwright.sync_api import ElementHandle, Page

EXTRACT_METADATA_SCRIPT = """
(el) => {
  const getXPath = (node) => {
    if (node.id) return `//*[@id='${node.id}']`;
    const parts = [];
    while (node && node.nodeType === Node.ELEMENT_NODE) {
      let count = 0;
      let index = 0;
      for (let sibling = node.parentNode ? node.parentNode.firstChild : null; sibling; sibling = sibling.nextSibling) {
        if (sibling.nodeType === Node.ELEMENT_NODE && sibling.tagName === node.tagName) {
          count += 1;
          if (sibling === node) index = count;
        }
      }
      const tag = node.tagName.toLowerCase();
      parts.unshift(count > 1 ? `${tag}[${index}]` : tag);
      node = node.parentNode;
    }
    return '/' + parts.join('/');
  };

  const getCssPath = (node) => {
    if (node.id) return `#${CSS.escape(node.id)}`;
    const parts = [];
    while (node && node.nodeType === Node.ELEMENT_NODE) {
      if (node.id) {
        parts.unshift(`#${CSS.escape(node.id)}`);
        break;
      }
      let selector = node.tagName.toLowerCase();
      const classes = Array.from(node.classList || []);
      if (classes.length) {
        selector += '.' + classes.map((name) => CSS.escape(name)).join('.');
      }
      parts.unshift(selector);
      node = node.parentElement;
    }
    return parts.join(' > ');
  };

  const getNthIndex = (node) => {
    let index = 1;
    let sibling = node.previousElementSibling;
    while (sibling) {
      if (sibling.tagName === node.tagName) index += 1;
      sibling = sibling.previousElementSibling;
    }
    return index;
  };

  const getDomPath = (node) => {
    const path = [];
    let current = node;
    while (current && current.tagName) {
      const onlyText = current.childNodes.length === 1 && current.childNodes[0].nodeType === Node.TEXT_NODE;
      path.unshift({
        tagName: current.tagName.toLowerCase(),
        id: current.id || null,
        classes: Array.from(current.classList || []),
        text: onlyText ? current.textContent.trim() : null,
        isCurrent: current === node,
      });
      if (current.tagName.toLowerCase() === 'body') break;
      current = current.parentElement;
    }
    return path;
  };

  const attrs = {};
  for (const attr of el.attributes) {
    attrs[attr.name] = attr.value;
  }

  return {
    tagName: el.tagName.toLowerCase(),
    id: el.id || null,
    classList: Array.from(el.classList || []),
    attributes: attrs,
    innerText: el.innerText || '',
    normalizedText: (el.innerText || '').trim().replace(/\\s+/g, ' '),
    parentTagName: el.parentElement ? el.parentElement.tagName.toLowerCase() : null,
    nthIndex: getNthIndex(el),
    cssPath: getCssPath(el),
    xpathPath: getXPath(el),
    outerHTML: el.outerHTML,
    domPath: getDomPath(el),
  };
}
"""


def extract_element_metadata(page: Page, element: ElementHandle) -> ElementMetadata:
    payload: dict[str, Any] = dict(element.evaluate(EXTRACT_METADATA_SCRIPT) or {})
    payload["classList"] = normalize_classes(payload.get("classList", []))
    payload["attributes"] = {
        str(key): str(value) for key, value in dict(payload.get("attributes") or {}).items() if value is not None
    }

    css_path = str(payload.get("cssPath") or "")
    payload["isUnique"] = bool(css_path) and count_locator_matches(page, css_path) == 1
    return ElementMetadata.from_dict(payload)
