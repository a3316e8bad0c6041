from __future__ import annotations

import logging
import re
from typing import Sequence

from .errors import InvalidInputError
from .models import ElementMetadata, LocatorCandidate, LocatorResult, ScoreBreakdown
from .selector_rules import (
    contains_stable_attribute,
    is_absolute_path,
    is_index_based,
    is_role_locator,
    is_stable_id,
)

logger = logging.getLogger("smartlocator.core")

STABILITY_WEIGHT = 0.40
SPECIFICITY_WEIGHT = 0.30
READABILITY_WEIGHT = 0.20
PERFORMANCE_WEIGHT = 0.10

GENERIC_REASON = "Best available locator based on element attributes"

_CLASS_LIKE = re.compile(r"\.\w")
_TAG_WITH_CLASS = re.compile(r"\w+\.\w+")
_BARE_TAG = re.compile(r"^(//)?\w+$")
_DIRECT_ATTRIBUTE_LOOKUP = re.compile(r".*\[@\w+='[^']*'\]")


def stability_score(candidate: LocatorCandidate, metadata: ElementMetadata) -> float:
    # Rules overwrite each other in order; the last one that applies wins.
    locator = candidate.locator
    score = 50.0

    if candidate.locator_type == "id" and metadata.id is not None:
        score = 100.0 if is_stable_id(metadata.id) else 30.0
    if contains_stable_attribute(locator):
        score = 95.0
    if is_role_locator(locator):
        score = 90.0
    if "normalize-space()" in locator or "has-text" in locator:
        score = 60.0
    if "class" in locator or _CLASS_LIKE.search(locator):
        score = 65.0
    if is_index_based(locator):
        score = 40.0
    if is_absolute_path(locator):
        score = 15.0
    return score


def specificity_score(candidate: LocatorCandidate, metadata: ElementMetadata) -> float:
    locator = candidate.locator
    score = 50.0

    if candidate.locator_type == "id":
        score = 100.0
    if contains_stable_attribute(locator):
        score = 90.0
    attribute_predicates = locator.count("@")
    if attribute_predicates > 1:
        score = 85.0
    if attribute_predicates == 1:
        score = 75.0
    if _TAG_WITH_CLASS.search(locator):
        score = 70.0
    if _BARE_TAG.match(locator):
        score = 30.0

    if metadata.is_unique:
        score = min(100.0, score + 10.0)
    return score


def readability_score(candidate: LocatorCandidate) -> float:
    locator = candidate.locator
    length = len(locator)
    if length < 30:
        score = 100.0
    elif length < 50:
        score = 85.0
    elif length < 80:
        score = 70.0
    elif length < 120:
        score = 55.0
    else:
        score = 40.0

    separators = locator.count("/")
    if separators > 5:
        score -= 20.0
    elif separators > 3:
        score -= 10.0

    if is_role_locator(locator):
        score += 15.0
    if contains_stable_attribute(locator):
        score += 10.0

    return max(0.0, min(100.0, score))


def performance_score(candidate: LocatorCandidate) -> float:
    locator = candidate.locator
    score = 50.0

    if candidate.locator_type == "id":
        score = 100.0
    if _DIRECT_ATTRIBUTE_LOOKUP.fullmatch(locator) and "//" not in locator:
        score = 90.0
    if candidate.locator_type == "css" and ":nth-of-type" not in locator:
        score = 85.0
    if candidate.locator_type == "xpath" and contains_stable_attribute(locator):
        score = 75.0
    if "normalize-space()" in locator or "has-text" in locator or "contains(" in locator:
        score = 50.0
    if "//" in locator and locator.count("/") > 4:
        score = 40.0
    if is_absolute_path(locator):
        score = 20.0
    return score


def score_candidate(candidate: LocatorCandidate, metadata: ElementMetadata) -> ScoreBreakdown:
    stability = stability_score(candidate, metadata)
    specificity = specificity_score(candidate, metadata)
    readability = readability_score(candidate)
    performance = performance_score(candidate)
    total = (
        stability * STABILITY_WEIGHT
        + specificity * SPECIFICITY_WEIGHT
        + readability * READABILITY_WEIGHT
        + performance * PERFORMANCE_WEIGHT
    )
    return ScoreBreakdown(
        stability=stability,
        specificity=specificity,
        readability=readability,
        performance=performance,
        total=round(total, 2),
    )


def quick_score(locator: str) -> float:
    """Cheap approximation of a stored locator's score.

    Only used to decide which locator of a type is kept in the per-type map.
    It does not agree with :func:`score_candidate` and is not meant to.
    """
    if locator.startswith("#"):
        return 95.0
    if "data-test" in locator:
        return 90.0
    if "aria-" in locator:
        return 85.0
    if len(locator) < 30:
        return 80.0
    if "[" in locator:
        return 75.0
    return 50.0


def score_and_select_best(candidates: list[LocatorCandidate], metadata: ElementMetadata) -> LocatorResult:
    if not candidates:
        raise InvalidInputError("No locator candidates provided")

    for candidate in candidates:
        candidate.score = score_candidate(candidate, metadata).total

    candidates.sort(key=lambda item: item.score, reverse=True)
    best = candidates[0]

    by_type: dict[str, str] = {}
    for candidate in candidates:
        key = candidate.locator_type
        if key not in by_type or candidate.score > quick_score(by_type[key]):
            by_type[key] = candidate.locator

    logger.debug("Best locator %r scored %.2f among %d candidates", best.locator, best.score, len(candidates))
    return LocatorResult(
        best_locator=best.locator,
        candidates=by_type,
        score=best.score,
        reasons=build_reasons(best, metadata),
        metadata=metadata,
    )


def build_reasons(best: LocatorCandidate, metadata: ElementMetadata) -> list[str]:
    locator = best.locator
    reasons: list[str] = []

    if best.locator_type == "id" and is_stable_id(metadata.id):
        reasons.append("Unique and stable ID detected")
    if contains_stable_attribute(locator):
        reasons.append("Stable attribute detected (data-test, aria-*, role)")
    if metadata.is_unique:
        reasons.append("Locator uniquely identifies the element")
    if len(locator) < 50:
        reasons.append("Locator is short and readable")
    if is_role_locator(locator):
        reasons.append("Semantic role-based locator")
    if best.locator_type == "xpath":
        if not locator.startswith("/html"):
            reasons.append("Relative XPath (not absolute)")
        if not re.search(r"\[\d+\]", locator):
            reasons.append("No index-based selection")
    if best.locator_type in {"id", "css"}:
        reasons.append("Fast DOM query performance")

    if not reasons:
        reasons.append(GENERIC_REASON)
    return reasons


def rank_candidates(candidates: Sequence[LocatorCandidate], metadata: ElementMetadata) -> list[tuple[LocatorCandidate, ScoreBreakdown]]:
    """Score without mutating, best first; ties keep generation order."""
    scored = [(candidate, score_candidate(candidate, metadata)) for candidate in candidates]
    scored.sort(key=lambda item: item[1].total, reverse=True)
    return scored
