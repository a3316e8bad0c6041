from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys
from typing import Any, Sequence

from .browser_session import BrowserSession
from .config import LOG_DIR, BrowserSettings
from .errors import SmartLocatorError
from .locator_generator import generate_all_locators
from .models import ElementMetadata, LocatorResult
from .scoring import rank_candidates, score_and_select_best
from .selector_rules import element_type_description, is_form_element


def _build_logger(log_dir: Path | None = None, verbose: bool = False) -> logging.Logger:
    logger = logging.getLogger("smartlocator")
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    try:
        target = log_dir or LOG_DIR
        target.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(target / "smartlocator.log", encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    except OSError:
        # Fallback to stderr logging if file logger cannot be initialized.
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)
    return logger


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="smartlocator",
        description="Generate and rank locators for a captured DOM element.",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--metadata", type=Path, help="JSON file holding an element metadata snapshot.")
    source.add_argument("--url", help="Page to open in a managed browser.")
    parser.add_argument("--selector", help="CSS or XPath selector of the element to capture (with --url).")
    parser.add_argument("--validate", action="store_true", help="Report live match counts per candidate (with --url).")
    parser.add_argument("--explain", action="store_true", help="Include the per-candidate score breakdown.")
    parser.add_argument("--verbose", action="store_true", help="Log debug details.")
    return parser


def locate(metadata: ElementMetadata, *, explain: bool = False) -> dict[str, Any]:
    candidates = generate_all_locators(metadata)
    ranking = rank_candidates(candidates, metadata) if explain else []
    result: LocatorResult = score_and_select_best(candidates, metadata)
    payload = result.to_dict()
    payload["element"] = {
        "type": element_type_description(metadata),
        "formElement": is_form_element(metadata),
    }
    if explain:
        payload["ranking"] = [
            {
                "type": candidate.locator_type,
                "locator": candidate.locator,
                "reason": candidate.reason,
                "stability": breakdown.stability,
                "specificity": breakdown.specificity,
                "readability": breakdown.readability,
                "performance": breakdown.performance,
                "total": breakdown.total,
            }
            for candidate, breakdown in ranking
        ]
    return payload


def _load_metadata(path: Path) -> ElementMetadata:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise SmartLocatorError(f"Could not read metadata file {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise SmartLocatorError(f"Metadata file {path} must hold a JSON object")
    try:
        return ElementMetadata.from_dict(payload)
    except (TypeError, ValueError) as exc:
        raise SmartLocatorError(f"Invalid metadata in {path}: {exc}") from exc


def _run(args: argparse.Namespace, logger: logging.Logger) -> dict[str, Any]:
    if args.metadata:
        return locate(_load_metadata(args.metadata), explain=args.explain)

    if not args.selector:
        raise SmartLocatorError("--selector is required with --url")

    with BrowserSession(BrowserSettings.from_env()) as session:
        session.open_url(args.url)
        metadata = session.capture_snapshot(args.selector)
        payload = locate(metadata, explain=args.explain)
        if args.validate:
            payload["validation"] = {}
            for locator_type, locator in payload["candidates"].items():
                check = session.validate_live(locator)
                payload["validation"][locator_type] = {
                    "locator": locator,
                    "matches": check.match_count,
                    "unique": check.unique,
                    "message": check.message,
                }
        logger.info("Best locator for %r on %s: %s", args.selector, session.current_url, payload["bestLocator"])
    return payload


def main(argv: Sequence[str] | None = None) -> int:
    if sys.version_info < (3, 11):
        raise SystemExit(
            "smartlocator requires Python 3.11+. "
            f"Current interpreter: {sys.executable} (Python {sys.version.split()[0]})"
        )
    args = _build_parser().parse_args(argv)
    logger = _build_logger(verbose=args.verbose)

    try:
        payload = _run(args, logger)
    except SmartLocatorError as exc:
        logger.error("%s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
