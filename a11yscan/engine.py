"""Content scanner: runs the rule evaluators selected by a scan type."""

from collections.abc import Callable, Iterable

from loguru import logger

from a11yscan.rules import evaluate_headings, evaluate_images, evaluate_links
from models import SCAN_TYPES, ContentItem, Finding

Evaluator = Callable[[int, str], list[Finding]]

EVALUATORS: dict[str, Evaluator] = {
    "images": evaluate_images,
    "headings": evaluate_headings,
    "links": evaluate_links,
}


def normalize_scan_type(scan_type: str | None) -> str:
    """Return a known scan type, falling back to a full scan."""
    if scan_type in SCAN_TYPES:
        return scan_type
    logger.warning(f"Unknown scan type {scan_type!r}, running a full scan")
    return "full"


def evaluators_for(scan_type: str) -> list[Evaluator]:
    """Return evaluators for a scan type in images, headings, links order."""
    scan_type = normalize_scan_type(scan_type)
    if scan_type == "full":
        return list(EVALUATORS.values())
    return [EVALUATORS[scan_type]]


def scan_item(content_id: int, content: str, scan_type: str = "full") -> list[Finding]:
    """Scan one content body and return its findings in evaluator order."""
    findings: list[Finding] = []
    for evaluator in evaluators_for(scan_type):
        findings.extend(evaluator(content_id, content))
    return findings


def scan_items(items: Iterable[ContentItem], scan_type: str = "full") -> list[Finding]:
    """Scan several content items and concatenate their findings."""
    findings: list[Finding] = []
    for item in items:
        item_findings = scan_item(item.id, item.html_body, scan_type)
        if item_findings:
            logger.debug(f"Content {item.id}: {len(item_findings)} finding(s)")
        findings.extend(item_findings)
    return findings
