"""Basic regex rules for accessibility defects in stored HTML content.

Limitations:
- No DOM tree; tags are matched one fragment at a time
- Nested or malformed markup may be mismatched
- No CSS visibility or script-generated markup
"""

import html
import re
from typing import Any

from models import ISSUE_SEVERITY, ISSUE_WCAG, Finding, ScanType

IMG_TAG_RE = re.compile(r"<img\b(?P<attrs>[^>]*)>", re.IGNORECASE)
HEADING_RE = re.compile(
    r"<h(?P<level>[1-6])\b[^>]*>(?P<inner>.*?)</h(?P=level)\s*>",
    re.IGNORECASE | re.DOTALL,
)
LINK_RE = re.compile(
    r"<a\b(?P<attrs>[^>]*)>(?P<inner>.*?)</a\s*>",
    re.IGNORECASE | re.DOTALL,
)
ATTRIBUTE_RE = re.compile(
    r"""(?P<name>[^\s"'<>/=]+)"""
    r"""(?:\s*=\s*(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[^\s"'=<>`]+)))?"""
)
TAG_RE = re.compile(r"<[^>]*>")

GENERIC_LINK_TEXTS = frozenset(
    {
        "click here",
        "here",
        "read more",
        "more",
        "learn more",
        "link",
        "this link",
    }
)


def _parse_attributes(attribute_block: str) -> dict[str, str]:
    """Parse tag attributes; valueless attributes map to an empty string."""
    attributes: dict[str, str] = {}
    for match in ATTRIBUTE_RE.finditer(attribute_block):
        name = match.group("name").lower()
        if name in attributes:
            continue
        value = match.group("dq")
        if value is None:
            value = match.group("sq")
        if value is None:
            value = match.group("bare")
        attributes[name] = value or ""
    return attributes


def _has_accessible_name(attributes: dict[str, str], *names: str) -> bool:
    """Return True when any named attribute carries non-blank text."""
    return any(attributes.get(name, "").strip() for name in names)


def _strip_markup(fragment: str) -> str:
    """Remove tags and decode entities from an HTML fragment."""
    return html.unescape(TAG_RE.sub("", fragment))


def _normalize_text(text: str) -> str:
    """Collapse whitespace and lowercase text for comparison."""
    return " ".join(text.split()).lower()


def _make_finding(
    content_id: int,
    scan_type: ScanType,
    issue_code: str,
    element_selector: str,
    message: str,
    **data: Any,
) -> Finding:
    """Create a finding with the fixed severity and WCAG criterion of its code."""
    issue_data = {**data, "wcag": ISSUE_WCAG[issue_code], "message": message}
    return Finding(
        content_id=content_id,
        scan_type=scan_type,
        issue_code=issue_code,
        severity=ISSUE_SEVERITY[issue_code],
        element_selector=element_selector,
        issue_data=issue_data,
    )


def evaluate_images(content_id: int, content: str) -> list[Finding]:
    """Flag images without an alt attribute or with an empty one."""
    findings: list[Finding] = []

    for match in IMG_TAG_RE.finditer(content or ""):
        attributes = _parse_attributes(match.group("attrs"))
        src = attributes.get("src", "")

        if "alt" not in attributes:
            findings.append(
                _make_finding(
                    content_id,
                    "images",
                    "img_no_alt",
                    match.group(0),
                    "Image missing alt attribute",
                    src=src,
                )
            )
        elif attributes["alt"] == "":
            findings.append(
                _make_finding(
                    content_id,
                    "images",
                    "img_empty_alt",
                    match.group(0),
                    "Image has empty alt (verify if decorative)",
                    src=src,
                )
            )

    return findings


def evaluate_headings(content_id: int, content: str) -> list[Finding]:
    """Flag skipped heading levels and headings without text.

    The previous level starts at 0 for every content item, so the first
    heading never counts as a skip.
    """
    findings: list[Finding] = []
    previous_level = 0

    for match in HEADING_RE.finditer(content or ""):
        level = int(match.group("level"))
        text = _strip_markup(match.group("inner")).strip()

        if previous_level > 0 and level > previous_level + 1:
            findings.append(
                _make_finding(
                    content_id,
                    "headings",
                    "heading_skip",
                    match.group(0),
                    f"Heading level skipped: H{level} follows H{previous_level}",
                    text=text,
                    level=level,
                    previous=previous_level,
                )
            )

        if not text:
            findings.append(
                _make_finding(
                    content_id,
                    "headings",
                    "heading_empty",
                    match.group(0),
                    "Empty heading found",
                    level=level,
                )
            )

        previous_level = level

    return findings


def evaluate_links(content_id: int, content: str) -> list[Finding]:
    """Flag links with generic text or without any accessible name."""
    findings: list[Finding] = []

    for match in LINK_RE.finditer(content or ""):
        attributes = _parse_attributes(match.group("attrs"))
        link_text = _strip_markup(match.group("inner")).strip()
        normalized_text = _normalize_text(link_text)

        if normalized_text in GENERIC_LINK_TEXTS:
            if not _has_accessible_name(attributes, "aria-label"):
                findings.append(
                    _make_finding(
                        content_id,
                        "links",
                        "link_generic_text",
                        match.group(0),
                        "Link has generic text without context",
                        text=link_text,
                    )
                )
        elif not normalized_text:
            if not _has_accessible_name(attributes, "aria-label", "title"):
                findings.append(
                    _make_finding(
                        content_id,
                        "links",
                        "link_empty",
                        match.group(0),
                        "Link has no accessible name",
                    )
                )

    return findings
