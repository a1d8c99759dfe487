"""Configuration-coverage compliance score and scan history summary.

The score measures how many toolbar features are switched on. It says
nothing about defects found by the content scanner.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Any

from a11yscan.storage import IssueStore


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(math.floor(value + 0.5))


class ModuleKind(Enum):
    """Toolbar modules with their feature keys and WCAG criteria."""

    VISUAL = (
        "module_visual",
        "Visual Adjustments",
        (
            "high_contrast",
            "grayscale",
            "invert_colors",
            "low_saturation",
            "text_resize",
            "text_spacing",
            "readable_font",
            "dyslexia_font",
            "cursor_size",
            "reading_guide",
            "reading_mask",
        ),
        ("1.4.3", "1.4.4", "1.4.12"),
    )
    NAVIGATION = (
        "module_navigation",
        "Navigation & Focus",
        ("skip_links", "focus_ring", "focus_not_obscured", "keyboard_nav", "link_highlighting"),
        ("2.1.1", "2.4.1", "2.4.7", "2.4.11"),
    )
    CONTENT = (
        "module_content",
        "Content & Reading",
        ("animation_pause", "hide_images", "highlight_links", "highlight_headings"),
        ("1.4.1", "2.2.2", "2.3.1"),
    )
    ARIA = (
        "module_aria",
        "ARIA & Semantics",
        ("landmark_roles", "form_labels", "link_purpose", "live_regions"),
        ("1.3.1", "2.4.4", "4.1.2", "4.1.3"),
    )
    INTERACTION = (
        "module_interaction",
        "Interaction (WCAG 2.2)",
        ("target_size", "drag_alternatives"),
        ("2.5.7", "2.5.8"),
    )

    def __init__(
        self,
        settings_key: str,
        title: str,
        features: tuple[str, ...],
        wcag_criteria: tuple[str, ...],
    ) -> None:
        self.settings_key = settings_key
        self.title = title
        self.features = features
        self.wcag_criteria = wcag_criteria

    @property
    def short_name(self) -> str:
        """Return the settings key without its module prefix."""
        return self.settings_key.removeprefix("module_")


def compliance_score(settings: dict[str, Any]) -> int:
    """Return the percentage of defined features that are active.

    A feature counts as active only when its module is enabled too.
    Returns 0 when no module defines any feature.
    """
    enabled = 0
    total = 0

    for module in ModuleKind:
        module_settings = settings.get(module.settings_key) or {}
        features = module_settings.get("features") or {}
        module_enabled = bool(module_settings.get("enabled"))
        for feature_enabled in features.values():
            total += 1
            if feature_enabled and module_enabled:
                enabled += 1

    if total == 0:
        return 0
    return round_half_up(enabled / total * 100)


def compliance_level(score: int) -> str:
    """Map a score to high, medium or low."""
    if score >= 90:
        return "high"
    if score >= 70:
        return "medium"
    return "low"


def enabled_modules(settings: dict[str, Any]) -> list[str]:
    """Return short names of modules that are switched on."""
    return [
        module.short_name
        for module in ModuleKind
        if (settings.get(module.settings_key) or {}).get("enabled")
    ]


def module_overview(settings: dict[str, Any]) -> list[dict[str, Any]]:
    """Describe every module with its title, state and WCAG criteria."""
    return [
        {
            "key": module.short_name,
            "title": module.title,
            "enabled": bool((settings.get(module.settings_key) or {}).get("enabled")),
            "wcag_criteria": list(module.wcag_criteria),
        }
        for module in ModuleKind
    ]


def scan_summary(store: IssueStore) -> dict[str, Any]:
    """Summarize the most recent completed scan."""
    latest = store.latest_history()
    if latest is None:
        return {
            "last_scan": None,
            "scan_type": None,
            "total_issues": 0,
            "errors": 0,
            "warnings": 0,
            "notices": 0,
            "items_scanned": 0,
        }

    return {
        "last_scan": latest.scanned_at.isoformat(),
        "scan_type": latest.scan_type,
        "total_issues": latest.total,
        "errors": latest.errors,
        "warnings": latest.warnings,
        "notices": latest.notices,
        "items_scanned": latest.items_scanned,
    }
