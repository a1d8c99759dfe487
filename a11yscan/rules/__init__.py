"""Accessibility rule evaluators."""

from a11yscan.rules.basic import (
    GENERIC_LINK_TEXTS,
    evaluate_headings,
    evaluate_images,
    evaluate_links,
)

__all__ = [
    "GENERIC_LINK_TEXTS",
    "evaluate_headings",
    "evaluate_images",
    "evaluate_links",
]
