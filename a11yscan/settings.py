"""Plugin settings: schema-shaped defaults, sanitizing and storage."""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

from loguru import logger

from a11yscan import __version__
from a11yscan.errors import ValidationError

MODULE_KEYS = (
    "module_visual",
    "module_navigation",
    "module_content",
    "module_aria",
    "module_interaction",
)
BATCH_SIZE_BOUNDS = (10, 100)
ALLOWED_MAX_PAGES = (0, 10, 50, 100, 500, 1000)
TOOLBAR_POSITIONS = ("left", "right", "bottom")
TOOLBAR_THEMES = ("auto", "light", "dark")
TRUE_STRINGS = {"1", "true", "on", "yes"}

DEFAULT_SETTINGS: dict[str, Any] = {
    "version": __version__,
    "global": {
        "toolbar_enabled": True,
        "toolbar_position": "left",
        "toolbar_theme": "auto",
        "safe_mode": False,
        "respect_prefers": True,
    },
    "module_visual": {
        "enabled": True,
        "features": {
            "high_contrast": True,
            "grayscale": True,
            "invert_colors": True,
            "low_saturation": True,
            "text_resize": True,
            "text_spacing": True,
            "readable_font": True,
            "dyslexia_font": True,
            "cursor_size": True,
            "reading_guide": True,
            "reading_mask": True,
        },
        "settings": {
            "max_font_scale": 2.0,
            "default_font": "atkinson",
        },
    },
    "module_navigation": {
        "enabled": True,
        "features": {
            "skip_links": True,
            "focus_ring": True,
            "focus_not_obscured": True,
            "keyboard_nav": True,
            "link_highlighting": True,
        },
        "settings": {
            "focus_ring_color": "#0066cc",
            "focus_ring_width": 2,
            "skip_link_targets": ["content", "navigation", "footer"],
        },
    },
    "module_content": {
        "enabled": True,
        "features": {
            "animation_pause": True,
            "hide_images": True,
            "highlight_links": True,
            "highlight_headings": True,
        },
    },
    "module_aria": {
        "enabled": False,
        "features": {
            "landmark_roles": True,
            "form_labels": True,
            "link_purpose": True,
            "live_regions": True,
        },
        "settings": {
            "auto_inject": False,
        },
    },
    "module_interaction": {
        "enabled": True,
        "features": {
            "target_size": True,
            "drag_alternatives": False,
        },
    },
    "scanner": {
        "batch_size": 50,
        "auto_scan": False,
        "scan_on_publish": True,
        "max_pages": 0,
        "excluded_types": [],
    },
}


def get_defaults() -> dict[str, Any]:
    """Return a fresh copy of the default settings."""
    return copy.deepcopy(DEFAULT_SETTINGS)


def merge_recursive(defaults: dict[str, Any], values: dict[str, Any]) -> dict[str, Any]:
    """Merge values over defaults; nested dicts merge, everything else replaces."""
    merged = copy.deepcopy(defaults)
    for key, value in values.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_recursive(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _to_bool(value: Any) -> bool:
    """Coerce form-style values such as "on" or "1" to bool."""
    if isinstance(value, str):
        return value.strip().lower() in TRUE_STRINGS
    return bool(value)


def _to_int(value: Any, default: int) -> int:
    """Parse a non-negative int, falling back to the default."""
    try:
        return abs(int(value))
    except (TypeError, ValueError):
        return default


def _to_enum(value: Any, allowed: tuple[str, ...], default: str) -> str:
    """Return value when allowed, else the default."""
    return value if value in allowed else default


def _sanitize_scanner(scanner: dict[str, Any], defaults: dict[str, Any]) -> dict[str, Any]:
    """Sanitize scanner settings, clamping batch size and max pages."""
    low, high = BATCH_SIZE_BOUNDS
    batch_size = _to_int(scanner.get("batch_size", defaults["batch_size"]), defaults["batch_size"])
    max_pages = _to_int(scanner.get("max_pages", defaults["max_pages"]), defaults["max_pages"])
    if max_pages not in ALLOWED_MAX_PAGES:
        max_pages = 0

    excluded_types = scanner.get("excluded_types") or []
    if not isinstance(excluded_types, (list, tuple, set)):
        excluded_types = []

    return {
        "batch_size": max(low, min(high, batch_size)),
        "auto_scan": _to_bool(scanner.get("auto_scan", defaults["auto_scan"])),
        "scan_on_publish": _to_bool(scanner.get("scan_on_publish", defaults["scan_on_publish"])),
        "max_pages": max_pages,
        "excluded_types": sorted({str(item).strip().lower() for item in excluded_types if item}),
    }


def _sanitize_module(module_key: str, module: dict[str, Any], defaults: dict[str, Any]) -> dict[str, Any]:
    """Sanitize one toolbar module, dropping unknown features."""
    module_defaults = defaults[module_key]
    sanitized: dict[str, Any] = {
        "enabled": _to_bool(module.get("enabled", module_defaults["enabled"])),
        "features": {},
    }

    features = module.get("features")
    if isinstance(features, dict):
        allowed_features = module_defaults.get("features", {})
        for feature, enabled in features.items():
            if feature in allowed_features:
                sanitized["features"][feature] = _to_bool(enabled)
            else:
                logger.debug(f"Dropping unknown feature {module_key}.{feature}")

    if isinstance(module.get("settings"), dict) and "settings" in module_defaults:
        sanitized["settings"] = merge_recursive(module_defaults["settings"], module["settings"])

    return sanitized


def sanitize(values: dict[str, Any]) -> dict[str, Any]:
    """Return complete settings built from untrusted input."""
    defaults = get_defaults()
    sanitized: dict[str, Any] = {}

    if isinstance(values.get("global"), dict):
        global_values = values["global"]
        global_defaults = defaults["global"]
        sanitized["global"] = {
            "toolbar_enabled": _to_bool(global_values.get("toolbar_enabled", global_defaults["toolbar_enabled"])),
            "toolbar_position": _to_enum(
                global_values.get("toolbar_position"),
                TOOLBAR_POSITIONS,
                global_defaults["toolbar_position"],
            ),
            "toolbar_theme": _to_enum(
                global_values.get("toolbar_theme"),
                TOOLBAR_THEMES,
                global_defaults["toolbar_theme"],
            ),
            "safe_mode": _to_bool(global_values.get("safe_mode", global_defaults["safe_mode"])),
            "respect_prefers": _to_bool(global_values.get("respect_prefers", global_defaults["respect_prefers"])),
        }

    for module_key in MODULE_KEYS:
        if isinstance(values.get(module_key), dict):
            sanitized[module_key] = _sanitize_module(module_key, values[module_key], defaults)

    if isinstance(values.get("scanner"), dict):
        sanitized["scanner"] = _sanitize_scanner(values["scanner"], defaults["scanner"])

    return merge_recursive(defaults, sanitized)


def get_setting(settings: dict[str, Any], path: str, default: Any = None) -> Any:
    """Read a value by dotted path, e.g. ``scanner.batch_size``."""
    value: Any = settings
    for key in path.split("."):
        if not isinstance(value, dict) or key not in value:
            return default
        value = value[key]
    return value


class SettingsStore:
    """Key-value settings holder, optionally persisted to a JSON file."""

    def __init__(self, path: str | Path | None = None, values: dict[str, Any] | None = None) -> None:
        self._path = Path(path) if path is not None else None
        self._stored: dict[str, Any] = {}
        if self._path is not None and self._path.exists():
            with self._path.open("r", encoding="utf-8") as file_handle:
                loaded = json.load(file_handle)
            if not isinstance(loaded, dict):
                raise ValidationError(
                    f"Settings file must hold a JSON object: {self._path}",
                    code="invalid_settings",
                )
            self._stored = sanitize(loaded)
            logger.debug(f"Loaded settings from {self._path}")
        if values:
            self._stored = sanitize(merge_recursive(self._stored, values))

    def get_settings(self) -> dict[str, Any]:
        """Return stored settings layered over the defaults."""
        return merge_recursive(get_defaults(), self._stored)

    def save_settings(self, values: dict[str, Any]) -> dict[str, Any]:
        """Sanitize and store settings, returning the stored result."""
        self._stored = sanitize(values)
        self._write()
        return copy.deepcopy(self._stored)

    def reset_settings(self) -> dict[str, Any]:
        """Restore and persist the default settings."""
        self._stored = get_defaults()
        self._write()
        return get_defaults()

    def get(self, path: str, default: Any = None) -> Any:
        """Read one setting by dotted path."""
        return get_setting(self.get_settings(), path, default)

    def _write(self) -> None:
        """Persist stored settings when a path is configured."""
        if self._path is None:
            return
        self._path.write_text(f"{json.dumps(self._stored, indent=2)}\n", encoding="utf-8")
