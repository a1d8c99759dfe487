"""Pattern-based WCAG content scanner."""

__version__ = "1.0.0"
