"""specrelay: normalizes test runner lifecycle callbacks into reporter events."""

__version__ = "0.1.0"
