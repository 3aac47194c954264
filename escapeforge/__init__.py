"""escapeforge: generated multi-room escape stories and their flag-driven rooms."""

__version__ = "0.1.0"
