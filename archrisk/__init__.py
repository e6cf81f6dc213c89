"""Rule-based security risk analysis of declarative architecture models."""

__version__ = "0.4.0"
