"""Walk-forward audit of technical-analysis trading signals."""

__version__ = "0.1.0"
