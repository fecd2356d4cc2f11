"""Multi-source content aggregation into RSS feeds."""

__version__ = "0.1.0"
