"""Personal note indexer and ranked search."""

__version__ = "0.2.0"
