"""musicstats - music listening statistics service."""

__version__ = "0.1.0"
