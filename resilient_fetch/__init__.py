"""Resilient HTTP fetch layer with redirect chains and retry/backoff."""

__version__ = "0.1.0"
