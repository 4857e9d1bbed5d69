"""News curator: fetch, filter, summarize and deliver tech news without repeats."""

__version__ = "0.1.0"
