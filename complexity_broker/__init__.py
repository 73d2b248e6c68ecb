"""Complexity Broker - big-O estimates for code snippets via an LLM fallback chain."""

__version__ = "1.0.0"
