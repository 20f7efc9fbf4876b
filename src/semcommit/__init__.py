"""Semcommit - split pending changes into conventional commits planned by an LLM."""

__version__ = "0.1.0"
