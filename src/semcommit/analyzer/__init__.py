"""Explain diffs with a language model."""
