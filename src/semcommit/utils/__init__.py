"""Utility helpers for semcommit."""
