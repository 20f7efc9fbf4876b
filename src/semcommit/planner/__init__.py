"""Commit planning, validation and execution."""
