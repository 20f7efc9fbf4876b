"""Error types for LLM operations."""

from __future__ import annotations

MAX_ERROR_BODY_CHARS = 500


class LLMError(Exception):
	"""Base exception for LLM-related errors."""


def truncate_body(body: str, limit: int = MAX_ERROR_BODY_CHARS) -> str:
	"""Shorten a response body before it is put into an error message."""
	if len(body) <= limit:
		return body
	return body[:limit] + "..."


class ProviderError(LLMError):
	"""A provider request failed or returned something unusable."""

	def __init__(self, provider: str, message: str, cause: BaseException | str | None = None) -> None:
		"""
		Initialize the error.

		Args:
		    provider: Name of the provider that failed
		    message: Short description of the failure
		    cause: Underlying error or response body, truncated when rendered

		"""
		self.provider = provider
		self.message = message
		self.cause = cause
		text = f"{provider}: {message}"
		if cause is not None:
			text += f": {truncate_body(str(cause))}"
		super().__init__(text)
