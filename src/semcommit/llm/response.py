"""Turning raw model replies into commit plans."""

from __future__ import annotations

from pydantic import ValidationError

from semcommit.llm.errors import ProviderError
from semcommit.schemas import CommitPlan

TRUNCATED_FINISH_REASON = "length"


def clean_content(content: str) -> str:
	"""Strip one leading ```` ```json ```` or ```` ``` ```` fence and one trailing fence."""
	content = content.strip()
	content = content.removeprefix("```json")
	content = content.removeprefix("```")
	content = content.removesuffix("```")
	return content.strip()


def process_text_response(provider: str, content: str | None, truncated: bool) -> str:
	"""
	Check a free-form reply.

	Raises:
	    ProviderError: If the reply is empty or was cut off

	"""
	if not content:
		raise ProviderError(provider, "empty response from API")
	if truncated:
		raise ProviderError(provider, "response truncated: exceeded max tokens limit")
	return content


def process_plan_response(provider: str, content: str | None, truncated: bool) -> CommitPlan:
	"""
	Parse a planning reply into a CommitPlan.

	Args:
	    provider: Provider name for error messages
	    content: Raw reply text
	    truncated: Whether the model stopped at its token limit

	Returns:
	    The parsed plan, not yet validated

	Raises:
	    ProviderError: If the reply is empty, cut off or not a valid plan

	"""
	content = process_text_response(provider, content, truncated)
	try:
		return CommitPlan.model_validate_json(clean_content(content))
	except ValidationError as e:
		raise ProviderError(provider, "failed to parse commit plan", e) from e
