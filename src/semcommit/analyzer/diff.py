"""Explain the changes to a single file with a language model."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from semcommit.git.parsers import parse_numstat
from semcommit.git.utils import GitCancelledError, GitError

if TYPE_CHECKING:
	from semcommit.git.repository import GitRepository
	from semcommit.llm.provider import Provider

logger = logging.getLogger(__name__)

NO_CHANGES_MESSAGE = "No changes detected in the specified file and range."

DIFF_SYSTEM_PROMPT = """You are a code change analyst. Your job is to analyze git diffs and explain what changed in clear, human-readable language.

Guidelines:
- Focus on the semantic meaning of changes, not just syntax
- Group related changes together
- Identify the type of change (bug fix, new feature, refactoring, etc.)
- Note any potential issues or improvements
- Use clear, concise language
- Format your response with markdown for readability"""

DIFF_USER_TEMPLATE = """Analyze the following changes to {file_path} ({ref_range}):

Stats: {numstat}

Diff:
{diff}

Provide a clear explanation of what changed and why these changes matter."""


@dataclass
class DiffRequest:
	"""Which file and ref range to analyze."""

	file_path: str
	from_ref: str = ""
	to_ref: str = ""

	@property
	def is_uncommitted(self) -> bool:
		"""True when comparing the working copy against HEAD."""
		return not self.from_ref and self.to_ref == "HEAD"

	@property
	def ref_range(self) -> str:
		"""Human-readable description of the range."""
		if self.is_uncommitted:
			return "uncommitted changes"
		if not self.to_ref:
			return f"from {self.from_ref} to working copy"
		return f"from {self.from_ref} to {self.to_ref}"


@dataclass
class DiffResult:
	"""Diff text and line counts for a request."""

	request: DiffRequest
	diff: str
	numstat: str = ""


def build_diff_request(file_path: str, from_ref: str = "", to_ref: str = "") -> DiffRequest:
	"""
	Fill in default refs.

	No refs compares the working copy with HEAD, only ``to_ref`` starts from
	HEAD, and only ``from_ref`` compares that ref with the working copy.
	"""
	if not from_ref and not to_ref:
		to_ref = "HEAD"
	elif not from_ref:
		from_ref = "HEAD"
	return DiffRequest(file_path=file_path, from_ref=from_ref, to_ref=to_ref)


def get_diff(repo: GitRepository, request: DiffRequest) -> DiffResult:
	"""
	Fetch the diff and ``+added -removed`` stats for ``request``.

	Raises:
	    GitCommandError: If git cannot produce the diff
	"""
	from_ref = "" if request.is_uncommitted else request.from_ref
	to_ref = "" if request.is_uncommitted else request.to_ref
	diff = repo.diff_range(request.file_path, from_ref, to_ref)

	numstat = ""
	try:
		stats = parse_numstat(repo.diff_range(request.file_path, from_ref, to_ref, numstat=True))
	except GitCancelledError:
		raise
	except GitError as e:
		logger.debug("Could not read numstat for %s: %s", request.file_path, e)
	else:
		if stats:
			numstat = next(iter(stats.values())).diff_summary
	return DiffResult(request=request, diff=diff, numstat=numstat)


def build_diff_prompt(result: DiffResult) -> tuple[str, str]:
	"""Build the ``(system, user)`` prompts for a diff explanation."""
	user = DIFF_USER_TEMPLATE.format(
		file_path=result.request.file_path,
		ref_range=result.request.ref_range,
		numstat=result.numstat,
		diff=result.diff,
	)
	return DIFF_SYSTEM_PROMPT, user


class DiffAnalyzer:
	"""Fetches a file's diff and asks the provider to explain it."""

	def __init__(self, repo: GitRepository, provider: Provider) -> None:
		"""Initialize the analyzer."""
		self.repo = repo
		self.provider = provider

	def analyze(self, file_path: str, from_ref: str = "", to_ref: str = "") -> str:
		"""
		Explain the changes to ``file_path`` in the given range.

		Returns:
		    Markdown explanation, or a fixed notice when the diff is empty

		"""
		return self.explain(get_diff(self.repo, build_diff_request(file_path, from_ref, to_ref)))

	def explain(self, result: DiffResult) -> str:
		"""Explain an already fetched diff."""
		if not result.diff:
			return NO_CHANGES_MESSAGE
		system, user = build_diff_prompt(result)
		return self.provider.analyze_diff(system, user)
