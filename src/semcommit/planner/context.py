"""Collect working tree state into a planning request."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from semcommit.git.parsers import truncate_diff
from semcommit.git.utils import GitCancelledError, GitError
from semcommit.schemas import AnalysisRequest, ChangeStatus, CommitRules, FileChange

if TYPE_CHECKING:
	from semcommit.config.repo_config import RepoConfig
	from semcommit.git.repository import GitRepository

logger = logging.getLogger(__name__)

MAX_DIFF_CHARS = 4000
RECENT_COMMIT_COUNT = 10
MAX_MESSAGE_LENGTH = 50
BEHAVIORAL_TEST = "feat = behavior change, refactor = same behavior different structure"


class NoChangesError(Exception):
	"""The working tree has nothing to plan."""

	def __init__(self) -> None:
		"""Initialize the error."""
		super().__init__("nothing to commit - working tree is clean")


class ContextBuilder:
	"""Builds an AnalysisRequest from a repository and its configuration."""

	def __init__(
		self,
		repo: GitRepository,
		repo_config: RepoConfig,
		max_diff_chars: int = MAX_DIFF_CHARS,
		recent_commit_count: int = RECENT_COMMIT_COUNT,
		max_message_length: int = MAX_MESSAGE_LENGTH,
		behavioral_test: str = BEHAVIORAL_TEST,
	) -> None:
		"""
		Initialize the builder.

		Args:
		    repo: Repository to read state from
		    repo_config: Scopes and commit type policy
		    max_diff_chars: Diff budget for the prompt
		    recent_commit_count: How many recent subjects to include as style hints
		    max_message_length: Longest message the model may propose
		    behavioral_test: Guidance for telling feat from refactor

		"""
		self.repo = repo
		self.repo_config = repo_config
		self.max_diff_chars = max_diff_chars
		self.recent_commit_count = recent_commit_count
		self.max_message_length = max_message_length
		self.behavioral_test = behavioral_test

	def rules(self) -> CommitRules:
		"""Rules derived from the repository's type policy."""
		return CommitRules(
			types=self.repo_config.allowed_types(),
			max_message_length=self.max_message_length,
			behavioral_test=self.behavioral_test,
		)

	def build(self, staged_only: bool = False, single_commit: bool = False) -> AnalysisRequest:
		"""
		Collect status, diff stats, a bounded diff and recent subjects.

		Args:
		    staged_only: Plan only over what is already staged
		    single_commit: Ask for exactly one commit

		Returns:
		    The request to send to the provider

		Raises:
		    NoChangesError: If there is nothing to plan

		"""
		status = self.repo.status()
		files = list(status.staged) if staged_only else status.all_files()
		if not files:
			raise NoChangesError

		numstat = self.repo.diff_numstat(staged_only)
		changes = []
		for path in files:
			change_status = status.status_of(path)
			if change_status is ChangeStatus.UNTRACKED:
				change_status = ChangeStatus.ADDED
			stat = numstat.get(path)
			changes.append(
				FileChange(
					path=path,
					status=change_status,
					scope=self.repo_config.resolve_scope(path),
					diff_summary=stat.diff_summary if stat else "",
				)
			)

		diff = truncate_diff(self.repo.diff(staged_only), self.max_diff_chars)

		try:
			recent = self.repo.recent_commit_subjects(self.recent_commit_count) if self.recent_commit_count else []
		except GitCancelledError:
			raise
		except GitError as e:
			logger.debug("Proceeding without recent commits: %s", e)
			recent = []

		return AnalysisRequest(
			files=changes,
			diff=diff,
			recent_commits=recent,
			rules=self.rules(),
			has_scopes=self.repo_config.has_scopes,
			single_commit=single_commit,
		)


def summary(request: AnalysisRequest) -> str:
	"""One-line description of a request's size."""
	scopes = {change.scope for change in request.files if change.scope}
	return f"{len(request.files)} files, {len(request.diff)} chars diff, {len(scopes)} scopes detected"
