"""Orchestrates planning: collect state, ask the model, repair and validate."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from semcommit.planner.context import ContextBuilder, summary
from semcommit.planner.validator import PlanValidator, ValidationResult

if TYPE_CHECKING:
	from semcommit.config.config_schema import CommitSchema
	from semcommit.config.repo_config import RepoConfig
	from semcommit.git.repository import GitRepository
	from semcommit.llm.provider import Provider
	from semcommit.schemas import AnalysisRequest, CommitPlan

logger = logging.getLogger(__name__)


@dataclass
class PlanOptions:
	"""Per-run planning switches."""

	staged_only: bool = False
	single_commit: bool = False


@dataclass
class PlanOutcome:
	"""Result of a planning run."""

	plan: CommitPlan | None
	result: ValidationResult
	request: AnalysisRequest
	original: CommitPlan | None = None

	@property
	def repaired(self) -> bool:
		"""Whether repair changed any commit's message or files, or the number of commits."""
		if self.plan is None or self.original is None:
			return False
		return _commit_shapes(self.plan) != _commit_shapes(self.original)

	@property
	def merged(self) -> bool:
		"""Whether commits sharing files were merged."""
		if self.plan is None or self.original is None:
			return False
		return len(self.plan.commits) != len(self.original.commits)


def _commit_shapes(plan: CommitPlan) -> list[tuple[str, list[str]]]:
	return [(commit.message, commit.files) for commit in plan.commits]


class Planner:
	"""Turns pending changes into a validated commit plan."""

	def __init__(
		self,
		repo: GitRepository,
		provider: Provider,
		repo_config: RepoConfig,
		settings: CommitSchema | None = None,
	) -> None:
		"""
		Initialize the planner.

		Args:
		    repo: Repository to plan over
		    provider: Model that proposes the plan
		    repo_config: Scopes and commit type policy
		    settings: Commit settings; defaults apply when omitted

		"""
		self.repo = repo
		self.provider = provider
		self.repo_config = repo_config
		if settings is None:
			from semcommit.config.config_schema import CommitSchema

			settings = CommitSchema()
		self.settings = settings
		self.context_builder = ContextBuilder(
			repo,
			repo_config,
			max_diff_chars=settings.max_diff_chars,
			recent_commit_count=settings.recent_commit_count,
			max_message_length=settings.max_message_length,
			behavioral_test=settings.behavioral_test,
		)

	def plan(self, options: PlanOptions | None = None) -> PlanOutcome:
		"""
		Plan commits for the pending changes.

		Args:
		    options: Staged-only and single-commit switches

		Returns:
		    The repaired plan with its verdict

		Raises:
		    NoChangesError: If there is nothing to commit
		    ProviderError: If the model call fails
		    GitError: If reading repository state fails

		"""
		options = options or PlanOptions()
		request = self.context_builder.build(options.staged_only, options.single_commit)
		logger.debug("Planning request: %s", summary(request))

		candidate = self.provider.analyze(request)
		logger.debug("Provider proposed %d commits", len(candidate.commits))

		status = self.repo.status()
		validator = PlanValidator(
			self.repo.root,
			self.repo_config,
			known_files=[*status.all_files(), *status.staged],
			max_message_length=self.settings.max_message_length,
		)
		plan, result = validator.validate_and_fix(candidate)
		if not result.valid:
			logger.debug("Plan failed validation with %d issues", len(result.issues))
		return PlanOutcome(plan=plan, result=result, request=request, original=candidate)
