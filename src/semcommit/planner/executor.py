"""Materialize a validated plan as real commits."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from semcommit.git.utils import NoStageablePathsError
from semcommit.schemas import DRY_RUN_COMMIT_ID, ExecutedCommit

if TYPE_CHECKING:
	from collections.abc import Callable

	from semcommit.git.repository import GitRepository
	from semcommit.schemas import CommitPlan, PlannedCommit

	ProgressCallback = Callable[[int, int, PlannedCommit], None]

logger = logging.getLogger(__name__)


class ExecutionError(Exception):
	"""A planned commit could not be created."""

	def __init__(self, commit_index: int, planned: PlannedCommit, cause: BaseException) -> None:
		"""
		Initialize the error.

		Args:
		    commit_index: Zero-based position of the failing commit in the plan
		    planned: The failing commit
		    cause: Underlying error

		"""
		self.commit_index = commit_index
		self.planned = planned
		self.cause = cause
		super().__init__(f"failed to execute commit {commit_index + 1} ({planned.full_message}): {cause}")


class NothingExecutedError(Exception):
	"""Every planned commit was skipped."""

	def __init__(self) -> None:
		"""Initialize the error."""
		super().__init__("no commits were executed (all planned commits contained only directories)")


class PlanExecutor:
	"""
	Creates one commit per planned commit, in order.

	Each commit starts from an empty index and stages only its own files.
	Commits already created stay in place when a later one fails.
	"""

	def __init__(self, repo: GitRepository, dry_run: bool = False) -> None:
		"""Initialize the executor for ``repo``."""
		self.repo = repo
		self.dry_run = dry_run
		self.executed: list[ExecutedCommit] = []

	def execute(self, plan: CommitPlan, progress: ProgressCallback | None = None) -> list[ExecutedCommit]:
		"""
		Execute ``plan``.

		Args:
		    plan: Validated plan with at least one commit
		    progress: Called with ``(position, total, commit)`` before each commit

		Returns:
		    The commits created, in plan order

		Raises:
		    ValueError: If the plan is empty
		    ExecutionError: If a commit fails; ``executed`` holds the earlier ones
		    NothingExecutedError: If every commit was skipped

		"""
		if not plan.commits:
			msg = "plan must have commits"
			raise ValueError(msg)

		self.executed = []
		total = len(plan.commits)
		for index, planned in enumerate(plan.commits):
			if progress is not None:
				progress(index + 1, total, planned)

			if self.dry_run:
				self.executed.append(self._to_executed(DRY_RUN_COMMIT_ID, planned))
				continue

			try:
				commit_id = self._commit(planned)
			except NoStageablePathsError:
				logger.debug("Skipping commit %d: nothing to stage", index + 1)
				continue
			except Exception as e:
				raise ExecutionError(index, planned, e) from e
			self.executed.append(self._to_executed(commit_id, planned))

		if not self.dry_run and not self.executed:
			raise NothingExecutedError
		return self.executed

	def _commit(self, planned: PlannedCommit) -> str:
		self.repo.unstage_all()
		self.repo.stage(planned.files)
		return self.repo.commit(planned.full_message)

	@staticmethod
	def _to_executed(commit_id: str, planned: PlannedCommit) -> ExecutedCommit:
		return ExecutedCommit(
			commit_id=commit_id,
			message=planned.full_message,
			files=list(planned.files),
			type=planned.type,
			scope=planned.scope,
		)
