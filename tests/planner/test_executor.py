"""Tests for executing commit plans."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from semcommit.planner.executor import ExecutionError, NothingExecutedError, PlanExecutor
from semcommit.schemas import DRY_RUN_COMMIT_ID
from tests.base import GitTestBase, make_plan


@pytest.mark.unit
class TestDryRun:
	"""Dry runs touch nothing."""

	def test_dry_run_reports_every_commit(self) -> None:
		"""Each planned commit yields one placeholder result, in order."""
		repo = MagicMock()
		plan = make_plan(
			{"type": "feat", "scope": "auth", "message": "add logout", "files": ["a.py"]},
			{"type": "docs", "message": "update readme", "files": ["README.md"]},
		)
		progress = MagicMock()

		executed = PlanExecutor(repo, dry_run=True).execute(plan, progress=progress)

		assert [c.commit_id for c in executed] == [DRY_RUN_COMMIT_ID, DRY_RUN_COMMIT_ID]
		assert [c.message for c in executed] == ["feat(auth): add logout", "docs: update readme"]
		assert executed[0].scope == "auth"
		assert progress.call_count == 2
		progress.assert_any_call(2, 2, plan.commits[1])
		repo.stage.assert_not_called()
		repo.commit.assert_not_called()

	def test_empty_plan_is_rejected(self) -> None:
		"""There must be something to execute."""
		with pytest.raises(ValueError, match="plan must have commits"):
			PlanExecutor(MagicMock()).execute(make_plan())


@pytest.mark.git
class TestExecution(GitTestBase):
	"""Executing plans against a real repository."""

	def _seed(self) -> None:
		self.write_file("src/auth.go", "package auth\n")
		self.write_file("src/auth_test.go", "package auth\n")
		self.commit_all("chore: initial")
		self.write_file("src/auth.go", "package auth\n\nfunc Logout() {}\n")
		self.write_file("src/auth_test.go", "package auth\n\nfunc TestLogout() {}\n")
		self.write_file("docs/README.md", "# Docs\n")

	def test_multi_commit_partition(self) -> None:
		"""Each planned commit becomes one real commit, in plan order."""
		self._seed()
		branch = self.repo.current_branch()
		plan = make_plan(
			{"type": "feat", "scope": "auth", "message": "add logout", "files": ["src/auth.go", "src/auth_test.go"]},
			{"type": "docs", "message": "update readme", "files": ["docs/README.md"]},
		)

		executed = PlanExecutor(self.repo).execute(plan)

		assert [c.message for c in executed] == ["feat(auth): add logout", "docs: update readme"]
		assert self.subjects(2) == ["feat(auth): add logout", "docs: update readme"]
		assert self.repo.current_branch() == branch
		self.repo.invalidate()
		assert not self.repo.status().has_changes
		first = self.git("diff-tree", "--no-commit-id", "--name-only", "-r", "-z", "HEAD~1").split("\0")
		assert sorted(path for path in first if path) == ["café.md", "release notes.md"]

	def test_each_commit_starts_from_empty_index(self) -> None:
		"""Pre-staged files only go into the commit that lists them."""
		self._seed()
		self.git("add", "docs/README.md")
		plan = make_plan(
			{"type": "feat", "message": "add logout", "files": ["src/auth.go", "src/auth_test.go"]},
			{"type": "docs", "message": "update readme", "files": ["docs/README.md"]},
		)

		PlanExecutor(self.repo).execute(plan)

		assert self.git("show", "--name-only", "--format=", "HEAD~1").split() == ["src/auth.go", "src/auth_test.go"]
		assert self.git("show", "--name-only", "--format=", "HEAD").split() == ["docs/README.md"]

	def test_directory_only_commit_is_skipped(self) -> None:
		"""A commit whose files expand to nothing is skipped."""
		self._seed()
		(self.repo_path / "empty").mkdir()
		plan = make_plan(
			{"type": "chore", "message": "add empty dir", "files": ["empty"]},
			{"type": "feat", "message": "add logout", "files": ["src/auth.go", "src/auth_test.go", "docs/README.md"]},
		)

		executed = PlanExecutor(self.repo).execute(plan)

		assert [c.message for c in executed] == ["feat: add logout"]

	def test_quoted_paths_from_status(self) -> None:
		"""Files whose names git quotes are committed from the status listing."""
		self._seed()
		self.write_file("release notes.md", "# Notes\n")
		self.write_file("café.md", "# Café\n")
		notes = [path for path in self.repo.status().untracked if path.endswith(".md")]
		plan = make_plan(
			{"type": "docs", "message": "add notes", "files": notes},
			{"type": "feat", "message": "add logout", "files": ["src/auth.go", "src/auth_test.go"]},
		)

		executed = PlanExecutor(self.repo).execute(plan)

		assert [c.message for c in executed] == ["docs: add notes", "feat: add logout"]
		assert sorted(notes) == ["café.md", "release notes.md"]
		assert sorted(self.repo.last_commit_files()) == ["src/auth.go", "src/auth_test.go"]
		first = self.git("diff-tree", "--no-commit-id", "--name-only", "-r", "-z", "HEAD~1").split("\0")
		assert sorted(path for path in first if path) == ["café.md", "release notes.md"]

	def test_nothing_executed(self) -> None:
		"""Skipping every commit is an error."""
		self._seed()
		(self.repo_path / "empty").mkdir()
		plan = make_plan({"type": "chore", "message": "add empty dir", "files": ["empty"]})

		with pytest.raises(NothingExecutedError, match="no commits were executed"):
			PlanExecutor(self.repo).execute(plan)

	def test_failure_names_the_commit(self) -> None:
		"""A failing commit is reported 1-indexed; earlier commits stay."""
		self._seed()
		plan = make_plan(
			{"type": "docs", "message": "update readme", "files": ["docs/README.md"]},
			{"type": "feat", "message": "add ghost", "files": ["ghost.go"]},
		)
		executor = PlanExecutor(self.repo)

		with pytest.raises(ExecutionError) as exc_info:
			executor.execute(plan)

		error = exc_info.value
		assert str(error).startswith("failed to execute commit 2 (feat: add ghost): ")
		assert "ghost.go" in str(error)
		assert error.commit_index == 1
		assert [c.message for c in executor.executed] == ["docs: update readme"]
		assert self.subjects(1) == ["docs: update readme"]
