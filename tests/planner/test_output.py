"""Tests for plan previews."""

from __future__ import annotations

import pytest

from semcommit.planner.output import preview_plan, summarize_execution
from semcommit.schemas import ExecutedCommit
from tests.base import make_plan


@pytest.mark.unit
class TestPreview:
	"""Rendering plans and results."""

	def test_preview(self) -> None:
		"""Each commit shows its subject, files and reasoning."""
		plan = make_plan(
			{
				"type": "feat",
				"scope": "auth",
				"message": "add logout",
				"files": ["src/auth.go", "src/auth_test.go"],
				"reasoning": "logout endpoint with its test",
			},
			{"type": "docs", "message": "update readme", "files": ["docs/README.md"]},
		)

		assert preview_plan(plan).splitlines() == [
			"2 commits planned",
			"",
			"[1/2] feat(auth): add logout",
			"  └─ src/auth.go",
			"  └─ src/auth_test.go",
			"  logout endpoint with its test",
			"",
			"[2/2] docs: update readme",
			"  └─ docs/README.md",
		]

	def test_empty_preview(self) -> None:
		"""An empty plan says so."""
		assert preview_plan(make_plan()) == "No commits planned"

	def test_summaries(self) -> None:
		"""Outcome lines distinguish dry runs."""
		executed = [ExecutedCommit(commit_id="abc1234", message="feat: a", files=["a"])]

		assert summarize_execution(executed) == "Created 1 commit"
		assert summarize_execution(executed * 2, dry_run=True) == "Would create 2 commits (dry-run)"
