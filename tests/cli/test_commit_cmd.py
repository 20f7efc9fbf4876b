"""Tests for the commit command CLI."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from semcommit.cli import app
from tests.base import FakeProvider, GitTestBase, make_plan

if TYPE_CHECKING:
	from collections.abc import Iterator


@pytest.mark.cli
@pytest.mark.git
class TestCommitCommand(GitTestBase):
	"""Test cases for the 'commit' CLI command."""

	runner: CliRunner

	@pytest.fixture(autouse=True)
	def setup_cli(self, setup_git_repo: None, monkeypatch: pytest.MonkeyPatch) -> None:
		"""Run commands from inside a repository with one commit and pending changes."""
		monkeypatch.chdir(self.repo_path)
		self.runner = CliRunner()
		self.write_file("a.txt", "one\n")
		self.initial = self.commit_all("initial")

	@pytest.fixture
	def provider(self) -> Iterator[FakeProvider]:
		"""Fake provider returned for every configuration."""
		fake = FakeProvider(
			make_plan(
				{"type": "feat", "message": "add b", "files": ["b.txt"], "reasoning": "new file"},
				{"type": "fix", "message": "update a", "files": ["a.txt"]},
			)
		)
		with patch("semcommit.llm.litellm_provider.create_provider", return_value=fake):
			yield fake

	def make_changes(self) -> None:
		self.write_file("a.txt", "one\ntwo\n")
		self.write_file("b.txt", "new\n")

	def test_creates_planned_commits(self, provider: FakeProvider) -> None:
		"""With --yes every planned commit is created in order."""
		self.make_changes()

		result = self.runner.invoke(app, ["commit", "--yes"])

		assert result.exit_code == 0, result.output
		assert "2 commits planned" in result.output
		assert "[1/2] feat: add b" in result.output
		assert "Created 2 commits" in result.output
		assert self.subjects(3) == ["initial", "feat: add b", "fix: update a"]
		assert not provider.requests[0].single_commit

	def test_dry_run_creates_nothing(self, provider: FakeProvider) -> None:
		"""Dry-run shows the plan and leaves history alone."""
		self.make_changes()

		result = self.runner.invoke(app, ["commit", "--dry-run"])

		assert result.exit_code == 0, result.output
		assert "Would create 2 commits (dry-run)" in result.output
		assert self.git("rev-parse", "HEAD").strip() == self.initial

	def test_single_flag(self, provider: FakeProvider) -> None:
		"""--single asks the model for one commit."""
		self.make_changes()

		result = self.runner.invoke(app, ["commit", "--single", "--dry-run"])

		assert result.exit_code == 0, result.output
		assert provider.requests[0].single_commit

	def test_declined_confirmation(self, provider: FakeProvider) -> None:
		"""Answering no to the confirmation aborts."""
		self.make_changes()

		with patch("questionary.confirm") as mock_confirm:
			mock_confirm.return_value.ask.return_value = False
			result = self.runner.invoke(app, ["commit"])

		assert result.exit_code == 0, result.output
		assert "Aborted." in result.output
		assert self.git("rev-parse", "HEAD").strip() == self.initial

	def test_nothing_to_commit(self, provider: FakeProvider) -> None:
		"""A clean tree exits successfully without asking the model."""
		result = self.runner.invoke(app, ["commit", "--yes"])

		assert result.exit_code == 0
		assert "Nothing to commit" in result.output
		assert provider.requests == []

	def test_staged_with_nothing_staged(self, provider: FakeProvider) -> None:
		"""--staged needs something in the index."""
		self.make_changes()

		result = self.runner.invoke(app, ["commit", "--staged", "--yes"])

		assert result.exit_code == 1
		assert "Nothing staged to commit" in result.output
		assert provider.requests == []

	def test_invalid_plan(self) -> None:
		"""A plan naming unknown files is rejected with its issues."""
		self.make_changes()
		fake = FakeProvider(make_plan({"type": "feat", "message": "ghost", "files": ["ghost.txt"]}))

		with patch("semcommit.llm.litellm_provider.create_provider", return_value=fake):
			result = self.runner.invoke(app, ["commit", "--yes"])

		assert result.exit_code == 1
		assert "The proposed plan is invalid" in result.output
		assert "ghost.txt" in result.output
		assert self.git("rev-parse", "HEAD").strip() == self.initial

	def test_sensitive_files_only(self) -> None:
		"""A plan made only of sensitive files has nothing left to commit."""
		self.write_file(".env", "TOKEN=secret\n")
		fake = FakeProvider(make_plan({"type": "chore", "message": "add env", "files": [".env"]}))

		with patch("semcommit.llm.litellm_provider.create_provider", return_value=fake):
			result = self.runner.invoke(app, ["commit", "--yes"])

		assert result.exit_code == 1
		assert "Sensitive files were left out" in result.output
		assert "All changes were filtered out." in result.output
		assert self.git("rev-parse", "HEAD").strip() == self.initial

	def test_provider_error(self) -> None:
		"""Model failures end the command with an error summary."""
		from semcommit.llm.errors import ProviderError

		self.make_changes()
		fake = FakeProvider(error=ProviderError("fake", "quota exceeded"))

		with patch("semcommit.llm.litellm_provider.create_provider", return_value=fake):
			result = self.runner.invoke(app, ["commit", "--yes"])

		assert result.exit_code == 1
		assert "Commit failed" in result.output
		assert "quota exceeded" in result.output
