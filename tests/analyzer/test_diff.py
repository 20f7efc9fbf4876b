"""Tests for single-file diff explanations."""

from __future__ import annotations

import pytest

from semcommit.analyzer.diff import (
	DIFF_SYSTEM_PROMPT,
	NO_CHANGES_MESSAGE,
	DiffAnalyzer,
	DiffResult,
	build_diff_prompt,
	build_diff_request,
	get_diff,
)
from tests.base import FakeProvider, GitTestBase


@pytest.mark.unit
class TestDiffRequest:
	"""Default refs and range descriptions."""

	def test_no_refs_means_uncommitted(self) -> None:
		"""Without refs the working copy is compared with HEAD."""
		request = build_diff_request("src/app.py")

		assert request.from_ref == ""
		assert request.to_ref == "HEAD"
		assert request.is_uncommitted
		assert request.ref_range == "uncommitted changes"

	def test_only_to_ref_starts_at_head(self) -> None:
		"""A lone ``to`` ref is compared against HEAD."""
		request = build_diff_request("src/app.py", to_ref="feature")

		assert request.from_ref == "HEAD"
		assert request.ref_range == "from HEAD to feature"

	def test_only_from_ref_ends_at_working_copy(self) -> None:
		"""A lone ``from`` ref is compared with the working copy."""
		request = build_diff_request("src/app.py", from_ref="v1.0")

		assert request.to_ref == ""
		assert not request.is_uncommitted
		assert request.ref_range == "from v1.0 to working copy"

	def test_both_refs(self) -> None:
		"""Both refs are kept as given."""
		request = build_diff_request("src/app.py", "v1.0", "v2.0")

		assert request.ref_range == "from v1.0 to v2.0"

	def test_prompt_contents(self) -> None:
		"""The user prompt names the file, range and stats and carries the diff."""
		result = DiffResult(request=build_diff_request("src/app.py"), diff="+print('hi')\n", numstat="+1 -0")

		system, user = build_diff_prompt(result)

		assert system == DIFF_SYSTEM_PROMPT
		assert "src/app.py (uncommitted changes)" in user
		assert "Stats: +1 -0" in user
		assert "+print('hi')" in user


@pytest.mark.unit
class TestExplain:
	"""Asking the provider for an explanation."""

	def test_empty_diff_skips_provider(self) -> None:
		"""An empty diff gets the fixed notice without a model call."""
		provider = FakeProvider(text="unused")
		analyzer = DiffAnalyzer(repo=None, provider=provider)

		answer = analyzer.explain(DiffResult(request=build_diff_request("a.txt"), diff=""))

		assert answer == NO_CHANGES_MESSAGE
		assert provider.prompts == []

	def test_provider_answer_is_returned(self) -> None:
		"""The provider's text is returned unchanged."""
		provider = FakeProvider(text="## Summary\nAdds a greeting.")
		analyzer = DiffAnalyzer(repo=None, provider=provider)

		answer = analyzer.explain(DiffResult(request=build_diff_request("a.txt"), diff="+hello\n"))

		assert answer == "## Summary\nAdds a greeting."
		assert len(provider.prompts) == 1


@pytest.mark.git
class TestGetDiff(GitTestBase):
	"""Reading diffs from a real repository."""

	def test_uncommitted_changes(self) -> None:
		"""Working copy edits are diffed against HEAD with line counts."""
		self.write_file("a.txt", "one\n")
		self.commit_all("add a")
		self.write_file("a.txt", "one\ntwo\n")

		result = get_diff(self.repo, build_diff_request("a.txt"))

		assert "+two" in result.diff
		assert result.numstat == "+1 -0"

	def test_commit_range(self) -> None:
		"""Two refs diff the file between those commits."""
		self.write_file("a.txt", "one\ntwo\n")
		first = self.commit_all("add a")
		self.write_file("a.txt", "one\n")
		second = self.commit_all("trim a")

		result = get_diff(self.repo, build_diff_request("a.txt", first, second))

		assert "-two" in result.diff
		assert result.numstat == "+0 -1"

	def test_unchanged_file(self) -> None:
		"""A file without changes gives the no-changes notice."""
		self.write_file("a.txt", "one\n")
		self.commit_all("add a")
		provider = FakeProvider(text="unused")

		answer = DiffAnalyzer(self.repo, provider).analyze("a.txt")

		assert answer == NO_CHANGES_MESSAGE
		assert provider.prompts == []

	def test_analyze_sends_diff(self) -> None:
		"""Changed files are sent to the provider."""
		self.write_file("a.txt", "one\n")
		self.commit_all("add a")
		self.write_file("a.txt", "uno\n")
		provider = FakeProvider(text="Translated a word.")

		answer = DiffAnalyzer(self.repo, provider).analyze("a.txt")

		assert answer == "Translated a word."
		_, user = provider.prompts[0]
		assert "+uno" in user
		assert "Stats: +1 -1" in user
