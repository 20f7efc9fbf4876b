"""Tests for parsing git output."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from semcommit.git.parsers import (
	TRUNCATION_MARKER,
	classify_status,
	parse_commit_log,
	parse_diff_stat,
	parse_numstat,
	parse_path_list,
	parse_porcelain_status,
	parse_subjects,
	staged_renames_from,
	truncate_diff,
	unquote_path,
)

PORCELAIN = "\n".join(
	[
		" M src/app.py",
		"M  src/staged.py",
		"A  src/new.py",
		" D src/gone.py",
		"R  old.txt -> new.txt",
		"?? notes.txt",
		"MM both.py",
	]
)


@pytest.mark.unit
class TestPorcelainStatus:
	"""Parsing and classifying ``git status --porcelain``."""

	def test_parses_codes_and_paths(self) -> None:
		"""Index and worktree codes come from the first two columns."""
		entries = parse_porcelain_status(PORCELAIN)

		assert len(entries) == 7
		assert (entries[0].index_status, entries[0].worktree_status, entries[0].path) == (" ", "M", "src/app.py")
		assert entries[4].original_path == "old.txt"
		assert entries[4].path == "new.txt"

	def test_skips_short_lines(self) -> None:
		"""Lines too short to carry a path are ignored."""
		assert parse_porcelain_status("\n??\n") == []

	def test_classifies_categories(self) -> None:
		"""Each path lands in exactly one category; staged tracks the index column."""
		status = classify_status(parse_porcelain_status(PORCELAIN))

		assert status.modified == ["src/app.py", "src/staged.py", "both.py"]
		assert status.added == ["src/new.py"]
		assert status.deleted == ["src/gone.py"]
		assert status.renamed == ["new.txt"]
		assert status.untracked == ["notes.txt"]
		assert status.staged == ["src/staged.py", "src/new.py", "new.txt", "both.py"]

	def test_ignored_paths_are_dropped(self) -> None:
		"""Ignored paths appear in no category."""
		status = classify_status(parse_porcelain_status(PORCELAIN), ignored={"notes.txt", "src/app.py"})

		assert "notes.txt" not in status.all_files()
		assert "src/app.py" not in status.all_files()

	def test_staged_renames(self) -> None:
		"""Only index renames are reported, keyed by the old path."""
		assert staged_renames_from(parse_porcelain_status(PORCELAIN)) == {"old.txt": "new.txt"}

	def test_nul_terminated_records(self) -> None:
		"""With ``-z`` paths are verbatim and a rename source is the next record."""
		output = "?? my file.txt\0 M café.txt\0R  new name.txt\0old name.txt\0A  added.py\0"

		entries = parse_porcelain_status(output)

		assert [entry.path for entry in entries] == ["my file.txt", "café.txt", "new name.txt", "added.py"]
		assert entries[2].original_path == "old name.txt"
		assert entries[3].original_path is None
		assert staged_renames_from(entries) == {"old name.txt": "new name.txt"}

	def test_quoted_lines_are_unquoted(self) -> None:
		"""Line output wraps unusual names in C-style quotes."""
		output = '?? "my file.txt"\n M "caf\\303\\251.txt"\nR  "old name.txt" -> "new\\tname.txt"\n'

		entries = parse_porcelain_status(output)

		assert [entry.path for entry in entries] == ["my file.txt", "café.txt", "new\tname.txt"]
		assert entries[2].original_path == "old name.txt"


@pytest.mark.unit
class TestPathQuoting:
	"""Undoing git's path quoting."""

	@pytest.mark.parametrize(
		("quoted", "expected"),
		[
			("plain.txt", "plain.txt"),
			('"my file.txt"', "my file.txt"),
			('"caf\\303\\251.txt"', "café.txt"),
			('"say \\"hi\\".txt"', 'say "hi".txt'),
			('"back\\\\slash"', "back\\slash"),
			('"', '"'),
		],
	)
	def test_unquote_path(self, quoted: str, expected: str) -> None:
		"""Escapes decode to the bytes they stand for."""
		assert unquote_path(quoted) == expected

	def test_path_list_lines_and_nul(self) -> None:
		"""Line output is unquoted; NUL output is taken as-is."""
		assert parse_path_list('a.txt\n"my file.txt"\n\n') == ["a.txt", "my file.txt"]
		assert parse_path_list("a.txt\0my file.txt\0") == ["a.txt", "my file.txt"]

	def test_numstat_path_with_space(self) -> None:
		"""Numstat fields are tab-separated, so spaces stay in the path."""
		changes = parse_numstat("3\t1\tdocs/release notes.md\n")

		assert changes["docs/release notes.md"].diff_summary == "+3 -1"


@pytest.mark.unit
class TestDiffSummaries:
	"""Parsing ``--stat`` and ``--numstat`` output."""

	def test_diff_stat(self) -> None:
		"""Stat lines are keyed by path."""
		output = " src/app.py | 12 ++++++----\n docs/README.md |  3 +++\n 2 files changed, 11 insertions(+)\n"

		assert parse_diff_stat(output) == {"src/app.py": "12 ++++++----", "docs/README.md": "3 +++"}

	def test_numstat(self) -> None:
		"""Counts render as ``+added -removed``."""
		changes = parse_numstat("10\t2\tsrc/app.py\n")

		assert changes["src/app.py"].diff_summary == "+10 -2"

	def test_numstat_binary(self) -> None:
		"""Dashes mean a binary file."""
		changes = parse_numstat("-\t-\tlogo.png\n")

		assert changes["logo.png"].diff_summary == "+binary -binary"


@pytest.mark.unit
class TestLogParsing:
	"""Parsing ``git log`` output."""

	def test_subjects(self) -> None:
		"""The abbreviated id is stripped from oneline output."""
		assert parse_subjects("abc1234 feat: add x\ndef5678 fix: handle y\n") == ["feat: add x", "fix: handle y"]

	def test_commit_log(self) -> None:
		"""Subjects may themselves contain the separator."""
		output = "a" * 40 + "|abc1234|Jane Doe|1700000000|feat: a | b\n"

		commits = parse_commit_log(output)

		assert len(commits) == 1
		assert commits[0].short_hash == "abc1234"
		assert commits[0].author == "Jane Doe"
		assert commits[0].message == "feat: a | b"
		assert commits[0].date == datetime.fromtimestamp(1700000000, tz=timezone.utc)
		assert commits[0].is_pushed is False

	def test_commit_log_skips_malformed_lines(self) -> None:
		"""Lines without every field are ignored."""
		assert parse_commit_log("not|enough|fields\n") == []


@pytest.mark.unit
class TestTruncateDiff:
	"""Bounding diffs to a character budget."""

	def test_within_budget_is_unchanged(self) -> None:
		"""Short diffs come back untouched, and truncating twice changes nothing."""
		diff = "line one\nline two\n"

		assert truncate_diff(diff, 100) == diff
		assert truncate_diff(truncate_diff(diff, 100), 100) == diff

	def test_cuts_at_last_newline(self) -> None:
		"""A newline in the second half of the kept text becomes the cut point."""
		diff = "aaaa\nbbbb\ncccc\ndddd\n"

		result = truncate_diff(diff, 12)

		assert result == "aaaa\nbbbb" + TRUNCATION_MARKER

	def test_hard_cut_without_late_newline(self) -> None:
		"""Without a usable newline the text is cut at the budget."""
		diff = "a" * 50

		assert truncate_diff(diff, 10) == "a" * 10 + TRUNCATION_MARKER

	def test_rejects_non_positive_budget(self) -> None:
		"""The budget must be positive."""
		with pytest.raises(ValueError, match="positive"):
			truncate_diff("x", 0)
