"""Tests for edit-list helpers and key decoding."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from semcommit.rebase.keys import Action, action_for, key_name
from semcommit.rebase.models import (
	Operation,
	RebaseEntry,
	count_pushed,
	find_squash_parent,
	format_age,
	is_squash_parent,
	squash_children,
)
from semcommit.schemas import RebaseCommit

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_commit(name: str, pushed: bool = False) -> RebaseCommit:
	"""Commit whose ids and subject derive from ``name``."""
	return RebaseCommit(
		hash=name * 40,
		short_hash=name * 7,
		message=f"commit {name}",
		author="Test User",
		date=NOW,
		is_pushed=pushed,
	)


def make_entries(*operations: Operation) -> list[RebaseEntry]:
	"""Entries for commits a, b, c... with the given operations."""
	return [RebaseEntry(commit=make_commit(chr(ord("a") + i)), operation=op) for i, op in enumerate(operations)]


P, S, R, D = Operation.PICK, Operation.SQUASH, Operation.REWORD, Operation.DROP


@pytest.mark.unit
class TestOperations:
	"""Operation cycling and entry messages."""

	def test_cycle(self) -> None:
		"""Tab walks pick, squash, reword, drop and back."""
		assert [op.next() for op in (P, S, R, D)] == [S, R, D, P]
		assert P.short == "p"

	def test_effective_message(self) -> None:
		"""A new message replaces the original subject."""
		entry = RebaseEntry(commit=make_commit("a"))
		assert entry.effective_message == "commit a"

		entry.new_message = "better subject"
		assert entry.effective_message == "better subject"


@pytest.mark.unit
class TestSquashHelpers:
	"""Squash parent and child lookups."""

	def test_is_squash_parent(self) -> None:
		"""A pick followed by a squash is a parent."""
		entries = make_entries(P, S, P, R)

		assert is_squash_parent(entries, 0)
		assert not is_squash_parent(entries, 1)
		assert not is_squash_parent(entries, 2)
		assert not is_squash_parent(entries, 3)

	def test_squash_children(self) -> None:
		"""Children are the contiguous squashes after a pick."""
		entries = make_entries(P, S, S, P, S, D, S)

		assert squash_children(entries, 0) == [1, 2]
		assert squash_children(entries, 3) == [4]
		assert squash_children(entries, 1) == []
		assert squash_children(entries, 9) == []

	@pytest.mark.parametrize(
		("operations", "index", "expected"),
		[
			((P, S, S), 2, 0),
			((P, S, P, S), 3, 2),
			((R, S), 1, -1),
			((P, D, S), 2, 0),
			((P,), 0, -1),
		],
	)
	def test_find_squash_parent(self, operations: tuple[Operation, ...], index: int, expected: int) -> None:
		"""The greatest earlier pick is found."""
		assert find_squash_parent(make_entries(*operations), index) == expected

	def test_count_pushed(self) -> None:
		"""Pushed commits are counted."""
		commits = [make_commit("a", pushed=True), make_commit("b"), make_commit("c", pushed=True)]

		assert count_pushed(commits) == 2


@pytest.mark.unit
class TestFormatAge:
	"""Relative timestamps."""

	@pytest.mark.parametrize(
		("delta", "expected"),
		[
			(timedelta(seconds=30), "just now"),
			(timedelta(minutes=1), "1 minute ago"),
			(timedelta(hours=3), "3 hours ago"),
			(timedelta(days=1), "yesterday"),
			(timedelta(days=4), "4 days ago"),
			(timedelta(days=14), "2 weeks ago"),
			(timedelta(days=65), "2 months ago"),
		],
	)
	def test_format_age(self, delta: timedelta, expected: str) -> None:
		assert format_age(NOW - delta, now=NOW) == expected


@pytest.mark.unit
class TestKeys:
	"""Decoding raw terminal input."""

	@pytest.mark.parametrize(
		("raw", "name"),
		[
			("\x1b[A", "up"),
			("\x1b[B", "down"),
			("\x1b[1;2A", "shift+up"),
			("\x1b[1;5B", "ctrl+down"),
			("\xe0H", "up"),
			("\r", "enter"),
			("\t", "tab"),
			("\x1b", "esc"),
			("K", "K"),
			("p", "p"),
		],
	)
	def test_key_name(self, raw: str, name: str) -> None:
		assert key_name(raw) == name

	def test_bindings(self) -> None:
		"""Keys map to wizard actions."""
		assert action_for("k") is Action.UP
		assert action_for("shift+down") is Action.MOVE_DOWN
		assert action_for("J") is Action.MOVE_DOWN
		assert action_for("q") is Action.CANCEL
		assert action_for("tab") is Action.CYCLE
		assert action_for("e") is Action.EDIT_MESSAGE
		assert action_for("x") is None
