"""Edit-list types for interactive rebase."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from semcommit.schemas import RebaseCommit


class Operation(str, Enum):
	"""Todo-list command applied to a commit."""

	PICK = "pick"
	SQUASH = "squash"
	REWORD = "reword"
	DROP = "drop"

	@property
	def short(self) -> str:
		"""Single-letter form."""
		return self.value[0]

	def next(self) -> Operation:
		"""The following operation in the pick, squash, reword, drop cycle."""
		members = list(Operation)
		return members[(members.index(self) + 1) % len(members)]


@dataclass
class RebaseEntry:
	"""A commit together with what the rebase should do to it."""

	commit: RebaseCommit
	operation: Operation = Operation.PICK
	new_message: str = ""
	message_edited: bool = False
	# Hashes of the squash children a combined message was written for
	squash_group: tuple[str, ...] = ()

	@property
	def effective_message(self) -> str:
		"""The replacement message if one was set, else the original subject."""
		return self.new_message or self.commit.message


def is_squash_parent(entries: list[RebaseEntry], index: int) -> bool:
	"""Return True if entry ``index`` is a pick immediately followed by a squash."""
	if index < 0 or index >= len(entries) - 1:
		return False
	return entries[index].operation is Operation.PICK and entries[index + 1].operation is Operation.SQUASH


def squash_children(entries: list[RebaseEntry], index: int) -> list[int]:
	"""Indices of the contiguous squash entries following the pick at ``index``."""
	if not 0 <= index < len(entries) or entries[index].operation is not Operation.PICK:
		return []
	children = []
	for i in range(index + 1, len(entries)):
		if entries[i].operation is not Operation.SQUASH:
			break
		children.append(i)
	return children


def find_squash_parent(entries: list[RebaseEntry], index: int) -> int:
	"""Index of the nearest pick before ``index``, or -1."""
	for i in range(min(index, len(entries)) - 1, -1, -1):
		if entries[i].operation is Operation.PICK:
			return i
	return -1


def count_pushed(commits: list[RebaseCommit]) -> int:
	"""Number of commits already on a remote."""
	return sum(1 for commit in commits if commit.is_pushed)


def format_age(moment: datetime, now: datetime | None = None) -> str:
	"""Describe how long ago ``moment`` was, e.g. ``3 hours ago``."""
	now = now or datetime.now(tz=timezone.utc)
	seconds = int((now - moment).total_seconds())
	minutes, hours, days = seconds // 60, seconds // 3600, seconds // 86400

	def plural(count: int, unit: str) -> str:
		return f"{count} {unit}{'' if count == 1 else 's'} ago"

	if seconds < 60:  # noqa: PLR2004
		return "just now"
	if minutes < 60:  # noqa: PLR2004
		return plural(minutes, "minute")
	if hours < 24:  # noqa: PLR2004
		return plural(hours, "hour")
	if days == 1:
		return "yesterday"
	if days < 7:  # noqa: PLR2004
		return f"{days} days ago"
	if days < 30:  # noqa: PLR2004
		return plural(days // 7, "week")
	return plural(days // 30, "month")
