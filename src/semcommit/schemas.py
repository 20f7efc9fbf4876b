"""Shared data types for working-tree state, commit plans and history."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

DEFAULT_COMMIT_TYPES: tuple[str, ...] = ("feat", "fix", "docs", "refactor", "test", "chore", "perf", "style")

DRY_RUN_COMMIT_ID = "(dry-run)"


class ChangeStatus(str, Enum):
	"""Kind of change recorded for a path."""

	MODIFIED = "modified"
	ADDED = "added"
	DELETED = "deleted"
	RENAMED = "renamed"
	UNTRACKED = "untracked"


@dataclass
class FileChange:
	"""A changed path with its status, resolved scope and line summary."""

	path: str
	status: ChangeStatus | None = None
	scope: str = ""
	diff_summary: str = ""


@dataclass
class StatusEntry:
	"""One line of ``git status --porcelain``."""

	index_status: str
	worktree_status: str
	path: str
	original_path: str | None = None


@dataclass
class WorkingTreeStatus:
	"""Changed paths grouped by category; ``staged`` may overlap the others."""

	modified: list[str] = field(default_factory=list)
	added: list[str] = field(default_factory=list)
	deleted: list[str] = field(default_factory=list)
	renamed: list[str] = field(default_factory=list)
	untracked: list[str] = field(default_factory=list)
	staged: list[str] = field(default_factory=list)

	@property
	def has_changes(self) -> bool:
		"""True if any category other than ``staged`` is non-empty."""
		return bool(self.modified or self.added or self.deleted or self.renamed or self.untracked)

	def all_files(self) -> list[str]:
		"""Deduplicated union of every category except ``staged``, in category order."""
		seen: set[str] = set()
		files: list[str] = []
		for group in (self.modified, self.added, self.deleted, self.renamed, self.untracked):
			for path in group:
				if path not in seen:
					seen.add(path)
					files.append(path)
		return files

	def status_of(self, path: str) -> ChangeStatus | None:
		"""Return the category ``path`` was classified into, if any."""
		for status, group in (
			(ChangeStatus.MODIFIED, self.modified),
			(ChangeStatus.ADDED, self.added),
			(ChangeStatus.DELETED, self.deleted),
			(ChangeStatus.RENAMED, self.renamed),
			(ChangeStatus.UNTRACKED, self.untracked),
		):
			if path in group:
				return status
		return None


@dataclass
class CommitRules:
	"""Constraints handed to the planner model."""

	types: list[str]
	max_message_length: int = 50
	behavioral_test: str = "feat = behavior change, refactor = same behavior different structure"


@dataclass
class AnalysisRequest:
	"""Everything the provider needs to plan commits."""

	files: list[FileChange]
	diff: str
	recent_commits: list[str]
	rules: CommitRules
	has_scopes: bool = False
	single_commit: bool = False


def render_commit_message(commit_type: str, scope: str | None, message: str) -> str:
	"""Render ``type(scope): message``, or ``type: message`` without a scope."""
	if scope:
		return f"{commit_type}({scope}): {message}"
	return f"{commit_type}: {message}"


class PlannedCommit(BaseModel):
	"""A single commit proposed by the model."""

	type: str = ""
	scope: str | None = None
	message: str = ""
	files: list[str] = Field(default_factory=list)
	reasoning: str = ""

	@property
	def full_message(self) -> str:
		"""The conventional-commit subject line for this commit."""
		return render_commit_message(self.type, self.scope, self.message)


class CommitPlan(BaseModel):
	"""Ordered commits proposed by the model."""

	commits: list[PlannedCommit] = Field(default_factory=list)


@dataclass
class ExecutedCommit:
	"""A commit that was created (or would have been, in dry-run mode)."""

	commit_id: str
	message: str
	files: list[str]
	type: str = ""
	scope: str | None = None


@dataclass
class RebaseCommit:
	"""A commit from the log, enriched with its pushed state."""

	hash: str
	short_hash: str
	message: str
	author: str
	date: datetime
	is_pushed: bool = False
