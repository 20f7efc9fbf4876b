"""Validation and repair of model-proposed commit plans."""

from __future__ import annotations

import fnmatch
import logging
import posixpath
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import TYPE_CHECKING

from semcommit.schemas import CommitPlan, PlannedCommit

if TYPE_CHECKING:
	from collections.abc import Iterable

	from semcommit.config.repo_config import RepoConfig

logger = logging.getLogger(__name__)

ELLIPSIS = "..."

SENSITIVE_PATTERNS: tuple[str, ...] = (
	"appsettings.json",
	"appsettings.*.json",
	"local.settings.json",
	".env",
	".env.*",
	"credentials.json",
	"secrets.json",
	"*.pem",
	"*.key",
	"*.p12",
	"*.pfx",
)


@dataclass
class ValidationIssue:
	"""A single problem found in a plan, located by field."""

	field: str
	message: str

	def __str__(self) -> str:
		"""Render as ``validation error in FIELD: MESSAGE``."""
		return f"validation error in {self.field}: {self.message}"


@dataclass
class ValidationResult:
	"""Outcome of validating a plan."""

	issues: list[ValidationIssue] = field(default_factory=list)

	@property
	def valid(self) -> bool:
		"""True when no issues were found."""
		return not self.issues

	def add(self, field_name: str, message: str) -> None:
		"""Record an issue."""
		self.issues.append(ValidationIssue(field_name, message))


class PlanValidationError(Exception):
	"""A plan failed validation."""

	def __init__(self, issues: list[ValidationIssue]) -> None:
		"""Initialize the error from the issues found."""
		self.issues = issues
		details = "\n".join(f"  - {issue}" for issue in issues)
		super().__init__(f"commit plan failed validation:\n{details}")


def is_path_safe(path: str) -> bool:
	"""
	Check that ``path`` stays inside the repository.

	Absolute paths and any ``..`` component, before or after normalisation,
	are rejected.
	"""
	if not path or PurePosixPath(path).is_absolute() or PureWindowsPath(path).is_absolute():
		return False
	if ".." in path.replace("\\", "/").split("/"):
		return False
	cleaned = posixpath.normpath(path.replace("\\", "/"))
	return ".." not in cleaned.split("/")


def is_sensitive_file(path: str) -> bool:
	"""Return True if the basename of ``path`` looks like secrets or credentials."""
	base = posixpath.basename(path.replace("\\", "/"))
	return any(fnmatch.fnmatchcase(base, pattern) for pattern in SENSITIVE_PATTERNS)


def filter_sensitive_files(plan: CommitPlan) -> tuple[CommitPlan, list[str]]:
	"""
	Remove sensitive files from every commit.

	Commits left without files are dropped.

	Args:
	    plan: Plan to scrub; it is not modified

	Returns:
	    The scrubbed plan and the removed paths, in plan order

	"""
	removed: list[str] = []
	commits: list[PlannedCommit] = []
	for commit in plan.commits:
		kept = []
		for path in commit.files:
			if is_sensitive_file(path):
				removed.append(path)
			else:
				kept.append(path)
		if kept:
			commits.append(commit.model_copy(update={"files": kept}))
	if removed:
		logger.debug("Filtered sensitive files: %s", ", ".join(removed))
	return CommitPlan(commits=commits), removed


def truncate_message(message: str, max_length: int) -> str:
	"""Shorten ``message`` to ``max_length`` characters, ending with an ellipsis."""
	if len(message) <= max_length:
		return message
	return message[: max_length - len(ELLIPSIS)] + ELLIPSIS


def merge_overlapping_commits(commits: list[PlannedCommit]) -> list[PlannedCommit]:
	"""
	Merge commits that share any file.

	Connected commits collapse into one that keeps the first member's type,
	scope, message and reasoning. Merged commits appear at the position of
	their first member and their files keep first-occurrence order.
	"""
	if len(commits) <= 1:
		return list(commits)

	parent = list(range(len(commits)))

	def find(i: int) -> int:
		while parent[i] != i:
			parent[i] = parent[parent[i]]
			i = parent[i]
		return i

	first_owner: dict[str, int] = {}
	for index, commit in enumerate(commits):
		for path in commit.files:
			owner = first_owner.setdefault(path, index)
			root_a, root_b = find(owner), find(index)
			if root_a != root_b:
				# The smaller index stays the root
				parent[max(root_a, root_b)] = min(root_a, root_b)

	groups: dict[int, list[int]] = {}
	for index in range(len(commits)):
		groups.setdefault(find(index), []).append(index)

	merged: list[PlannedCommit] = []
	for root in sorted(groups):
		members = groups[root]
		if len(members) == 1:
			merged.append(commits[root])
			continue
		files: list[str] = []
		seen: set[str] = set()
		for index in members:
			for path in commits[index].files:
				if path not in seen:
					seen.add(path)
					files.append(path)
		logger.debug("Merged commits %s because they share files", members)
		merged.append(commits[root].model_copy(update={"files": files}))
	return merged


class PlanValidator:
	"""Repairs and validates plans against the repository's rules."""

	def __init__(
		self,
		repo_root: Path | str,
		repo_config: RepoConfig,
		known_files: Iterable[str] = (),
		max_message_length: int = 50,
	) -> None:
		"""
		Initialize the validator.

		Args:
		    repo_root: Root used to check that unknown files exist on disk
		    repo_config: Type policy to enforce
		    known_files: Paths reported by status
		    max_message_length: Longest accepted message

		"""
		self.repo_root = Path(repo_root)
		self.repo_config = repo_config
		self.known_files = set(known_files)
		self.max_message_length = max_message_length

	def validate(self, plan: CommitPlan | None) -> ValidationResult:
		"""Report every problem in ``plan`` without changing it."""
		result = ValidationResult()
		if plan is None:
			result.add("plan", "plan is nil")
			return result
		if not plan.commits:
			result.add("commits", "no commits in plan")
			return result

		seen: set[str] = set()
		for i, commit in enumerate(plan.commits):
			if not commit.type:
				result.add(f"commits[{i}].type", "commit type is empty")
			elif not self.repo_config.is_type_allowed(commit.type):
				allowed = ", ".join(self.repo_config.allowed_types())
				result.add(f"commits[{i}].type", f'commit type "{commit.type}" not allowed (allowed: {allowed})')

			if not commit.message:
				result.add(f"commits[{i}].message", "commit message is empty")
			elif len(commit.message) > self.max_message_length:
				result.add(
					f"commits[{i}].message",
					f"commit message exceeds {self.max_message_length} chars: {len(commit.message)} chars",
				)

			if not commit.files:
				result.add(f"commits[{i}].files", "commit has no files")

			listed: set[str] = set()
			for j, path in enumerate(commit.files):
				location = f"commits[{i}].files[{j}]"
				if not is_path_safe(path):
					result.add(location, f"unsafe file path: {path}")
					continue
				if path not in self.known_files and not (self.repo_root / path).exists():
					result.add(location, f"file does not exist: {path}")
				if path in listed:
					result.add(location, f"file listed more than once in commit: {path}")
				elif path in seen:
					result.add(location, f"file appears in multiple commits: {path}")
				listed.add(path)
				seen.add(path)
		return result

	def repair(self, plan: CommitPlan) -> CommitPlan:
		"""Truncate long messages, drop repeated files and merge commits that share files."""
		commits = [
			commit.model_copy(
				update={
					"message": truncate_message(commit.message, self.max_message_length),
					"files": list(dict.fromkeys(commit.files)),
				}
			)
			for commit in plan.commits
		]
		return CommitPlan(commits=merge_overlapping_commits(commits))

	def validate_and_fix(self, plan: CommitPlan | None) -> tuple[CommitPlan | None, ValidationResult]:
		"""
		Repair ``plan`` and validate the result.

		Returns:
		    The repaired plan (None if there was none) and the verdict

		"""
		if plan is None:
			return None, self.validate(None)
		repaired = self.repair(plan)
		return repaired, self.validate(repaired)
