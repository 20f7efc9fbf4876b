"""Typed access to a single git working tree."""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path

from semcommit.git.parsers import (
	COMMIT_LOG_FORMAT,
	classify_status,
	parse_commit_log,
	parse_diff_stat,
	parse_numstat,
	parse_path_list,
	parse_porcelain_status,
	parse_subjects,
	staged_renames_from,
)
from semcommit.git.utils import (
	GitCancelledError,
	GitCommandError,
	GitError,
	GitResult,
	IgnoredFileError,
	InsufficientHistoryError,
	MissingFileError,
	NoStageablePathsError,
	PushedCommitError,
	StagingError,
	get_repo_root,
	run_git,
)
from semcommit.schemas import FileChange, RebaseCommit, WorkingTreeStatus

logger = logging.getLogger(__name__)

MAX_COMMIT_MESSAGE_LENGTH = 200

# Exit status git uses for "differences found" and for "no such revision"
EXIT_DIFFERENCES = 1
EXIT_FATAL = 128

BENIGN_RESET_MESSAGES = ("Unstaged changes after reset", "nothing to commit")


class GitRepository:
	"""
	Runs git in one working directory and translates its output.

	Every call checks the optional cancellation event first; once it is set no
	further git process is started.
	"""

	def __init__(self, root: Path | str, cancel: threading.Event | None = None) -> None:
		"""
		Initialize the repository wrapper.

		Args:
		    root: Working directory every git command runs in
		    cancel: Event that, once set, stops new git invocations

		"""
		self.root = Path(root)
		self.cancel = cancel
		self._status_cache: WorkingTreeStatus | None = None

	@classmethod
	def discover(cls, start: Path | None = None, cancel: threading.Event | None = None) -> GitRepository:
		"""Create a repository for the working tree containing ``start``."""
		return cls(get_repo_root(start), cancel=cancel)

	def _run(self, *args: str, input_text: str | None = None, env: dict[str, str] | None = None) -> GitResult:
		if self.cancel is not None and self.cancel.is_set():
			raise GitCancelledError
		return run_git(["git", *args], self.root, input_text=input_text, env=env)

	def _check(self, *args: str, input_text: str | None = None) -> str:
		result = self._run(*args, input_text=input_text)
		if not result.ok:
			raise GitCommandError(["git", *args], result.returncode, result.output)
		return result.stdout

	def _check_diff(self, *args: str) -> str:
		"""Run a diff-like command where exit status 1 means no changes."""
		result = self._run(*args)
		if result.ok:
			return result.stdout
		if result.returncode == EXIT_DIFFERENCES:
			return ""
		raise GitCommandError(["git", *args], result.returncode, result.output)

	def _check_log(self, *args: str) -> str:
		"""Run a log-like command where exit status 128 means no commits."""
		result = self._run(*args)
		if result.ok:
			return result.stdout
		if result.returncode == EXIT_FATAL:
			return ""
		raise GitCommandError(["git", *args], result.returncode, result.output)

	def invalidate(self) -> None:
		"""Drop the cached status so the next query asks git again."""
		self._status_cache = None

	# Status and diffs

	def status(self) -> WorkingTreeStatus:
		"""
		Get the working tree status with ignored paths filtered out.

		Returns:
		    The classified status, cached until :meth:`invalidate`

		"""
		if self._status_cache is not None:
			return self._status_cache

		entries = parse_porcelain_status(self._check_diff("status", "--porcelain", "-z"))
		ignored = self.ignored_paths([entry.path for entry in entries])
		self._status_cache = classify_status(entries, ignored)
		return self._status_cache

	def ignored_paths(self, paths: list[str]) -> set[str]:
		"""
		Return the subset of ``paths`` matched by ignore rules.

		Any failure keeps every path, so nothing is hidden by mistake.
		"""
		if not paths:
			return set()
		try:
			result = self._run("check-ignore", "--stdin", "-z", input_text="\0".join(paths) + "\0")
		except GitCancelledError:
			raise
		except GitError as e:
			logger.debug("check-ignore failed, keeping all paths: %s", e)
			return set()
		if not result.ok:
			return set()
		return set(parse_path_list(result.stdout))

	def is_ignored(self, path: str) -> bool:
		"""Return True if ignore rules exclude ``path``."""
		return self._run("check-ignore", "-q", path).ok

	def _diff_base(self, staged_only: bool) -> str:
		if staged_only or not self.has_head():
			return "--staged"
		return "HEAD"

	def diff(self, staged_only: bool = False, files: list[str] | None = None) -> str:
		"""
		Get the textual diff against the index or the current tip.

		Without any commit to compare with, the index is used.
		"""
		args = ["diff", self._diff_base(staged_only)]
		if files:
			args.extend(["--", *files])
		return self._check_diff(*args)

	def diff_stat(self, staged_only: bool = False) -> dict[str, str]:
		"""Get ``--stat`` summaries keyed by path."""
		return parse_diff_stat(self._check_diff("diff", self._diff_base(staged_only), "--stat"))

	def diff_numstat(self, staged_only: bool = False) -> dict[str, FileChange]:
		"""Get ``+added -removed`` summaries keyed by path."""
		return parse_numstat(self._check_diff("diff", self._diff_base(staged_only), "--numstat"))

	def diff_range(self, path: str, from_ref: str = "", to_ref: str = "", numstat: bool = False) -> str:
		"""
		Diff a single file across a ref range.

		Args:
		    path: File to diff
		    from_ref: Starting ref; empty means HEAD against the working copy
		    to_ref: Ending ref; empty means the working copy
		    numstat: Return ``--numstat`` output instead of a patch

		Returns:
		    Raw git output

		"""
		args = ["diff"]
		if numstat:
			args.append("--numstat")
		args.append(from_ref or "HEAD")
		if from_ref and to_ref:
			args.append(to_ref)
		args.extend(["--", path])
		return self._check_diff(*args)

	def staged_files(self) -> list[str]:
		"""Paths currently recorded in the index as changed."""
		return parse_path_list(self._check_diff("diff", "--cached", "--name-only", "-z"))

	def staged_renames(self) -> dict[str, str]:
		"""Staged renames as ``{old: new}``."""
		return staged_renames_from(parse_porcelain_status(self._check_diff("status", "--porcelain", "-z")))

	def has_staged_changes(self) -> bool:
		"""Return True if the index differs from HEAD."""
		return bool(self.staged_files())

	# History

	def has_head(self) -> bool:
		"""Return True once the repository has at least one commit."""
		return self._run("rev-parse", "--verify", "HEAD").ok

	def recent_commit_subjects(self, count: int) -> list[str]:
		"""Subjects of the ``count`` most recent commits, newest first."""
		return parse_subjects(self._check_log("log", "--oneline", f"-{count}"))

	def current_branch(self) -> str:
		"""Name of the checked-out branch (``HEAD`` when detached)."""
		return self._check("rev-parse", "--abbrev-ref", "HEAD").strip()

	def head_id(self, short: bool = False) -> str:
		"""Object id of HEAD."""
		args = ["rev-parse", "--short", "HEAD"] if short else ["rev-parse", "HEAD"]
		return self._check(*args).strip()

	def is_initial_commit(self) -> bool:
		"""Return True if HEAD has no parent."""
		return not self._run("rev-parse", "--verify", "HEAD~1").ok

	def commit_count(self) -> int:
		"""Number of commits reachable from HEAD."""
		output = self._check_log("rev-list", "--count", "HEAD").strip()
		return int(output) if output.isdigit() else 0

	def has_commit_depth(self, depth: int) -> None:
		"""
		Ensure ``HEAD~depth`` exists.

		Raises:
		    InsufficientHistoryError: With the number of commits that do exist

		"""
		if self._run("rev-parse", "--verify", f"HEAD~{depth}").ok:
			return
		raise InsufficientHistoryError(depth, self.commit_count())

	def is_ref_pushed(self, ref: str) -> bool:
		"""Return True if any remote-tracking branch contains ``ref``."""
		result = self._run("branch", "-r", "--contains", ref)
		return result.ok and bool(result.stdout.strip())

	def local_only_commits(self) -> set[str]:
		"""
		Commits reachable from HEAD but from no remote-tracking branch.

		A failed lookup returns an empty set, so every commit counts as pushed.
		"""
		result = self._run("log", "--format=%H", "--not", "--remotes")
		if not result.ok:
			logger.debug("Could not list local-only commits: %s", result.output.strip())
			return set()
		return set(parse_path_list(result.stdout))

	def _with_pushed_state(self, commits: list[RebaseCommit]) -> list[RebaseCommit]:
		if not commits:
			return commits
		local_only = self.local_only_commits()
		for commit in commits:
			commit.is_pushed = commit.hash not in local_only
		return commits

	def get_commit_log(self, count: int) -> list[RebaseCommit]:
		"""The ``count`` most recent commits, newest first, with pushed state."""
		output = self._check_log("log", f"-{count}", f"--format={COMMIT_LOG_FORMAT}")
		return self._with_pushed_state(parse_commit_log(output))

	def get_commits_in_range(self, from_ref: str, to_ref: str) -> list[RebaseCommit]:
		"""Commits in ``from_ref..to_ref``, newest first, with pushed state."""
		output = self._check_log("log", f"--format={COMMIT_LOG_FORMAT}", f"{from_ref}..{to_ref}")
		return self._with_pushed_state(parse_commit_log(output))

	def last_commit_files(self) -> list[str]:
		"""Paths touched by the HEAD commit."""
		return parse_path_list(self._check_log("diff-tree", "--no-commit-id", "--name-only", "-r", "-z", "HEAD"))

	# Index mutations

	def is_tracked(self, path: str) -> bool:
		"""Return True if ``path`` is known to the index."""
		result = self._run("ls-files", "--", path)
		return result.ok and bool(result.stdout.strip())

	def _untracked_in(self, directory: str) -> list[str]:
		return parse_path_list(self._check("ls-files", "--other", "--exclude-standard", "-z", "--", directory))

	def stage(self, files: list[str]) -> None:
		"""
		Stage exactly ``files``.

		Deleted tracked files are staged as deletions, directories expand to
		their untracked non-ignored files, and sources of staged renames are
		accepted without staging them again.

		Args:
		    files: Repository-relative paths

		Raises:
		    ValueError: If ``files`` is empty
		    MissingFileError: If a path is neither on disk nor tracked
		    NoStageablePathsError: If every path expanded to nothing
		    IgnoredFileError: If a path is excluded by ignore rules
		    StagingError: If a path is still unstaged after ``git add``

		"""
		if not files:
			msg = "no files to stage"
			raise ValueError(msg)

		renames = self.staged_renames()
		rename_sources: list[str] = []
		to_add: list[str] = []
		for path in files:
			if path in renames:
				rename_sources.append(path)
				continue

			full_path = self.root / path
			if not os.path.lexists(full_path):
				if self.is_tracked(path):
					to_add.append(path)
					continue
				raise MissingFileError(path)
			if full_path.is_dir():
				expanded = self._untracked_in(path)
				logger.debug("Expanded directory %s to %d files", path, len(expanded))
				to_add.extend(expanded)
			else:
				to_add.append(path)

		if not to_add:
			if not rename_sources:
				raise NoStageablePathsError
			staged = set(self.staged_files())
			for source in rename_sources:
				if renames[source] not in staged:
					msg = f"rename destination not staged: {source} -> {renames[source]}"
					raise StagingError(msg)
			return

		try:
			result = self._run("add", "--", *to_add)
		finally:
			self.invalidate()
		if not result.ok:
			for path in to_add:
				if self.is_ignored(path):
					raise IgnoredFileError(path)
			raise GitCommandError(["git", "add", "--", *to_add], result.returncode, result.output)

		self._verify_staged(to_add + rename_sources)

	def _verify_staged(self, expected: list[str]) -> None:
		staged = set(self.staged_files())
		renames = self.staged_renames()
		for path in expected:
			if path in staged:
				continue
			if path in renames and renames[path] in staged:
				continue
			if self.is_ignored(path):
				raise IgnoredFileError(path)
			raise StagingError(self._staging_diagnostic(path, renames))

	def _staging_diagnostic(self, path: str, renames: dict[str, str]) -> str:
		exists = os.path.lexists(self.root / path)
		porcelain = self._run("status", "--porcelain", "--", path).stdout.strip() or "(none)"
		lines = [
			f"file not staged after git add: {path}",
			f"  exists: {exists}",
			f"  tracked: {self.is_tracked(path)}",
			f"  status: {porcelain}",
		]
		if path in renames:
			lines.append(f"  rename source of: {renames[path]}")
		destinations = [old for old, new in renames.items() if new == path]
		if destinations:
			lines.append(f"  rename destination of: {destinations[0]}")
		return "\n".join(lines)

	def stage_all(self) -> None:
		"""Stage every change in the working tree."""
		try:
			self._check("add", "-A")
		finally:
			self.invalidate()

	def unstage(self, files: list[str]) -> None:
		"""Remove ``files`` from the index, keeping working tree content."""
		if not files:
			return
		try:
			result = self._run("reset", "HEAD", "--", *files)
		finally:
			self.invalidate()
		if not result.ok and not self._is_benign(result.output):
			raise GitCommandError(["git", "reset", "HEAD", "--", *files], result.returncode, result.output)

	def unstage_all(self) -> None:
		"""Empty the index back to HEAD, or entirely when there is no commit yet."""
		args = ("reset", "HEAD") if self.has_head() else ("rm", "--cached", "-r", "--ignore-unmatch", ".")
		try:
			result = self._run(*args)
		finally:
			self.invalidate()
		if not result.ok and not self._is_benign(result.output):
			raise GitCommandError(["git", *args], result.returncode, result.output)

	@staticmethod
	def _is_benign(output: str) -> bool:
		return any(message in output for message in BENIGN_RESET_MESSAGES)

	def commit(self, message: str) -> str:
		"""
		Commit the index.

		Args:
		    message: Commit message, at most 200 characters

		Returns:
		    Short id of the new commit

		Raises:
		    ValueError: If the message is empty or too long, or nothing is staged

		"""
		if not message.strip():
			msg = "commit message cannot be empty"
			raise ValueError(msg)
		if len(message) > MAX_COMMIT_MESSAGE_LENGTH:
			msg = f"commit message too long: {len(message)} chars (max {MAX_COMMIT_MESSAGE_LENGTH})"
			raise ValueError(msg)
		if not self.has_staged_changes():
			msg = "no staged changes to commit"
			raise ValueError(msg)

		try:
			self._check("commit", "-m", message)
		finally:
			self.invalidate()
		commit_id = self.head_id(short=True)
		logger.debug("Created commit %s: %s", commit_id, message)
		return commit_id

	def reverse(self, count: int, force: bool = False) -> None:
		"""
		Undo the last ``count`` commits, leaving their changes unstaged.

		Args:
		    count: Number of commits to undo
		    force: Proceed even when the commits are on a remote

		Raises:
		    ValueError: If ``count`` is less than 1
		    InsufficientHistoryError: If fewer than ``count`` commits have a parent
		    PushedCommitError: If the commits were pushed and ``force`` is False

		"""
		if count < 1:
			msg = f"count must be at least 1, got {count}"
			raise ValueError(msg)

		self.has_commit_depth(count)
		if self.is_ref_pushed(f"HEAD~{count - 1}") and not force:
			raise PushedCommitError(count)

		try:
			self._check("reset", "--soft", f"HEAD~{count}")
		finally:
			self.invalidate()
		self.unstage_all()
