"""Git subprocess helpers and the git error hierarchy."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

PUSHED_COMMIT_HINT = "Reversing will require force-push to sync with remote.\nUse `semcommit reverse --force` to proceed."


class GitError(Exception):
	"""Base exception for git-related errors."""


class GitCommandError(GitError):
	"""A git invocation exited with a non-zero status."""

	def __init__(self, command: list[str], returncode: int, output: str) -> None:
		"""
		Initialize the error.

		Args:
		    command: The full argument vector, starting with ``git``
		    returncode: Exit status reported by git
		    output: Combined stdout and stderr of the invocation

		"""
		self.command = command
		self.returncode = returncode
		self.output = output
		message = f"Git command failed: {' '.join(command)} (exit {returncode})"
		if output.strip():
			message += f"\n{output.strip()}"
		super().__init__(message)


class GitCancelledError(GitError):
	"""Raised instead of starting a git process once cancellation was requested."""

	def __init__(self) -> None:
		"""Initialize the error."""
		super().__init__("operation cancelled")


class NotAGitRepositoryError(GitError):
	"""The directory is not inside a git working tree."""

	def __init__(self, path: Path | str) -> None:
		"""Initialize the error for ``path``."""
		self.path = Path(path)
		super().__init__(f"not a git repository: {path}")


class InsufficientHistoryError(GitError):
	"""Fewer commits exist than an operation needs."""

	def __init__(self, requested: int, actual: int) -> None:
		"""Initialize the error with the requested and actual commit counts."""
		self.requested = requested
		self.actual = actual
		super().__init__(f"cannot reverse {requested} commits: only {actual} commits exist")


class PushedCommitError(GitError):
	"""A history rewrite would touch commits already on a remote."""

	def __init__(self, count: int) -> None:
		"""
		Initialize the error.

		Args:
		    count: Number of commits the rewrite would affect

		"""
		self.count = count
		self.hint = PUSHED_COMMIT_HINT
		if count > 1:
			headline = f"One or more of the last {count} commits have been pushed to origin."
		else:
			headline = "HEAD commit has been pushed to origin."
		super().__init__(f"{headline}\n{self.hint}")


class IgnoredFileError(GitError):
	"""A path cannot be staged because ignore rules exclude it."""

	def __init__(self, path: str) -> None:
		"""Initialize the error for ``path``."""
		self.path = path
		super().__init__(f"file is ignored by ignore rules: {path}")


class MissingFileError(GitError):
	"""A path is neither present on disk nor tracked."""

	def __init__(self, path: str) -> None:
		"""Initialize the error for ``path``."""
		self.path = path
		super().__init__(f"file does not exist and is not tracked: {path}")


class NoStageablePathsError(GitError):
	"""Every requested path expanded to nothing."""

	def __init__(self) -> None:
		"""Initialize the error."""
		super().__init__("no stageable paths (all were directories)")


class StagingError(GitError):
	"""A path could not be staged for a reason git did not report."""


@dataclass
class GitResult:
	"""Outcome of a git invocation that is not checked for success."""

	returncode: int
	stdout: str
	stderr: str

	@property
	def ok(self) -> bool:
		"""Whether git exited with status 0."""
		return self.returncode == 0

	@property
	def output(self) -> str:
		"""Stdout followed by stderr."""
		return self.stdout + self.stderr


def run_git(
	command: list[str],
	cwd: Path | None = None,
	*,
	input_text: str | None = None,
	env: dict[str, str] | None = None,
) -> GitResult:
	"""
	Run a git command without raising on a non-zero exit.

	Args:
	    command: Git command to run, starting with ``git``
	    cwd: Working directory (optional)
	    input_text: Text passed on stdin (optional)
	    env: Full environment for the child process (optional)

	Returns:
	    The exit status and captured output

	Raises:
	    GitError: If the git binary cannot be started

	"""
	logger.debug("Running %s in %s", " ".join(command), cwd or Path.cwd())
	try:
		# Argument lists only; nothing goes through a shell
		result = subprocess.run(  # noqa: S603
			command,
			cwd=cwd,
			input=input_text,
			env=env,
			capture_output=True,
			text=True,
			encoding="utf-8",
			errors="replace",
			check=False,
		)
	except OSError as e:
		msg = f"Unable to run {command[0]}: {e}"
		raise GitError(msg) from e
	return GitResult(returncode=result.returncode, stdout=result.stdout, stderr=result.stderr)


def run_git_command(command: list[str], cwd: Path | None = None, input_text: str | None = None) -> str:
	"""
	Run a git command and return its output.

	Args:
	    command: Git command to run, starting with ``git``
	    cwd: Working directory (optional)
	    input_text: Text passed on stdin (optional)

	Returns:
	    Command stdout

	Raises:
	    GitCommandError: If the command fails

	"""
	result = run_git(command, cwd, input_text=input_text)
	if not result.ok:
		error = GitCommandError(command, result.returncode, result.output)
		logger.debug("%s", error)
		raise error
	return result.stdout


def get_repo_root(path: Path | None = None) -> Path:
	"""
	Get the root directory of the git repository containing ``path``.

	Args:
	    path: Directory to start searching from (defaults to the current directory)

	Returns:
	    Absolute path to the repository root

	Raises:
	    NotAGitRepositoryError: If ``path`` is not inside a repository

	"""
	start = path or Path.cwd()
	try:
		output = run_git_command(["git", "rev-parse", "--show-toplevel"], start)
	except GitError as e:
		raise NotAGitRepositoryError(start) from e
	return Path(output.strip())


def is_git_repo(path: Path | None = None) -> bool:
	"""Return True if ``path`` is inside a git repository."""
	try:
		return run_git(["git", "rev-parse", "--git-dir"], path or Path.cwd()).ok
	except GitError:
		return False
