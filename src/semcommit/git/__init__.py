"""Git access for semcommit."""

from semcommit.git.repository import GitRepository
from semcommit.git.utils import (
	GitCommandError,
	GitError,
	IgnoredFileError,
	InsufficientHistoryError,
	MissingFileError,
	NoStageablePathsError,
	NotAGitRepositoryError,
	PushedCommitError,
	StagingError,
	run_git_command,
)

__all__ = [
	"GitCommandError",
	"GitError",
	"GitRepository",
	"IgnoredFileError",
	"InsufficientHistoryError",
	"MissingFileError",
	"NoStageablePathsError",
	"NotAGitRepositoryError",
	"PushedCommitError",
	"StagingError",
	"run_git_command",
]
