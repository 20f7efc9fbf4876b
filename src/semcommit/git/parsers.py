"""Parsers that turn git's textual output into typed values."""

from __future__ import annotations

import re
from datetime import datetime, timezone

from semcommit.schemas import FileChange, RebaseCommit, StatusEntry, WorkingTreeStatus

DIFF_STAT_PATTERN = re.compile(r"^\s*(.+?)\s*\|\s*(\d+)\s*(.*)$")

# %H|%h|%an|%at|%s
COMMIT_LOG_FORMAT = "%H|%h|%an|%at|%s"

TRUNCATION_MARKER = "\n\n... (truncated)"

RENAME_SEPARATOR = " -> "

# Single-character escapes git uses when it quotes a path
C_ESCAPES = {
	b"a": b"\a",
	b"b": b"\b",
	b"t": b"\t",
	b"n": b"\n",
	b"v": b"\v",
	b"f": b"\f",
	b"r": b"\r",
	b'"': b'"',
	b"\\": b"\\",
}
C_ESCAPE_PATTERN = re.compile(rb"\\([0-7]{3}|.)", re.DOTALL)


def _unescape(match: re.Match[bytes]) -> bytes:
	token = match.group(1)
	if len(token) == 3:  # noqa: PLR2004
		return bytes([int(token, 8) & 0xFF])
	return C_ESCAPES.get(token, match.group(0))


def unquote_path(path: str) -> str:
	"""
	Undo git's C-style path quoting.

	Paths with whitespace, quotes, control or non-ASCII characters come back
	wrapped in double quotes, with octal escapes for the raw UTF-8 bytes.
	Unquoted paths are returned unchanged.

	Args:
	    path: A path as printed by git

	Returns:
	    The path as it exists on disk

	"""
	if len(path) < 2 or not (path.startswith('"') and path.endswith('"')):  # noqa: PLR2004
		return path
	raw = C_ESCAPE_PATTERN.sub(_unescape, path[1:-1].encode("utf-8"))
	return raw.decode("utf-8", errors="replace")


def parse_porcelain_status(output: str) -> list[StatusEntry]:
	"""
	Parse ``git status --porcelain -z`` output.

	Records are NUL-terminated and paths are never quoted. Columns 0 and 1 hold
	the index and worktree codes and the path starts at column 3. For a rename
	or copy the source path follows as its own record.

	Line-based output without ``-z`` is accepted too; there renames read
	``old -> new`` and quoted paths are unquoted.

	Args:
	    output: Raw porcelain output

	Returns:
	    One entry per status record, in git's order

	"""
	if "\0" not in output:
		return _parse_porcelain_lines(output)

	entries: list[StatusEntry] = []
	records = iter(output.split("\0"))
	for record in records:
		if len(record) < 4:  # noqa: PLR2004
			continue
		original: str | None = None
		if record[0] in "RC" or record[1] in "RC":
			original = next(records, None) or None
		entries.append(
			StatusEntry(index_status=record[0], worktree_status=record[1], path=record[3:], original_path=original)
		)
	return entries


def _parse_porcelain_lines(output: str) -> list[StatusEntry]:
	entries: list[StatusEntry] = []
	for line in output.splitlines():
		if len(line) < 4:  # noqa: PLR2004
			continue
		path = line[3:]
		original: str | None = None
		if RENAME_SEPARATOR in path:
			parts = path.split(RENAME_SEPARATOR)
			if len(parts) == 2:  # noqa: PLR2004
				original, path = unquote_path(parts[0]), parts[1]
		entries.append(
			StatusEntry(
				index_status=line[0],
				worktree_status=line[1],
				path=unquote_path(path),
				original_path=original,
			)
		)
	return entries


def classify_status(entries: list[StatusEntry], ignored: set[str] | None = None) -> WorkingTreeStatus:
	"""
	Group status entries into a WorkingTreeStatus.

	Args:
	    entries: Parsed porcelain entries
	    ignored: Paths to leave out entirely

	Returns:
	    The classified status

	"""
	ignored = ignored or set()
	status = WorkingTreeStatus()
	for entry in entries:
		if entry.path in ignored:
			continue

		index, worktree = entry.index_status, entry.worktree_status
		if "M" in (index, worktree):
			status.modified.append(entry.path)
		elif index == "A":
			status.added.append(entry.path)
		elif "D" in (index, worktree):
			status.deleted.append(entry.path)
		elif index == "R":
			status.renamed.append(entry.path)
		elif index == "?" and worktree == "?":
			status.untracked.append(entry.path)

		if index not in (" ", "?"):
			status.staged.append(entry.path)
	return status


def staged_renames_from(entries: list[StatusEntry]) -> dict[str, str]:
	"""Map the old path of every staged rename to its new path."""
	return {
		entry.original_path: entry.path
		for entry in entries
		if entry.index_status == "R" and entry.original_path is not None
	}


def parse_diff_stat(output: str) -> dict[str, str]:
	"""Parse ``git diff --stat`` into ``{path: "count symbols"}``."""
	result: dict[str, str] = {}
	for line in output.splitlines():
		match = DIFF_STAT_PATTERN.match(line)
		if match:
			result[unquote_path(match.group(1).strip())] = f"{match.group(2)} {match.group(3)}"
	return result


def parse_numstat(output: str) -> dict[str, FileChange]:
	"""
	Parse ``git diff --numstat`` into FileChange values keyed by path.

	Binary files report ``-`` for both counts, rendered as ``binary``.
	"""
	result: dict[str, FileChange] = {}
	for line in output.splitlines():
		parts = line.split("\t", 2)
		if len(parts) < 3:  # noqa: PLR2004
			continue
		added, removed, path = parts[0], parts[1], unquote_path(parts[2])
		added = "binary" if added == "-" else added
		removed = "binary" if removed == "-" else removed
		result[path] = FileChange(path=path, diff_summary=f"+{added} -{removed}")
	return result


def parse_subjects(output: str) -> list[str]:
	"""Extract subjects from ``git log --oneline`` output."""
	subjects: list[str] = []
	for line in output.splitlines():
		parts = line.split(" ", 1)
		if len(parts) == 2:  # noqa: PLR2004
			subjects.append(parts[1])
	return subjects


def parse_commit_log(output: str) -> list[RebaseCommit]:
	"""
	Parse log output produced with :data:`COMMIT_LOG_FORMAT`.

	Pushed state is left at False; callers resolve it separately.
	"""
	commits: list[RebaseCommit] = []
	for line in output.splitlines():
		parts = line.split("|", 4)
		if len(parts) != 5:  # noqa: PLR2004
			continue
		try:
			timestamp = int(parts[3])
		except ValueError:
			timestamp = 0
		commits.append(
			RebaseCommit(
				hash=parts[0],
				short_hash=parts[1],
				author=parts[2],
				date=datetime.fromtimestamp(timestamp, tz=timezone.utc),
				message=parts[4],
			)
		)
	return commits


def parse_path_list(output: str) -> list[str]:
	"""
	Split a list of paths, dropping blanks.

	NUL-terminated output from ``-z`` is taken verbatim; newline-separated
	output is unquoted line by line.
	"""
	if "\0" in output:
		return [item for item in output.split("\0") if item]
	return [unquote_path(line.strip()) for line in output.splitlines() if line.strip()]


def truncate_diff(diff: str, max_chars: int) -> str:
	"""
	Bound a diff to ``max_chars`` characters.

	The cut backs up to the last newline when that newline lies in the second
	half of the kept text, and a visible marker is appended.

	Args:
	    diff: Full diff text
	    max_chars: Character budget, must be positive

	Returns:
	    ``diff`` unchanged when it fits, otherwise the truncated text

	Raises:
	    ValueError: If ``max_chars`` is not positive

	"""
	if max_chars <= 0:
		msg = "max_chars must be positive"
		raise ValueError(msg)

	if len(diff) <= max_chars:
		return diff

	truncated = diff[:max_chars]
	last_newline = truncated.rfind("\n")
	if last_newline > max_chars // 2:
		truncated = truncated[:last_newline]
	return truncated + TRUNCATION_MARKER
