"""Run ``git rebase -i`` non-interactively from an edit list."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import threading
from pathlib import Path

from semcommit.git.utils import GitCancelledError, run_git
from semcommit.rebase.models import Operation, RebaseEntry

logger = logging.getLogger(__name__)

SEQUENCE_EDITOR_SCRIPT = '#!/bin/sh\ncat "{todo}" > "$1"\n'

MESSAGE_EDITOR_SCRIPT = """#!/bin/sh
COUNTER_FILE="{counter}"
N=$(cat "$COUNTER_FILE")
echo $((N + 1)) > "$COUNTER_FILE"
MSG_FILE="{directory}/msg_$N.txt"
if [ -f "$MSG_FILE" ]; then cat "$MSG_FILE" > "$1"; fi
"""


class RebaseError(Exception):
	"""The rebase could not be prepared or git reported a failure."""


def generate_todo(entries: list[RebaseEntry]) -> str:
	"""
	Render the todo list, one ``op short-id subject`` line per entry.

	Reworded entries keep their original subject here; the new text is
	supplied through the message editor.
	"""
	lines = [f"{entry.operation.value} {entry.commit.short_hash} {entry.commit.message}" for entry in entries]
	return "\n".join(lines) + "\n"


def editor_messages(entries: list[RebaseEntry]) -> list[str | None]:
	"""
	Messages for each editor invocation git will make, in todo order.

	Git opens the editor once per reword and once at the end of each squash
	chain. ``None`` keeps the text git proposes.
	"""
	slots: list[str | None] = []
	for index, entry in enumerate(entries):
		if entry.operation is Operation.REWORD:
			slots.append(entry.new_message or None)
		elif entry.operation is Operation.SQUASH:
			if index + 1 < len(entries) and entries[index + 1].operation is Operation.SQUASH:
				continue
			slots.append(_squash_chain_message(entries, index))
	return slots


def _squash_chain_message(entries: list[RebaseEntry], last_child: int) -> str | None:
	# The chain's parent is the nearest entry before it that git keeps
	for i in range(last_child - 1, -1, -1):
		entry = entries[i]
		if entry.operation in (Operation.SQUASH, Operation.DROP):
			continue
		if entry.operation is Operation.PICK and entry.message_edited and entry.new_message:
			return entry.new_message
		return None
	return None


class Rebaser:
	"""
	Drives ``git rebase -i`` through generated editor scripts.

	The sequence editor replaces git's todo list with ours; the message editor
	answers each editor invocation from pre-written message files, relying on
	git to open the editor in todo order.
	"""

	def __init__(self, repo_root: Path | str, cancel: threading.Event | None = None) -> None:
		"""Initialize the rebaser for the working tree at ``repo_root``."""
		self.repo_root = Path(repo_root)
		self.cancel = cancel

	def execute(self, entries: list[RebaseEntry], base: str) -> None:
		"""
		Apply ``entries`` on top of ``base``.

		Args:
		    entries: Edit list, oldest first
		    base: Commit to rebase onto; empty rebases from the root

		Raises:
		    ValueError: If ``entries`` is empty
		    RebaseError: If git fails; the repository is left as git left it

		"""
		if not entries:
			msg = "no commits to rebase"
			raise ValueError(msg)

		scratch = Path(tempfile.mkdtemp(prefix="semcommit-rebase-"))
		try:
			env = os.environ.copy()
			env["GIT_SEQUENCE_EDITOR"] = str(self._write_sequence_editor(scratch, generate_todo(entries)))
			slots = editor_messages(entries)
			if slots:
				env["GIT_EDITOR"] = str(self._write_message_editor(scratch, slots))

			if self.cancel is not None and self.cancel.is_set():
				raise GitCancelledError

			command = ["git", "rebase", "-i", base] if base else ["git", "rebase", "-i", "--root"]
			logger.debug("Rebasing %d commits onto %s", len(entries), base or "root")
			result = run_git(command, self.repo_root, env=env)
			if not result.ok:
				msg = f"rebase failed: {result.output.strip()}"
				raise RebaseError(msg)
		except OSError as e:
			msg = f"failed to prepare rebase scripts: {e}"
			raise RebaseError(msg) from e
		finally:
			shutil.rmtree(scratch, ignore_errors=True)

	@staticmethod
	def _write_sequence_editor(scratch: Path, todo: str) -> Path:
		todo_path = scratch / "todo"
		todo_path.write_text(todo, encoding="utf-8")
		script = scratch / "sequence-editor.sh"
		script.write_text(SEQUENCE_EDITOR_SCRIPT.format(todo=todo_path), encoding="utf-8")
		script.chmod(0o755)
		return script

	@staticmethod
	def _write_message_editor(scratch: Path, slots: list[str | None]) -> Path:
		for index, message in enumerate(slots):
			if message is not None:
				(scratch / f"msg_{index}.txt").write_text(message + "\n", encoding="utf-8")
		counter = scratch / "counter"
		counter.write_text("0", encoding="utf-8")
		script = scratch / "editor.sh"
		script.write_text(MESSAGE_EDITOR_SCRIPT.format(counter=counter, directory=scratch), encoding="utf-8")
		script.chmod(0o755)
		return script

