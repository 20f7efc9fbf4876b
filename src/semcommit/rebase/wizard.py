"""
State machine behind the interactive rebase wizard.

The wizard consumes key names (see :mod:`semcommit.rebase.keys`) and keeps
everything needed to render the current step. It never touches the terminal:
the runner in :mod:`semcommit.rebase.interactive` draws the state and feeds
keys and edited text back in.

"""

from __future__ import annotations

import logging
from dataclasses import replace
from enum import Enum
from typing import TYPE_CHECKING

from semcommit.git.utils import GitError
from semcommit.rebase.keys import Action, action_for
from semcommit.rebase.models import Operation, RebaseEntry, count_pushed, squash_children
from semcommit.rebase.rebaser import RebaseError

if TYPE_CHECKING:
	from collections.abc import Callable

	from semcommit.schemas import RebaseCommit

	CommitLoader = Callable[[int], list[RebaseCommit]]
	RebaseRunner = Callable[[list[RebaseEntry], str], None]

logger = logging.getLogger(__name__)

INITIAL_COMMIT_COUNT = 20
LOAD_MORE_COUNT = 20

NOTHING_TO_REBASE = "nothing to rebase after this commit"
PUSHED_COMMITS_ERROR = "rebase includes pushed commits; use --force to proceed"

CONFIRM_OPTIONS: tuple[str, ...] = ("Execute", "Go back", "Cancel")


class Step(str, Enum):
	"""Wizard steps, in the order they are normally visited."""

	SELECT = "Select Commit"
	PUSH_WARNING = "Push Warning"
	EDIT = "Edit"
	SQUASH_MESSAGE = "Squash Message"
	CONFIRM = "Confirm"
	DONE = "Done"
	CANCELLED = "Cancelled"


class RebaseWizard:
	"""
	Drives commit selection, edit-list editing, squash messages and confirmation.

	Attributes:
	    step: Current step
	    commits: Loaded commits, newest first
	    cursor: Cursor position within the current step's list
	    base: Commit the rebase is onto
	    entries: Edit list, oldest first
	    message: Transient notice for the current step
	    error: Failure that ended the wizard, if any
	    completed: Whether the rebase ran successfully

	"""

	def __init__(
		self,
		load_commits: CommitLoader,
		run_rebase: RebaseRunner,
		force: bool = False,
		initial_count: int = INITIAL_COMMIT_COUNT,
		load_more_count: int = LOAD_MORE_COUNT,
	) -> None:
		"""
		Initialize the wizard.

		Args:
		    load_commits: Returns up to N most recent commits, newest first
		    run_rebase: Executes an edit list onto a base commit
		    force: Allow rewriting pushed commits
		    initial_count: Commits loaded up front
		    load_more_count: Commits added per load-more

		"""
		self.load_commits = load_commits
		self.run_rebase = run_rebase
		self.force = force
		self.load_more_count = load_more_count

		self.step = Step.SELECT
		self.cursor = 0
		self.base = ""
		self.entries: list[RebaseEntry] = []
		self.message = ""
		self.error: str | None = None
		self.completed = False
		self.editing_index: int | None = None
		self.squash_parent: int | None = None

		self.commits = load_commits(initial_count)
		self.has_more = len(self.commits) >= initial_count

	@property
	def finished(self) -> bool:
		"""True once the wizard reached Done or Cancelled."""
		return self.step in (Step.DONE, Step.CANCELLED)

	@property
	def pushed_count(self) -> int:
		"""Pushed commits among the current entries."""
		return count_pushed([entry.commit for entry in self.entries])

	def handle_key(self, key: str) -> None:
		"""Apply one key press to the current step."""
		action = action_for(key)
		if action is None or self.finished:
			return
		if action is Action.CANCEL:
			self.step = Step.CANCELLED
			return

		self.message = ""
		handlers = {
			Step.SELECT: self._handle_select,
			Step.PUSH_WARNING: self._handle_push_warning,
			Step.EDIT: self._handle_edit,
			Step.CONFIRM: self._handle_confirm,
		}
		handler = handlers.get(self.step)
		if handler is not None:
			handler(action)

	# Select

	def _handle_select(self, action: Action) -> None:
		if action is Action.UP:
			self.cursor = max(self.cursor - 1, 0)
		elif action is Action.DOWN:
			self.cursor = min(self.cursor + 1, max(len(self.commits) - 1, 0))
		elif action is Action.LOAD_MORE:
			self.load_more()
		elif action is Action.ENTER and self.commits:
			self.select(self.cursor)

	def load_more(self) -> None:
		"""Load another page of commits."""
		if not self.has_more:
			return
		previous = len(self.commits)
		self.commits = self.load_commits(previous + self.load_more_count)
		self.has_more = len(self.commits) > previous

	def select(self, index: int) -> None:
		"""Rebase onto commit ``index``; every newer loaded commit becomes an entry."""
		if index == 0:
			self.message = NOTHING_TO_REBASE
			return

		self.base = self.commits[index].hash
		self.entries = [RebaseEntry(commit=commit) for commit in reversed(self.commits[:index])]
		self.cursor = 0
		if self.pushed_count and not self.force:
			self.step = Step.PUSH_WARNING
		else:
			self.step = Step.EDIT

	# Push warning

	def _handle_push_warning(self, action: Action) -> None:
		if action is Action.ENTER:
			self.error = PUSHED_COMMITS_ERROR
			self.step = Step.DONE
		elif action is Action.BACK:
			self._back_to_select()

	def _back_to_select(self) -> None:
		self.step = Step.SELECT
		self.cursor = 0
		self.entries = []
		self.base = ""

	# Edit

	def _handle_edit(self, action: Action) -> None:
		last = len(self.entries) - 1
		operations = {
			Action.PICK: Operation.PICK,
			Action.SQUASH: Operation.SQUASH,
			Action.REWORD: Operation.REWORD,
			Action.DROP: Operation.DROP,
		}
		if action is Action.UP:
			self.cursor = max(self.cursor - 1, 0)
		elif action is Action.DOWN:
			self.cursor = min(self.cursor + 1, last)
		elif action is Action.MOVE_UP and self.cursor > 0:
			self._swap(self.cursor, self.cursor - 1)
			self.cursor -= 1
		elif action is Action.MOVE_DOWN and self.cursor < last:
			self._swap(self.cursor, self.cursor + 1)
			self.cursor += 1
		elif action is Action.CYCLE:
			entry = self.entries[self.cursor]
			entry.operation = entry.operation.next()
		elif action in operations:
			self.entries[self.cursor].operation = operations[action]
		elif action is Action.EDIT_MESSAGE:
			self.editing_index = self.cursor
		elif action is Action.ENTER:
			self._leave_edit()
		elif action is Action.BACK:
			self._back_to_select()

	def _swap(self, a: int, b: int) -> None:
		self.entries[a], self.entries[b] = self.entries[b], self.entries[a]

	@property
	def editing(self) -> bool:
		"""Whether an inline message edit is open."""
		return self.editing_index is not None

	def edit_default(self) -> str:
		"""Text to pre-fill the inline message editor with."""
		if self.editing_index is None:
			return ""
		return self.entries[self.editing_index].effective_message

	def finish_message_edit(self, text: str | None) -> None:
		"""
		Close the inline editor.

		Non-empty text becomes the entry's new message and turns it into a
		reword; ``None`` or blank text leaves the entry unchanged.
		"""
		if self.editing_index is None:
			return
		entry = self.entries[self.editing_index]
		self.editing_index = None
		if text is None or not text.strip():
			return
		entry.new_message = text.strip()
		entry.message_edited = True
		entry.squash_group = ()
		entry.operation = Operation.REWORD

	def _leave_edit(self) -> None:
		self.drop_stale_squash_messages()
		parent = self.pending_squash_parent()
		if parent >= 0:
			self.squash_parent = parent
			self.step = Step.SQUASH_MESSAGE
		else:
			self._enter_confirm()

	def _enter_confirm(self) -> None:
		self.squash_parent = None
		self.cursor = 0
		self.step = Step.CONFIRM

	# Squash message

	def _group_hashes(self, index: int) -> tuple[str, ...]:
		return tuple(self.entries[i].commit.hash for i in squash_children(self.entries, index))

	def drop_stale_squash_messages(self) -> None:
		"""
		Forget combined messages whose squash group has since changed.

		A parent whose children changed, or that is no longer a pick, goes
		back to its original subject. If it still has children the squash
		message step asks again.
		"""
		for index, entry in enumerate(self.entries):
			if not entry.squash_group:
				continue
			if entry.operation is Operation.PICK and self._group_hashes(index) == entry.squash_group:
				continue
			logger.debug("Dropping stale squash message for %s", entry.commit.short_hash)
			entry.new_message = ""
			entry.message_edited = False
			entry.squash_group = ()

	def pending_squash_parent(self) -> int:
		"""First pick with squash children whose message has not been edited, or -1."""
		for index, entry in enumerate(self.entries):
			if entry.operation is Operation.PICK and not entry.message_edited and squash_children(self.entries, index):
				return index
		return -1

	def squash_default(self) -> str:
		"""The parent's message followed by each child's, separated by blank lines."""
		if self.squash_parent is None:
			return ""
		indices = [self.squash_parent, *squash_children(self.entries, self.squash_parent)]
		return "\n\n".join(self.entries[i].effective_message for i in indices)

	def submit_squash_message(self, text: str | None) -> None:
		"""
		Set the combined message for the current squash group.

		``None`` returns to the edit step; empty text keeps the suggested
		combination.
		"""
		if self.step is not Step.SQUASH_MESSAGE or self.squash_parent is None:
			return
		if text is None:
			self.squash_parent = None
			self.step = Step.EDIT
			return
		parent = self.entries[self.squash_parent]
		parent.new_message = text.strip() or self.squash_default()
		parent.message_edited = True
		parent.squash_group = self._group_hashes(self.squash_parent)
		self._leave_edit()

	# Confirm

	def _handle_confirm(self, action: Action) -> None:
		if action is Action.UP:
			self.cursor = max(self.cursor - 1, 0)
		elif action is Action.DOWN:
			self.cursor = min(self.cursor + 1, len(CONFIRM_OPTIONS) - 1)
		elif action is Action.BACK:
			self.cursor = 0
			self.step = Step.EDIT
		elif action is Action.ENTER:
			choice = CONFIRM_OPTIONS[self.cursor]
			if choice == "Execute":
				self.execute()
			elif choice == "Go back":
				self.cursor = 0
				self.step = Step.EDIT
			else:
				self.step = Step.CANCELLED

	def execute(self) -> None:
		"""Run the rebase and finish."""
		entries = [replace(entry) for entry in self.entries]
		try:
			self.run_rebase(entries, self.base)
		except (RebaseError, GitError, ValueError) as e:
			logger.debug("Rebase failed: %s", e)
			self.error = str(e)
		else:
			self.completed = True
		self.step = Step.DONE
