"""Terminal runner for the rebase wizard."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import click
import questionary
from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from semcommit.rebase.keys import key_name
from semcommit.rebase.models import Operation, format_age
from semcommit.rebase.wizard import CONFIRM_OPTIONS, RebaseWizard, Step

if TYPE_CHECKING:
	from collections.abc import Callable

	from rich.console import RenderableType

logger = logging.getLogger(__name__)

OPERATION_STYLES: dict[Operation, str] = {
	Operation.PICK: "green",
	Operation.SQUASH: "yellow",
	Operation.REWORD: "cyan",
	Operation.DROP: "red strike",
}

STEP_ORDER: tuple[Step, ...] = (Step.SELECT, Step.EDIT, Step.CONFIRM)


def _help(*pairs: tuple[str, str]) -> Text:
	text = Text()
	for key, description in pairs:
		if not key:
			continue
		text.append(key, style="bold cyan")
		text.append(f" {description}  ", style="dim")
	return text


def _step_indicator(step: Step) -> Text:
	text = Text()
	for index, candidate in enumerate(STEP_ORDER):
		if index:
			text.append(" → ", style="dim")
		current = candidate is step or (candidate is Step.EDIT and step is Step.SQUASH_MESSAGE)
		text.append(candidate.value, style="bold reverse" if current else "dim")
	return text


def render_select(wizard: RebaseWizard) -> RenderableType:
	"""Commit list for choosing the rebase base."""
	lines = [
		Text("Select the commit to rebase onto.", style="bold"),
		Text("Every newer commit will be part of the rebase.", style="dim"),
		Text(),
	]
	for index, commit in enumerate(wizard.commits):
		line = Text("❯ " if index == wizard.cursor else "  ", style="bold magenta")
		line.append(f"{index + 1}. ")
		line.append(commit.short_hash, style="yellow")
		line.append(f" {commit.message} ")
		line.append(format_age(commit.date), style="dim")
		if commit.is_pushed:
			line.append(" (pushed)", style="red")
		lines.append(line)
	if not wizard.commits:
		lines.append(Text("No commits found.", style="dim"))
	if wizard.message:
		lines.extend([Text(), Text(wizard.message, style="yellow")])
	lines.append(Text())
	more = ("l", "load more") if wizard.has_more else ("", "")
	lines.append(_help(("↑/↓", "navigate"), ("enter", "select"), more, ("q", "cancel")))
	return Group(*lines)


def render_push_warning(wizard: RebaseWizard) -> RenderableType:
	"""Warning shown when the selection includes pushed commits."""
	body = Text()
	body.append("Pushed commits detected\n\n", style="bold")
	body.append(f"{wizard.pushed_count} of the selected commits have been pushed to origin.\n", style="dim")
	body.append("Rebasing will require force-push to sync with remote.\n\n", style="dim")
	body.append("Re-run with --force to proceed, or press 'b' to go back.\n", style="dim")
	return Group(Panel(body, title="Warning", border_style="yellow"), _help(("b", "back"), ("q", "cancel")))


def _entry_lines(wizard: RebaseWizard, show_cursor: bool) -> list[Text]:
	lines = []
	for index, entry in enumerate(wizard.entries):
		line = Text("❯ " if show_cursor and index == wizard.cursor else "  ", style="bold magenta")
		if entry.operation is Operation.SQUASH:
			line.append("  └ ", style="dim")
		line.append(f"{entry.operation.value:<7}", style=OPERATION_STYLES[entry.operation])
		line.append(entry.commit.short_hash, style="yellow")
		line.append(f" {entry.effective_message.splitlines()[0] if entry.effective_message else ''}")
		if entry.message_edited:
			line.append(" (edited)", style="green")
		lines.append(line)
	return lines


def render_edit(wizard: RebaseWizard) -> RenderableType:
	"""Edit list with operations, oldest first."""
	lines = [Text("Edit rebase plan (commits apply top-to-bottom):", style="bold"), Text()]
	lines.extend(_entry_lines(wizard, show_cursor=True))
	lines.append(Text())
	lines.append(_help(("↑/↓", "navigate"), ("K/J", "move"), ("tab", "cycle op"), ("e", "edit msg")))
	lines.append(
		_help(("p", "pick"), ("s", "squash"), ("r", "reword"), ("d", "drop"), ("enter", "confirm"), ("b", "back"))
	)
	return Group(*lines)


def render_confirm(wizard: RebaseWizard) -> RenderableType:
	"""Final plan with the Execute / Go back / Cancel choice."""
	lines = [Text("Review rebase plan:", style="bold"), Text()]
	lines.extend(_entry_lines(wizard, show_cursor=False))
	lines.append(Text())
	for index, option in enumerate(CONFIRM_OPTIONS):
		selected = index == wizard.cursor
		lines.append(Text(f"{'❯ ' if selected else '  '}{option}", style="bold magenta" if selected else ""))
	lines.append(Text())
	lines.append(_help(("↑/↓", "navigate"), ("enter", "choose"), ("b", "back"), ("q", "cancel")))
	return Group(*lines)


RENDERERS: dict[Step, Callable[[RebaseWizard], RenderableType]] = {
	Step.SELECT: render_select,
	Step.PUSH_WARNING: render_push_warning,
	Step.EDIT: render_edit,
	Step.CONFIRM: render_confirm,
}


def render(wizard: RebaseWizard) -> RenderableType:
	"""Render the wizard's current step with its step indicator."""
	renderer = RENDERERS.get(wizard.step)
	body = renderer(wizard) if renderer else Text()
	return Group(_step_indicator(wizard.step), Text(), body)


def read_key() -> str:
	"""Block for one key press and return its name."""
	return key_name(click.getchar())


class WizardRunner:
	"""Draws the wizard, reads keys and delegates text entry to questionary."""

	def __init__(
		self,
		wizard: RebaseWizard,
		console: Console | None = None,
		read: Callable[[], str] = read_key,
	) -> None:
		"""
		Initialize the runner.

		Args:
		    wizard: State machine to drive
		    console: Console to draw on
		    read: Returns the next key name

		"""
		self.wizard = wizard
		self.console = console or Console()
		self.read = read

	def run(self) -> RebaseWizard:
		"""Loop until the wizard is done or cancelled."""
		while not self.wizard.finished:
			if self.wizard.step is Step.SQUASH_MESSAGE:
				self._prompt_squash_message()
				continue
			if self.wizard.editing:
				self._prompt_message_edit()
				continue

			self.console.clear()
			self.console.print(render(self.wizard))
			key = self.read()
			if self.wizard.step is Step.CONFIRM and key == "enter" and self.wizard.cursor == 0:
				with self.console.status("Rebasing..."):
					self.wizard.handle_key(key)
			else:
				self.wizard.handle_key(key)
		return self.wizard

	def _prompt_message_edit(self) -> None:
		index = self.wizard.editing_index
		commit = self.wizard.entries[index].commit if index is not None else None
		label = f"New message for {commit.short_hash}:" if commit else "New message:"
		text = questionary.text(label, default=self.wizard.edit_default()).ask()
		self.wizard.finish_message_edit(text)

	def _prompt_squash_message(self) -> None:
		parent = self.wizard.entries[self.wizard.squash_parent or 0]
		self.console.clear()
		self.console.print(_step_indicator(self.wizard.step))
		self.console.print(Text(f"Combined message for {parent.commit.short_hash} and its squashed commits", style="bold"))
		text = questionary.text(
			"Message (Esc then Enter to finish):",
			default=self.wizard.squash_default(),
			multiline=True,
		).ask()
		self.wizard.submit_squash_message(text)
