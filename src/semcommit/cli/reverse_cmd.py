"""Command for undoing recent commits while keeping their changes."""

from __future__ import annotations

import logging
from typing import Annotated

import typer

logger = logging.getLogger(__name__)

CountArg = Annotated[int, typer.Argument(help="Number of commits to undo", min=1)]

ForceFlag = Annotated[bool, typer.Option("--force", "-f", help="Undo commits even if they were pushed")]


def register_command(app: typer.Typer) -> None:
	"""Register the reverse command with the CLI app."""

	@app.command(name="reverse")
	def reverse_command(count: CountArg = 1, force: ForceFlag = False) -> None:
		"""Undo the last N commits and put their changes back in the working tree."""
		_reverse_command_impl(count=count, force=force)


def _reverse_command_impl(count: int, force: bool) -> None:
	"""Actual implementation of the reverse command."""
	from semcommit.git.repository import GitRepository
	from semcommit.git.utils import GitError, PushedCommitError
	from semcommit.utils.cli_utils import exit_with_error, handle_keyboard_interrupt
	from semcommit.utils.log_setup import console

	try:
		repo = GitRepository.discover()
		repo.reverse(count, force=force)

		noun = "commit" if count == 1 else "commits"
		console.print(f"[green]Reversed {count} {noun}.[/green] Changes are now unstaged in the working tree.")
		if repo.has_head():
			console.print(f"HEAD is now at {repo.head_id(short=True)}", highlight=False)
		status = repo.status()
		changed = status.all_files()
		if changed:
			console.print(f"{len(changed)} changed files:")
			for path in changed:
				console.print(f"  {path}", markup=False, highlight=False)

	except KeyboardInterrupt:
		handle_keyboard_interrupt()
	except PushedCommitError as e:
		exit_with_error(str(e))
	except (GitError, ValueError) as e:
		exit_with_error(f"Reverse failed: {e}", exception=e)
