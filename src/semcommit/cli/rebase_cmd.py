"""Command for the interactive rebase wizard."""

from __future__ import annotations

import logging
from typing import Annotated

import typer

logger = logging.getLogger(__name__)

ForceFlag = Annotated[bool, typer.Option("--force", "-f", help="Allow rewriting commits that were pushed")]


def register_command(app: typer.Typer) -> None:
	"""Register the rebase command with the CLI app."""

	@app.command(name="rebase")
	def rebase_command(force: ForceFlag = False) -> None:
		"""
		Reorder, squash, reword or drop recent commits interactively.

		Pick the commit to rebase onto, edit the list of newer commits and
		confirm to run the rebase.

		"""
		_rebase_command_impl(force=force)


def _rebase_command_impl(force: bool) -> None:
	"""Actual implementation of the rebase command."""
	from semcommit.config.config_loader import ConfigError, ConfigLoader
	from semcommit.git.repository import GitRepository
	from semcommit.git.utils import GitError
	from semcommit.rebase.interactive import WizardRunner
	from semcommit.rebase.rebaser import Rebaser
	from semcommit.rebase.wizard import RebaseWizard, Step
	from semcommit.utils.cli_utils import exit_with_error, handle_keyboard_interrupt
	from semcommit.utils.log_setup import console

	try:
		repo = GitRepository.discover()
		settings = ConfigLoader.get_instance().get.rebase

		wizard = RebaseWizard(
			load_commits=repo.get_commit_log,
			run_rebase=Rebaser(repo.root).execute,
			force=force,
			initial_count=settings.initial_commit_count,
			load_more_count=settings.load_more_count,
		)
		if len(wizard.commits) < 2:  # noqa: PLR2004
			console.print("Not enough commits to rebase.")
			return

		WizardRunner(wizard, console=console).run()
		repo.invalidate()

		if wizard.error:
			exit_with_error(wizard.error)
		if wizard.step is Step.CANCELLED:
			console.print("Rebase cancelled. No changes were made.")
		elif wizard.completed:
			console.print("[green]Rebase completed successfully.[/green]")

	except KeyboardInterrupt:
		handle_keyboard_interrupt()
	except (GitError, ConfigError) as e:
		exit_with_error(f"Rebase failed: {e}", exception=e)
