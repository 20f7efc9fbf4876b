"""Command for planning and creating conventional commits from pending changes."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Annotated

import typer

if TYPE_CHECKING:
	from semcommit.schemas import PlannedCommit

logger = logging.getLogger(__name__)

StagedFlag = Annotated[bool, typer.Option("--staged", help="Only commit changes that are already staged")]

DryRunFlag = Annotated[bool, typer.Option("--dry-run", help="Show the plan without creating commits")]

SingleFlag = Annotated[bool, typer.Option("--single", "-1", help="Put every change into a single commit")]

SmartFlag = Annotated[bool, typer.Option("--smart", help="Split changes into several commits")]

ProviderOption = Annotated[
	str | None,
	typer.Option("--provider", help="LLM provider (openai, anthropic, gemini, grok, azure)"),
]

YesFlag = Annotated[bool, typer.Option("--yes", "-y", help="Create the commits without asking for confirmation")]


def register_command(app: typer.Typer) -> None:
	"""Register the commit command with the CLI app."""

	@app.command(name="commit")
	def commit_command(
		staged: StagedFlag = False,
		dry_run: DryRunFlag = False,
		single: SingleFlag = False,
		smart: SmartFlag = False,
		provider: ProviderOption = None,
		yes: YesFlag = False,
	) -> None:
		"""
		Group pending changes into focused conventional commits.

		The model proposes a plan, which is repaired, validated and shown
		before any commit is created.

		"""
		_commit_command_impl(
			staged=staged,
			dry_run=dry_run,
			single=single,
			smart=smart,
			provider=provider,
			yes=yes,
		)


def _commit_command_impl(
	staged: bool,
	dry_run: bool,
	single: bool,
	smart: bool,
	provider: str | None,
	yes: bool,
) -> None:
	"""Actual implementation of the commit command."""
	import questionary

	from semcommit.config.config_loader import ConfigError, ConfigLoader
	from semcommit.config.repo_config import load_repo_config
	from semcommit.git.repository import GitRepository
	from semcommit.git.utils import GitError
	from semcommit.llm.errors import LLMError
	from semcommit.llm.litellm_provider import create_provider
	from semcommit.planner.context import NoChangesError
	from semcommit.planner.executor import ExecutionError, NothingExecutedError, PlanExecutor
	from semcommit.planner.output import preview_plan, summarize_execution
	from semcommit.planner.planner import PlanOptions, Planner
	from semcommit.planner.validator import filter_sensitive_files
	from semcommit.utils.cli_utils import exit_with_error, handle_keyboard_interrupt, loading_spinner, show_warning
	from semcommit.utils.log_setup import console

	try:
		repo = GitRepository.discover()
		config = ConfigLoader.get_instance().get
		repo_config = load_repo_config(repo.root)

		is_dry_run = dry_run or config.commit.dry_run
		single_commit = single or (config.commit.default_mode == "single" and not smart)

		status = repo.status()
		if staged and not status.staged:
			exit_with_error("Nothing staged to commit")
		if not staged and not status.has_changes and not status.staged:
			console.print("Nothing to commit")
			return

		llm_config = config.llm
		if provider:
			llm_config = llm_config.model_copy(update={"provider": provider})
		planner = Planner(repo, create_provider(llm_config), repo_config, config.commit)

		try:
			with loading_spinner("Planning commits..."):
				outcome = planner.plan(PlanOptions(staged_only=staged, single_commit=single_commit))
		except NoChangesError:
			console.print("Nothing to commit")
			return

		if not outcome.result.valid or outcome.plan is None:
			console.print("[red]The proposed plan is invalid:[/red]")
			for issue in outcome.result.issues:
				console.print(f"  - {issue}", markup=False)
			raise typer.Exit(1)

		plan, removed = filter_sensitive_files(outcome.plan)
		if removed:
			show_warning("Sensitive files were left out of the plan:\n" + "\n".join(f"  - {f}" for f in removed))
		if not plan.commits:
			exit_with_error("All changes were filtered out.")
		if outcome.merged:
			console.print("[yellow]Commits sharing files were merged; review the plan below.[/yellow]")
		elif outcome.repaired:
			console.print("[yellow]The proposed plan was adjusted; review it below.[/yellow]")

		console.print(preview_plan(plan), markup=False, highlight=False)
		console.print()

		if not (yes or is_dry_run):
			confirmed = questionary.confirm("Create these commits?", default=True).ask()
			if not confirmed:
				console.print("Aborted.")
				return

		def report(position: int, total: int, planned: PlannedCommit) -> None:
			console.print(f"[{position}/{total}] {planned.full_message}", markup=False, highlight=False)

		executed = PlanExecutor(repo, dry_run=is_dry_run).execute(plan, progress=report)
		console.print(f"[green]{summarize_execution(executed, dry_run=is_dry_run)}[/green]")

	except KeyboardInterrupt:
		handle_keyboard_interrupt()
	except (ExecutionError, NothingExecutedError) as e:
		exit_with_error(str(e), exception=e)
	except (GitError, LLMError, ConfigError, ValueError) as e:
		exit_with_error(f"Commit failed: {e}", exception=e)
