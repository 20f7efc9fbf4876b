"""Command for explaining the changes made to a single file."""

from __future__ import annotations

import logging
from typing import Annotated

import typer

logger = logging.getLogger(__name__)

FileArg = Annotated[str, typer.Argument(help="File to analyze, relative to the repository root")]

FromOption = Annotated[str, typer.Option("--from", help="Start of the range (default: HEAD)")]

ToOption = Annotated[str, typer.Option("--to", help="End of the range (default: working copy)")]

ProviderOption = Annotated[
	str | None,
	typer.Option("--provider", help="LLM provider (openai, anthropic, gemini, grok, azure)"),
]


def register_command(app: typer.Typer) -> None:
	"""Register the diff command with the CLI app."""

	@app.command(name="diff")
	def diff_command(
		file: FileArg,
		from_ref: FromOption = "",
		to_ref: ToOption = "",
		provider: ProviderOption = None,
	) -> None:
		"""Explain what changed in FILE between two refs."""
		_diff_command_impl(file_path=file, from_ref=from_ref, to_ref=to_ref, provider=provider)


def _diff_command_impl(file_path: str, from_ref: str, to_ref: str, provider: str | None) -> None:
	"""Actual implementation of the diff command."""
	from rich.markdown import Markdown

	from semcommit.analyzer.diff import NO_CHANGES_MESSAGE, DiffAnalyzer, build_diff_request, get_diff
	from semcommit.config.config_loader import ConfigError, ConfigLoader
	from semcommit.git.repository import GitRepository
	from semcommit.git.utils import GitError
	from semcommit.llm.errors import LLMError
	from semcommit.llm.litellm_provider import create_provider
	from semcommit.utils.cli_utils import exit_with_error, handle_keyboard_interrupt, loading_spinner
	from semcommit.utils.log_setup import console

	try:
		repo = GitRepository.discover()
		result = get_diff(repo, build_diff_request(file_path, from_ref, to_ref))
		if not result.diff:
			console.print(NO_CHANGES_MESSAGE)
			return

		llm_config = ConfigLoader.get_instance().get.llm
		if provider:
			llm_config = llm_config.model_copy(update={"provider": provider})
		analyzer = DiffAnalyzer(repo, create_provider(llm_config))

		with loading_spinner(f"Analyzing {file_path}..."):
			explanation = analyzer.explain(result)
		console.print(Markdown(explanation))

	except KeyboardInterrupt:
		handle_keyboard_interrupt()
	except (GitError, LLMError, ConfigError) as e:
		exit_with_error(f"Diff analysis failed: {e}", exception=e)
