"""Command-line interface package for semcommit."""

from __future__ import annotations

import datetime
import logging
import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv

from semcommit import __version__
from semcommit.config.config_loader import USER_ENV_FILE
from semcommit.utils.log_setup import setup_logging

from .commit_cmd import register_command as register_commit_command
from .diff_cmd import register_command as register_diff_command
from .init_cmd import register_command as register_init_command
from .rebase_cmd import register_command as register_rebase_command
from .reverse_cmd import register_command as register_reverse_command

logger = logging.getLogger(__name__)

# .env.local wins over .env; the per-user file only fills gaps
env_local = Path(".env.local")
if env_local.exists():
	load_dotenv(dotenv_path=env_local)
	logger.debug("Loaded environment variables from %s", env_local)
else:
	env_file = Path(".env")
	if env_file.exists():
		load_dotenv(dotenv_path=env_file)
		logger.debug("Loaded environment variables from %s", env_file)
if USER_ENV_FILE.exists():
	load_dotenv(dotenv_path=USER_ENV_FILE)

app = typer.Typer(
	help=f"semcommit - AI-assisted conventional commits for git\n\nVersion: {__version__}",
	no_args_is_help=True,
	context_settings={"help_option_names": ["-h", "--help"]},
)


def _version_callback(value: bool) -> None:
	"""Callback for --version option."""
	if value:
		typer.echo(f"semcommit version: {__version__}")
		raise typer.Exit


@app.callback(invoke_without_command=True)
def global_options(
	ctx: typer.Context,
	is_verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose logging.")] = False,
	is_output_log: Annotated[
		bool,
		typer.Option(
			"--save-log",
			help="Enable logging to a file. Logs to logs/semcommit_{datetime}.log.",
		),
	] = False,
	_version: Annotated[
		bool | None,
		typer.Option("--version", help="Show version and exit.", callback=_version_callback, is_eager=True),
	] = None,
) -> None:
	"""Global CLI options and logging setup."""
	ctx.meta["is_verbose"] = is_verbose
	ctx.meta["is_output_log"] = is_output_log

	log_file_path_to_use: Path | None = None
	if is_output_log:
		current_time = datetime.datetime.now(tz=datetime.UTC).strftime("%Y-%m-%d_%H-%M-%S")
		log_file_path_to_use = Path("logs") / f"semcommit_{current_time}.log"

	setup_logging(is_verbose=is_verbose or is_output_log, log_file_path=log_file_path_to_use)


register_commit_command(app)
register_reverse_command(app)
register_rebase_command(app)
register_diff_command(app)
register_init_command(app)


def main() -> int:
	"""Run the CLI application."""
	return app()


if __name__ == "__main__":
	sys.exit(main())
