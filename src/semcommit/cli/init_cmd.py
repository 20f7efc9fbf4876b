"""Command for creating a repository commit configuration."""

from __future__ import annotations

import logging

import typer

logger = logging.getLogger(__name__)


def register_command(app: typer.Typer) -> None:
	"""Register the init command with the CLI app."""

	@app.command(name="init")
	def init_command() -> None:
		"""Write a template .commit.json into the repository root."""
		_init_command_impl()


def _init_command_impl() -> None:
	"""Actual implementation of the init command."""
	from semcommit.config.repo_config import REPO_CONFIG_FILE, create_default_repo_config
	from semcommit.git.utils import GitError, get_repo_root
	from semcommit.utils.cli_utils import exit_with_error
	from semcommit.utils.log_setup import console

	try:
		repo_root = get_repo_root()
		config_path = repo_root / REPO_CONFIG_FILE
		if create_default_repo_config(repo_root):
			console.print(f"[green]Created {config_path}[/green]")
		else:
			console.print(f"{config_path} already exists; left unchanged.")
	except GitError as e:
		exit_with_error(f"Init failed: {e}", exception=e)
	except OSError as e:
		exit_with_error(f"Could not write {REPO_CONFIG_FILE}: {e}", exception=e)
