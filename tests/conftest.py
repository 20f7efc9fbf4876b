"""Global test fixtures and configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from semcommit.config.config_loader import ConfigLoader

if TYPE_CHECKING:
	from collections.abc import Iterator
	from pathlib import Path

ENV_VARS = (
	"SEMCOMMIT_PROVIDER",
	"SEMCOMMIT_MODEL",
	"SEMCOMMIT_DRY_RUN",
	"SEMCOMMIT_DEFAULT_MODE",
	"OPENAI_API_KEY",
	"ANTHROPIC_API_KEY",
	"GEMINI_API_KEY",
	"XAI_API_KEY",
	"AZURE_API_KEY",
	"AZURE_API_BASE",
)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
	"""
	Keep user configuration and credentials out of every test.

	HOME and the XDG config directory point at an empty directory and the
	configuration singleton is reset around each test.
	"""
	home = tmp_path_factory.mktemp("home")
	monkeypatch.setenv("HOME", str(home))
	monkeypatch.setattr("semcommit.config.config_loader.xdg_config_home", str(home / ".config"))
	for name in ENV_VARS:
		monkeypatch.delenv(name, raising=False)
	ConfigLoader.reset_instance()
	yield home
	ConfigLoader.reset_instance()
