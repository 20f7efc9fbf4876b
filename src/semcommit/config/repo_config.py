"""Repository-scoped settings read from ``.commit.json``."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from semcommit.config.config_loader import RepoConfigError
from semcommit.schemas import DEFAULT_COMMIT_TYPES

logger = logging.getLogger(__name__)

REPO_CONFIG_FILE = ".commit.json"


class ScopeConfig(BaseModel):
	"""Maps a directory prefix to a commit scope."""

	path: str
	scope: str


class CommitTypeConfig(BaseModel):
	"""Whitelist or blacklist of commit types; no mode means the default set."""

	mode: Literal["whitelist", "blacklist"] | None = None
	types: list[str] = Field(default_factory=list)


class RepoConfig(BaseModel):
	"""Contents of ``.commit.json``."""

	model_config = ConfigDict(populate_by_name=True)

	scopes: list[ScopeConfig] = Field(default_factory=list)
	default_scope: str | None = Field(default=None, alias="defaultScope")
	commit_types: CommitTypeConfig = Field(default_factory=CommitTypeConfig, alias="commitTypes")

	@property
	def has_scopes(self) -> bool:
		"""Whether any scope mapping is defined."""
		return bool(self.scopes)

	def _uses_defaults(self) -> bool:
		return self.commit_types.mode is None or not self.commit_types.types

	def allowed_types(self) -> list[str]:
		"""Commit types the planner may use."""
		if self._uses_defaults():
			return list(DEFAULT_COMMIT_TYPES)
		if self.commit_types.mode == "whitelist":
			return list(self.commit_types.types)
		return [t for t in DEFAULT_COMMIT_TYPES if t not in self.commit_types.types]

	def is_type_allowed(self, commit_type: str) -> bool:
		"""Check ``commit_type`` against the type policy."""
		if self._uses_defaults():
			return commit_type in DEFAULT_COMMIT_TYPES
		listed = commit_type in self.commit_types.types
		if self.commit_types.mode == "whitelist":
			return listed
		return not listed

	def resolve_scope(self, file_path: str) -> str:
		"""
		Pick the scope for ``file_path``.

		The longest matching prefix wins; without a match the default scope is
		used, and without that the empty string.
		"""
		normalized = file_path.replace("\\", "/")
		for entry in sorted(self.scopes, key=lambda s: len(s.path), reverse=True):
			if normalized.startswith(entry.path):
				return entry.scope
		return self.default_scope or ""


def _normalize(config: RepoConfig) -> RepoConfig:
	seen: set[str] = set()
	for entry in config.scopes:
		path = entry.path.replace("\\", "/")
		if not path.endswith("/"):
			path += "/"
		if path in seen:
			msg = f"duplicate scope path: {path}"
			raise RepoConfigError(msg)
		seen.add(path)
		if not entry.scope:
			msg = f"scope name cannot be empty for path: {entry.path}"
			raise RepoConfigError(msg)
		entry.path = path

	if config.commit_types.mode is not None and config.commit_types.types and not config.allowed_types():
		msg = "commit type policy leaves no allowed types"
		raise RepoConfigError(msg)
	return config


def load_repo_config(repo_root: Path) -> RepoConfig:
	"""
	Load ``.commit.json`` from ``repo_root``.

	A missing file yields the default configuration.

	Raises:
	    RepoConfigError: If the file cannot be read, parsed or validated

	"""
	config_path = repo_root / REPO_CONFIG_FILE
	if not config_path.exists():
		logger.debug("No %s in %s, using defaults", REPO_CONFIG_FILE, repo_root)
		return RepoConfig()

	try:
		data = json.loads(config_path.read_text(encoding="utf-8"))
	except OSError as e:
		msg = f"failed to read repo config: {e}"
		raise RepoConfigError(msg) from e
	except json.JSONDecodeError as e:
		msg = f"failed to parse repo config: {e}"
		raise RepoConfigError(msg) from e

	try:
		config = RepoConfig.model_validate(data)
	except ValidationError as e:
		msg = f"invalid repo config {config_path}: {e}"
		raise RepoConfigError(msg) from e
	return _normalize(config)


def create_default_repo_config(repo_root: Path) -> bool:
	"""
	Write a template ``.commit.json`` into ``repo_root``.

	Returns:
	    False if a file already existed and was left alone, True otherwise

	"""
	config_path = repo_root / REPO_CONFIG_FILE
	if config_path.exists():
		return False

	template = RepoConfig(
		commit_types=CommitTypeConfig(mode="whitelist", types=list(DEFAULT_COMMIT_TYPES)),
	)
	payload = template.model_dump(by_alias=True)
	config_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
	logger.debug("Wrote %s", config_path)
	return True
