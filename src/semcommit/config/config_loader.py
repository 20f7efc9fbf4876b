"""
Configuration loader for semcommit.

This module resolves and parses the YAML application configuration, applies
environment overrides, and looks up provider credentials.

"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from xdg.BaseDirectory import xdg_config_home

from semcommit.config.config_schema import SUPPORTED_PROVIDERS, AppConfigSchema

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = "semcommit"
LOCAL_CONFIG_FILE = ".semcommit.yml"
USER_ENV_FILE = Path.home() / ".semcommit" / ".env"

API_KEY_ENV_VARS: dict[str, str] = {
	"openai": "OPENAI_API_KEY",
	"anthropic": "ANTHROPIC_API_KEY",
	"gemini": "GEMINI_API_KEY",
	"grok": "XAI_API_KEY",
	"azure": "AZURE_API_KEY",
}

TRUTHY_VALUES = ("1", "true", "yes", "on")


class ConfigError(Exception):
	"""Exception raised for configuration errors."""


class ConfigParsingError(ConfigError):
	"""Exception raised when a configuration file cannot be parsed."""


class RepoConfigError(ConfigError):
	"""Exception raised when the repository configuration is invalid."""


class ProviderNotConfiguredError(ConfigError):
	"""No usable LLM provider is configured."""

	def __init__(self, provider: str | None = None) -> None:
		"""Initialize the error, naming the rejected provider if there was one."""
		self.provider = provider
		supported = ", ".join(SUPPORTED_PROVIDERS)
		if provider:
			message = f"unsupported provider: {provider} (expected one of: {supported})"
		else:
			message = (
				f"no LLM provider configured; set llm.provider in {LOCAL_CONFIG_FILE} "
				f"or SEMCOMMIT_PROVIDER to one of: {supported}"
			)
		super().__init__(message)


class MissingAPIKeyError(ConfigError):
	"""The API key for the configured provider is not set."""

	def __init__(self, provider: str, env_var: str) -> None:
		"""Initialize the error with the provider and the variable that should hold its key."""
		self.provider = provider
		self.env_var = env_var
		super().__init__(f"missing API key for {provider}: set {env_var}")


class ConfigLoader:
	"""
	Loads and manages configuration for semcommit using Pydantic schemas.

	Values come from the first configuration file found, then environment
	overrides are applied on top.

	"""

	_instance: ConfigLoader | None = None

	@classmethod
	def get_instance(cls, config_file: Path | None = None, reload: bool = False) -> ConfigLoader:
		"""
		Get the singleton instance of ConfigLoader.

		Args:
		    config_file: Path to configuration file (optional)
		    reload: Whether to reload config even if already loaded

		Returns:
		    ConfigLoader: Singleton instance

		"""
		if cls._instance is None:
			cls._instance = cls(config_file)
		elif reload:
			cls._instance.reload_config(config_file)
		return cls._instance

	@classmethod
	def reset_instance(cls) -> None:
		"""Forget the singleton; the next ``get_instance`` loads afresh."""
		cls._instance = None

	def __init__(self, config_file: Path | None = None) -> None:
		"""
		Initialize the configuration loader.

		Args:
		    config_file: Path to configuration file (optional)

		"""
		self._config_file = config_file
		self._resolved_config_file = self._resolve_config_file(config_file)
		self._app_config = self._load_config()

	def reload_config(self, config_file: Path | None = None) -> None:
		"""Reload configuration, optionally from a different file."""
		if config_file is not None:
			self._config_file = config_file
		self._resolved_config_file = self._resolve_config_file(self._config_file)
		self._app_config = self._load_config()
		logger.debug("Configuration reloaded")

	@property
	def config_file(self) -> Path | None:
		"""The configuration file in use, if any."""
		return self._resolved_config_file

	def _resolve_config_file(self, config_file: Path | None = None) -> Path | None:
		"""
		Resolve the configuration file path.

		If a config file is specified, use that. Otherwise, look in standard locations:
		1. ./.semcommit.yml in the current directory
		2. $XDG_CONFIG_HOME/semcommit/config.yml
		3. ~/.semcommit/config.yml

		Args:
		    config_file: Explicitly provided config file path (optional)

		Returns:
		    Resolved config file path or None if no suitable file found

		"""
		if config_file:
			path = config_file.expanduser().resolve()
			if not path.exists():
				logger.warning("Specified config file not found: %s", path)
			return path

		local_config = Path(LOCAL_CONFIG_FILE)
		if local_config.exists():
			return local_config

		xdg_config_file = Path(xdg_config_home) / CONFIG_DIR_NAME / "config.yml"
		if xdg_config_file.exists():
			return xdg_config_file

		home_config = Path.home() / ".semcommit" / "config.yml"
		if home_config.exists():
			return home_config

		return None

	@staticmethod
	def _parse_yaml_file(file_path: Path) -> dict[str, Any]:
		"""
		Parse a YAML file into a dictionary.

		Raises:
		    yaml.YAMLError: If the file is not valid YAML or not a mapping

		"""
		with file_path.open(encoding="utf-8") as f:
			content = yaml.safe_load(f)
			if content is None:
				return {}
			if not isinstance(content, dict):
				msg = f"File {file_path} does not contain a valid YAML dictionary"
				raise yaml.YAMLError(msg)
			return content

	def _load_config(self) -> AppConfigSchema:
		"""
		Load configuration from file and environment into AppConfigSchema.

		Raises:
		    ConfigParsingError: If the file exists but cannot be read, parsed or validated

		"""
		file_config: dict[str, Any] = {}
		if self._resolved_config_file and self._resolved_config_file.exists():
			try:
				file_config = self._parse_yaml_file(self._resolved_config_file)
				logger.debug("Loaded configuration from %s", self._resolved_config_file)
			except yaml.YAMLError as e:
				msg = f"Configuration file {self._resolved_config_file} does not contain a valid YAML dictionary."
				raise ConfigParsingError(msg) from e
			except OSError as e:
				msg = f"Error accessing configuration file {self._resolved_config_file}: {e}"
				raise ConfigParsingError(msg) from e
		else:
			logger.debug("No configuration file found. Using default configuration.")

		self._apply_env_overrides(file_config)

		try:
			return AppConfigSchema(**file_config)
		except ValidationError as e:
			msg = f"Error parsing configuration into schema: {e}"
			raise ConfigParsingError(msg) from e

	@staticmethod
	def _apply_env_overrides(config: dict[str, Any]) -> None:
		llm = config.setdefault("llm", {}) or {}
		commit = config.setdefault("commit", {}) or {}
		config["llm"], config["commit"] = llm, commit

		if provider := os.environ.get("SEMCOMMIT_PROVIDER"):
			llm["provider"] = provider
		if model := os.environ.get("SEMCOMMIT_MODEL"):
			llm["model"] = model
		if dry_run := os.environ.get("SEMCOMMIT_DRY_RUN"):
			commit["dry_run"] = dry_run.strip().lower() in TRUTHY_VALUES
		if mode := os.environ.get("SEMCOMMIT_DEFAULT_MODE"):
			commit["default_mode"] = mode.strip().lower()

	@property
	def get(self) -> AppConfigSchema:
		"""
		Get the current application configuration.

		Returns:
		    AppConfigSchema: The current configuration

		"""
		return self._app_config


def resolve_provider(provider: str | None) -> str:
	"""
	Check that ``provider`` names a supported provider.

	Raises:
	    ProviderNotConfiguredError: If it is empty or unknown

	"""
	if not provider:
		raise ProviderNotConfiguredError
	name = provider.strip().lower()
	if name not in SUPPORTED_PROVIDERS:
		raise ProviderNotConfiguredError(provider)
	return name


def get_api_key(provider: str) -> str:
	"""
	Read the API key for ``provider`` from the environment.

	Raises:
	    MissingAPIKeyError: If the variable is unset or empty

	"""
	env_var = API_KEY_ENV_VARS[provider]
	key = os.environ.get(env_var, "").strip()
	if not key:
		raise MissingAPIKeyError(provider, env_var)
	return key
