"""Schemas for the semcommit application configuration."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

SUPPORTED_PROVIDERS: tuple[str, ...] = ("openai", "anthropic", "gemini", "grok", "azure")


class LLMSchema(BaseModel):
	"""Provider and request settings for the language model."""

	provider: str | None = None
	model: str | None = None
	api_base: str | None = None
	temperature: float = 0.3
	max_output_tokens: int = 8192
	timeout: float = 60.0
	max_attempts: int = Field(default=3, ge=1)
	initial_backoff: float = 0.5


class CommitSchema(BaseModel):
	"""Settings for commit planning and execution."""

	dry_run: bool = False
	default_mode: Literal["smart", "single"] = "smart"
	max_message_length: int = Field(default=50, gt=3)
	max_diff_chars: int = Field(default=4000, gt=0)
	recent_commit_count: int = Field(default=10, ge=0)
	behavioral_test: str = "feat = behavior change, refactor = same behavior different structure"


class RebaseSchema(BaseModel):
	"""Settings for the interactive rebase wizard."""

	initial_commit_count: int = Field(default=20, gt=0)
	load_more_count: int = Field(default=20, gt=0)


class AppConfigSchema(BaseModel):
	"""Top-level application configuration."""

	llm: LLMSchema = Field(default_factory=LLMSchema)
	commit: CommitSchema = Field(default_factory=CommitSchema)
	rebase: RebaseSchema = Field(default_factory=RebaseSchema)
