"""Provider implementation backed by LiteLLM."""

from __future__ import annotations

import logging
import os
import threading
from typing import TYPE_CHECKING, Any

from litellm import completion
from litellm.exceptions import APIConnectionError, Timeout

from semcommit.config.config_loader import MissingAPIKeyError, get_api_key, resolve_provider
from semcommit.llm.errors import ProviderError
from semcommit.llm.prompts import build_prompt
from semcommit.llm.provider import Provider
from semcommit.llm.response import TRUNCATED_FINISH_REASON, process_plan_response, process_text_response

if TYPE_CHECKING:
	from semcommit.config.config_schema import LLMSchema
	from semcommit.schemas import AnalysisRequest, CommitPlan

logger = logging.getLogger(__name__)

# Provider name -> LiteLLM model prefix
MODEL_PREFIXES: dict[str, str] = {
	"openai": "openai",
	"anthropic": "anthropic",
	"gemini": "gemini",
	"grok": "xai",
	"azure": "azure",
}

DEFAULT_MODELS: dict[str, str] = {
	"openai": "gpt-4-turbo-preview",
	"anthropic": "claude-3-5-sonnet-20241022",
	"gemini": "gemini-1.5-pro",
	"grok": "grok-beta",
}

RETRYABLE_STATUS_CODES = frozenset({429, 502, 503, 504})


def is_retryable(error: BaseException) -> bool:
	"""Return True for rate limiting, gateway errors and transport failures."""
	if isinstance(error, APIConnectionError | Timeout):
		return True
	return getattr(error, "status_code", None) in RETRYABLE_STATUS_CODES


class LiteLLMProvider(Provider):
	"""
	Sends chat completions through ``litellm.completion``.

	Requests are retried on rate limiting, gateway errors and transport
	failures with exponential backoff. Backoff waits on the cancellation event,
	so cancelling stops the retry loop immediately.
	"""

	def __init__(
		self,
		provider: str,
		model: str,
		api_key: str,
		api_base: str | None = None,
		temperature: float = 0.3,
		max_output_tokens: int = 8192,
		timeout: float = 60.0,
		max_attempts: int = 3,
		initial_backoff: float = 0.5,
		cancel: threading.Event | None = None,
	) -> None:
		"""
		Initialize the provider.

		Args:
		    provider: Provider name, one of the supported providers
		    model: Model or deployment name without a LiteLLM prefix
		    api_key: Credential sent with each request
		    api_base: Endpoint override (required for Azure)
		    temperature: Sampling temperature
		    max_output_tokens: Completion token limit
		    timeout: Per-request timeout in seconds
		    max_attempts: Total attempts including the first
		    initial_backoff: Delay before the first retry, doubled each time
		    cancel: Event that aborts pending and future requests

		"""
		self._provider = provider
		self._model = model
		self.api_key = api_key
		self.api_base = api_base
		self.temperature = temperature
		self.max_output_tokens = max_output_tokens
		self.timeout = timeout
		self.max_attempts = max_attempts
		self.initial_backoff = initial_backoff
		self.cancel = cancel or threading.Event()

	@property
	def name(self) -> str:
		"""Provider name."""
		return self._provider

	@property
	def model(self) -> str:
		"""Model name as configured."""
		return self._model

	@property
	def litellm_model(self) -> str:
		"""Model string with the LiteLLM provider prefix."""
		return f"{MODEL_PREFIXES[self._provider]}/{self._model}"

	def _complete(self, system: str, user: str) -> tuple[str | None, bool]:
		"""Run one chat completion with retries; return the content and whether it was truncated."""
		messages = [
			{"role": "system", "content": system},
			{"role": "user", "content": user},
		]
		kwargs: dict[str, Any] = {
			"model": self.litellm_model,
			"messages": messages,
			"api_key": self.api_key,
			"temperature": self.temperature,
			"max_tokens": self.max_output_tokens,
			"timeout": self.timeout,
			"num_retries": 0,
		}
		if self.api_base:
			kwargs["api_base"] = self.api_base

		delay = self.initial_backoff
		for attempt in range(1, self.max_attempts + 1):
			if self.cancel.is_set():
				raise ProviderError(self.name, "request cancelled")

			logger.debug("Calling %s (attempt %d/%d)", self.litellm_model, attempt, self.max_attempts)
			try:
				response = completion(**kwargs)
			except Exception as e:
				if not is_retryable(e) or attempt == self.max_attempts:
					raise ProviderError(self.name, "request failed", e) from e
				logger.debug("Retryable error from %s: %s; retrying in %.1fs", self.name, e, delay)
				if self.cancel.wait(delay):
					raise ProviderError(self.name, "request cancelled") from e
				delay *= 2
				continue

			choices = getattr(response, "choices", None)
			if not choices:
				return None, False
			choice = choices[0]
			content = choice.message.content if choice.message is not None else None
			return content, choice.finish_reason == TRUNCATED_FINISH_REASON

		# max_attempts >= 1, so the loop always returns or raises
		raise ProviderError(self.name, "request failed")

	def analyze(self, request: AnalysisRequest) -> CommitPlan:
		"""Ask the model for a commit plan."""
		system, user = build_prompt(request)
		content, truncated = self._complete(system, user)
		return process_plan_response(self.name, content, truncated)

	def analyze_diff(self, system: str, user: str) -> str:
		"""Send free-form prompts and return the reply."""
		content, truncated = self._complete(system, user)
		return process_text_response(self.name, content, truncated)


def create_provider(config: LLMSchema, cancel: threading.Event | None = None) -> LiteLLMProvider:
	"""
	Build the provider described by ``config``.

	Args:
	    config: LLM section of the application configuration
	    cancel: Cancellation event shared with the caller

	Returns:
	    A ready provider

	Raises:
	    ProviderNotConfiguredError: If no supported provider is configured
	    MissingAPIKeyError: If the provider's credentials are missing

	"""
	provider = resolve_provider(config.provider)
	api_key = get_api_key(provider)

	api_base = config.api_base
	if provider == "azure":
		api_base = api_base or os.environ.get("AZURE_API_BASE")
		if not api_base:
			raise MissingAPIKeyError(provider, "AZURE_API_BASE")
		if not config.model:
			raise MissingAPIKeyError(provider, "SEMCOMMIT_MODEL")

	model = config.model or DEFAULT_MODELS[provider]
	logger.debug("Using provider %s with model %s", provider, model)
	return LiteLLMProvider(
		provider=provider,
		model=model,
		api_key=api_key,
		api_base=api_base,
		temperature=config.temperature,
		max_output_tokens=config.max_output_tokens,
		timeout=config.timeout,
		max_attempts=config.max_attempts,
		initial_backoff=config.initial_backoff,
		cancel=cancel,
	)
