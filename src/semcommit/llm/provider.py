"""Provider interface the planner and diff analyzer talk to."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from semcommit.schemas import AnalysisRequest, CommitPlan


class Provider(ABC):
	"""A language model that can plan commits and answer free-form prompts."""

	@property
	@abstractmethod
	def name(self) -> str:
		"""Provider name used in messages and errors."""

	@property
	@abstractmethod
	def model(self) -> str:
		"""Model identifier requests are sent to."""

	@abstractmethod
	def analyze(self, request: AnalysisRequest) -> CommitPlan:
		"""
		Ask the model to partition the changes in ``request`` into commits.

		Raises:
		    ProviderError: If the request fails or the reply cannot be parsed

		"""

	@abstractmethod
	def analyze_diff(self, system: str, user: str) -> str:
		"""
		Send a free-form system and user prompt and return the reply text.

		Raises:
		    ProviderError: If the request fails or the reply is empty

		"""
