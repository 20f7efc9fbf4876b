"""Tests for logging setup and summaries."""

from __future__ import annotations

import io
import logging
from typing import TYPE_CHECKING

import pytest
from rich.console import Console
from rich.logging import RichHandler

from semcommit.utils import log_setup
from semcommit.utils.log_setup import NOISY_LOGGERS, display_error_summary, display_warning_summary, setup_logging

if TYPE_CHECKING:
	from collections.abc import Iterator
	from pathlib import Path


@pytest.fixture
def clean_root_logger() -> Iterator[logging.Logger]:
	"""Restore the root logger's handlers and level after the test."""
	root = logging.getLogger()
	handlers, level = root.handlers[:], root.level
	yield root
	for handler in root.handlers[:]:
		if handler not in handlers:
			handler.close()
		root.removeHandler(handler)
	for handler in handlers:
		root.addHandler(handler)
	root.setLevel(level)


@pytest.mark.unit
class TestSetupLogging:
	"""Test cases for setup_logging."""

	def test_default_is_quiet(self, clean_root_logger: logging.Logger) -> None:
		"""Without verbose only warnings reach the console."""
		setup_logging()

		assert clean_root_logger.level == logging.WARNING
		assert len(clean_root_logger.handlers) == 1
		assert isinstance(clean_root_logger.handlers[0], RichHandler)
		for name in NOISY_LOGGERS:
			assert logging.getLogger(name).level == logging.ERROR

	def test_verbose(self, clean_root_logger: logging.Logger) -> None:
		"""Verbose mode logs debug output, including library loggers."""
		setup_logging(is_verbose=True)

		assert clean_root_logger.level == logging.DEBUG
		assert logging.getLogger("litellm").level == logging.DEBUG

	def test_repeated_setup_does_not_duplicate(self, clean_root_logger: logging.Logger) -> None:
		"""Calling setup twice keeps a single console handler."""
		setup_logging()
		setup_logging()

		assert len(clean_root_logger.handlers) == 1

	@pytest.mark.fs
	def test_file_logging(self, clean_root_logger: logging.Logger, tmp_path: Path) -> None:
		"""Debug records go to the log file."""
		log_file = tmp_path / "logs" / "run.log"

		setup_logging(is_verbose=True, log_to_console=False, log_file_path=log_file)
		logging.getLogger("semcommit.test").debug("planning started")
		for handler in clean_root_logger.handlers:
			handler.flush()

		assert [type(h) for h in clean_root_logger.handlers] == [logging.FileHandler]
		assert "planning started" in log_file.read_text(encoding="utf-8")


@pytest.mark.unit
class TestSummaries:
	"""Error and warning summaries."""

	@pytest.fixture
	def output(self, monkeypatch: pytest.MonkeyPatch) -> io.StringIO:
		"""Capture the shared console."""
		buffer = io.StringIO()
		monkeypatch.setattr(log_setup, "console", Console(file=buffer, width=80))
		return buffer

	def test_error_summary(self, output: io.StringIO) -> None:
		"""Errors are framed by a titled rule and printed verbatim."""
		display_error_summary("bad [red]value[/red]")

		text = output.getvalue()
		assert "Error Summary" in text
		assert "bad [red]value[/red]" in text

	def test_warning_summary(self, output: io.StringIO) -> None:
		"""Warnings use their own title."""
		display_warning_summary("check this")

		text = output.getvalue()
		assert "Warning Summary" in text
		assert "check this" in text
