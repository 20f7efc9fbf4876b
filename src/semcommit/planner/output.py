"""Human-readable rendering of commit plans and results."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from semcommit.schemas import CommitPlan, ExecutedCommit


def _plural(count: int, noun: str) -> str:
	return f"{count} {noun}{'' if count == 1 else 's'}"


def preview_plan(plan: CommitPlan) -> str:
	"""
	Render ``plan`` for review before it is executed.

	Example:
	    2 commits planned

	    [1/2] feat(auth): add logout
	      └─ src/auth.py
	      add the logout endpoint

	"""
	if not plan.commits:
		return "No commits planned"

	total = len(plan.commits)
	lines = [f"{_plural(total, 'commit')} planned", ""]
	for index, commit in enumerate(plan.commits, start=1):
		lines.append(f"[{index}/{total}] {commit.full_message}")
		lines.extend(f"  └─ {path}" for path in commit.files)
		if commit.reasoning:
			lines.append(f"  {commit.reasoning}")
		lines.append("")
	return "\n".join(lines).rstrip("\n")


def summarize_execution(executed: list[ExecutedCommit], dry_run: bool = False) -> str:
	"""One-line outcome of an execution run."""
	if dry_run:
		return f"Would create {_plural(len(executed), 'commit')} (dry-run)"
	return f"Created {_plural(len(executed), 'commit')}"
