"""Prompts for commit planning."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from semcommit.schemas import AnalysisRequest, FileChange

logger = logging.getLogger(__name__)

# Bump whenever PLAN_SYSTEM_PROMPT or PLAN_USER_TEMPLATE changes
PLAN_PROMPT_VERSION = "plan-v1"

PLAN_SYSTEM_PROMPT = """You are a git commit message generator. Analyze the provided code changes and create semantic commits.

RULES:

TYPE SELECTION:
1. docs: ONLY for documentation files (.md, .txt, .rst, README, CHANGELOG, LICENSE). Code files are NEVER docs.
2. feat: Changes that affect APPLICATION BEHAVIOR or user experience:
   - App code: new features, UI changes, CLI args, API endpoints
   - Terraform/IaC: new resources, new policies, changed configurations
   - HTML/templates: changes to markup affect what users see (NOT refactoring)
   - Anything that changes what gets deployed or how it behaves
3. fix: Corrects incorrect/broken behavior in the application
4. refactor: ONLY pure restructuring with IDENTICAL behavior - examples:
   - Moving code/resources between files
   - Extracting duplicated logic into a shared service class
   - Renaming variables/functions for clarity
   If the system does ANYTHING different after the change, it is NOT refactor.
5. chore: General-purpose type for non-application changes. Also the FALLBACK when no other type fits or when a preferred type is not allowed:
   - CI/CD pipeline changes, GitHub Actions, build scripts
   - Dependency updates, linting configs, dev tooling
   - Catch-all for maintenance work that does not fit other categories
6. Always bundle test files with their corresponding feature or fix - never separate tests from implementation
7. Only use "test" type for standalone tests with no corresponding implementation changes; if "test" is not allowed, use "chore"

TYPE SUBSTITUTION (when your preferred type is not in the allowed list):
The allowed types list is ABSOLUTE. If your natural choice is not in the list, substitute:
  refactor → chore (describe the restructuring in the message)
  style    → chore (describe the formatting in the message)
  perf     → feat  (describe the optimization in the message)
  test     → chore (describe the test changes in the message)
  any other → chore (chore is the general fallback)
When substituting, preserve intent in the commit message so the change is clear.

GROUPING:
8. Each commit should represent a single logical change
9. Group related file changes together

SCOPE:
10. The scope after → is the pre-computed MOST SPECIFIC scope for each file - use it exactly as shown
11. Do not substitute a more general scope even if it also matches the file path
12. If hasScopes is true, include scope in format "type(scope): message"
13. If hasScopes is false, use format "type: message"

MESSAGE FORMAT:
14. Use conventional commit format: "type(scope): message"
15. Message must be lowercase, imperative mood, no period at end
16. Message must not exceed the specified max length

OUTPUT FORMAT:
Return a JSON object with a "commits" array. Each commit has:
- type: commit type (ONLY use types from the allowed list)
- scope: scope name or null if no scope
- message: the commit message (without type/scope prefix)
- files: array of file paths included in this commit
- reasoning: brief explanation of why this grouping

Example responses:
{
  "commits": [
    {
      "type": "feat",
      "scope": "auth",
      "message": "add logout functionality",
      "files": ["src/auth/logout.ts"],
      "reasoning": "New file adding logout behavior"
    }
  ]
}

{
  "commits": [
    {
      "type": "chore",
      "scope": "utils",
      "message": "reorganize helper functions for clarity",
      "files": ["src/utils/helpers.ts"],
      "reasoning": "Refactoring work - using chore since refactor not allowed"
    }
  ]
}"""

PLAN_USER_TEMPLATE = """Analyze these changes and create semantic commits:

FILES (path [status] diff_summary → assigned_scope):
{files}

DIFF:
{diff}

RECENT COMMITS (for style reference):
{recent_commits}

RULES:
- ALLOWED TYPES (use ONLY these, substituting per rules above): {types}
- Max message length: {max_length} characters
- Has scopes: {has_scopes}
- Behavioral test: {behavioral_test}{single_commit_rule}

Return JSON only, no markdown code blocks."""

SINGLE_COMMIT_RULE = "\n- IMPORTANT: Create exactly ONE commit containing ALL files"


def format_files(files: list[FileChange]) -> str:
	"""Render one ``- path [status] summary → scope`` line per file."""
	lines = []
	for change in files:
		status = change.status.value if change.status is not None else ""
		lines.append(f"- {change.path} [{status}] {change.diff_summary} → {change.scope or '(no scope)'}\n")
	return "".join(lines)


def format_commits(subjects: list[str]) -> str:
	"""Render recent subjects as a bullet list."""
	if not subjects:
		return "(no recent commits)"
	return "".join(f"- {subject}\n" for subject in subjects)


def format_types(types: list[str]) -> str:
	"""Join commit types with `` | ``."""
	return " | ".join(types)


def build_prompt(request: AnalysisRequest) -> tuple[str, str]:
	"""
	Build the system and user prompts for commit planning.

	Args:
	    request: Files, diff, history and rules to plan over

	Returns:
	    ``(system, user)`` prompt pair

	"""
	user = PLAN_USER_TEMPLATE.format(
		files=format_files(request.files),
		diff=request.diff,
		recent_commits=format_commits(request.recent_commits),
		types=format_types(request.rules.types),
		max_length=request.rules.max_message_length,
		has_scopes=str(request.has_scopes).lower(),
		behavioral_test=request.rules.behavioral_test,
		single_commit_rule=SINGLE_COMMIT_RULE if request.single_commit else "",
	)
	logger.debug(
		"Built planning prompt %s: %d files, %d user chars",
		PLAN_PROMPT_VERSION,
		len(request.files),
		len(user),
	)
	return PLAN_SYSTEM_PROMPT, user
