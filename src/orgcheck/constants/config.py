"""Configuration defaults and filenames."""

from __future__ import annotations

CONFIG_FILENAME: str = "orgcheck.yaml"

DEFAULT_STANDARD_PHASE: int = 3
VALID_STANDARD_PHASES: frozenset[int] = frozenset({1, 2, 3})

DEFAULT_CONCURRENCY: int = 8
DEFAULT_RUN_TIMEOUT_SECONDS: float = 600.0

DEFAULT_EXEMPT_TOPICS: tuple[str, ...] = ("documentation-only",)
DEFAULT_REQUIRED_TASKS: tuple[str, ...] = ("lint", "fmt")
DEFAULT_CODE_TASKS: tuple[str, ...] = ("test",)

DEFAULT_TOKEN_ENV: str = "GITHUB_TOKEN"
DEFAULT_BRANCH_PREFIX: str = "orgcheck"
DEFAULT_BOT_NAME: str = "orgcheck-bot"
DEFAULT_BOT_EMAIL: str = "orgcheck-bot@users.noreply.github.com"

TASK_NAME_PATTERN: str = r"^[a-z][a-z0-9:_-]*$"
