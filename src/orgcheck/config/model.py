"""Config data model for orgcheck runs."""

from __future__ import annotations

from dataclasses import dataclass

from orgcheck.constants.config import (
    DEFAULT_CODE_TASKS,
    DEFAULT_CONCURRENCY,
    DEFAULT_EXEMPT_TOPICS,
    DEFAULT_REQUIRED_TASKS,
    DEFAULT_RUN_TIMEOUT_SECONDS,
    DEFAULT_STANDARD_PHASE,
)
from orgcheck.model import StandardVersion
from orgcheck.types import ApiConfig, ExemptionPolicy, RemediationConfig


@dataclass(frozen=True)
class OrgcheckConfig:
    """Resolved run config."""

    organization: str = ""
    standard_phase: int = DEFAULT_STANDARD_PHASE
    concurrency: int = DEFAULT_CONCURRENCY
    run_timeout_seconds: float = DEFAULT_RUN_TIMEOUT_SECONDS
    exempt_repositories: tuple[str, ...] = ()
    exempt_topics: tuple[str, ...] = DEFAULT_EXEMPT_TOPICS
    exempt_archived: bool = True
    include_forks: bool = False
    required_tasks: tuple[str, ...] = DEFAULT_REQUIRED_TASKS
    code_tasks: tuple[str, ...] = DEFAULT_CODE_TASKS
    disabled_rules: tuple[str, ...] = ()
    api: ApiConfig = ApiConfig()
    remediation: RemediationConfig = RemediationConfig()

    @property
    def standard(self) -> StandardVersion:
        """Standard version evaluated by this config."""
        return StandardVersion(
            phase=self.standard_phase,
            required_tasks=self.required_tasks,
            code_tasks=self.code_tasks,
        )

    @property
    def exemptions(self) -> ExemptionPolicy:
        """Exemption policy applied by the repository enumerator."""
        return ExemptionPolicy(
            repositories=self.exempt_repositories,
            topics=self.exempt_topics,
            archived=self.exempt_archived,
            include_forks=self.include_forks,
        )
