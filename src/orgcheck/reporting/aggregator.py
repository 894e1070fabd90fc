"""Merge per-repository results into a deterministic compliance report."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from orgcheck.constants.reporting import OUTCOME_ORDER, SCHEMA_VERSION
from orgcheck.model import (
    ComplianceReport,
    EvaluationResult,
    RemediationOutcome,
    RepositoryRef,
    RepositoryReport,
)
from orgcheck.types import Outcome, RepositoryStatus


def repository_status(results: Iterable[EvaluationResult]) -> RepositoryStatus:
    """Collapse result outcomes into one repository status.

    Any failure wins, then any unknown, then any pass. A repository whose
    rules were all inapplicable (or that has no results yet) is
    ``inapplicable`` here; callers decide how to treat empty slots.
    """
    outcomes = {result.outcome for result in results}
    if "fail" in outcomes:
        return "fail"
    if "unknown" in outcomes:
        return "unknown"
    if "pass" in outcomes:
        return "pass"
    return "inapplicable"


class ReportAggregator:
    """Collects results keyed by repository; output never depends on arrival order."""

    def __init__(self, organization: str, phase: int) -> None:
        self.organization = organization
        self.phase = phase
        self._results: dict[str, tuple[EvaluationResult, ...] | None] = {}
        self._exempt: dict[str, bool] = {}

    def register(self, ref: RepositoryRef) -> None:
        """Reserve a slot so the repository is reported even without results."""
        self._results.setdefault(ref.full_name, None)
        self._exempt[ref.full_name] = ref.exempt

    def add_results(self, repository: str, results: Iterable[EvaluationResult]) -> None:
        self._results[repository] = tuple(sorted(results, key=lambda result: result.rule_id))
        self._exempt.setdefault(repository, False)

    def pending(self) -> tuple[str, ...]:
        """Registered repositories that have no results yet."""
        return tuple(sorted(name for name, results in self._results.items() if results is None))

    def build(
        self,
        *,
        duration_seconds: float = 0.0,
        warnings: Iterable[str] = (),
        remediations: Iterable[RemediationOutcome] = (),
        config_fingerprint: str = "",
    ) -> ComplianceReport:
        reports: list[RepositoryReport] = []
        for name in sorted(self._results):
            results = self._results[name]
            status: RepositoryStatus = "unknown" if results is None else repository_status(results)
            reports.append(
                RepositoryReport(
                    repository=name,
                    status=status,
                    results=results or (),
                    exempt=self._exempt.get(name, False),
                )
            )

        outcome_counts: Counter[Outcome] = Counter(result.outcome for report in reports for result in report.results)
        status_counts: Counter[RepositoryStatus] = Counter(report.status for report in reports)
        return ComplianceReport(
            organization=self.organization,
            phase=self.phase,
            repositories=tuple(reports),
            counts_by_outcome={key: outcome_counts.get(key, 0) for key in OUTCOME_ORDER},
            counts_by_status={key: status_counts.get(key, 0) for key in OUTCOME_ORDER},
            duration_seconds=duration_seconds,
            warnings=tuple(warnings),
            remediations=tuple(sorted(remediations, key=lambda item: (item.repository, item.rule_id))),
            config_fingerprint=config_fingerprint,
            schema_version=SCHEMA_VERSION,
        )
