"""Core data models for orgcheck."""

from .entities import (
    ComplianceReport,
    EvaluationResult,
    RemediationOutcome,
    RepositoryRef,
    RepositoryReport,
    RepositorySnapshot,
    StandardVersion,
    result_id,
)

__all__ = [
    "ComplianceReport",
    "EvaluationResult",
    "RemediationOutcome",
    "RepositoryRef",
    "RepositoryReport",
    "RepositorySnapshot",
    "StandardVersion",
    "result_id",
]
