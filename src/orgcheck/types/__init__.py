"""Shared type aliases for orgcheck."""

from .common import (
    Applicability,
    JsonObject,
    JsonScalar,
    JsonValue,
    Outcome,
    RemediationStatus,
    RepositoryStatus,
)
from .config import ApiConfig, ExemptionPolicy, RemediationConfig

__all__ = [
    "ApiConfig",
    "Applicability",
    "ExemptionPolicy",
    "JsonObject",
    "JsonScalar",
    "JsonValue",
    "Outcome",
    "RemediationConfig",
    "RemediationStatus",
    "RepositoryStatus",
]
