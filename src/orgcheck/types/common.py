"""Cross-module type aliases."""

from __future__ import annotations

from typing import Literal, TypeAlias

Outcome: TypeAlias = Literal["pass", "fail", "inapplicable", "unknown"]
RepositoryStatus: TypeAlias = Literal["pass", "fail", "inapplicable", "unknown"]
Applicability: TypeAlias = Literal["always", "has_code"]
RemediationStatus: TypeAlias = Literal["opened", "planned", "noop", "conflict", "skipped", "error"]

JsonScalar: TypeAlias = str | int | float | bool | None
JsonValue: TypeAlias = JsonScalar | list["JsonValue"] | dict[str, "JsonValue"]
JsonObject: TypeAlias = dict[str, JsonValue]
