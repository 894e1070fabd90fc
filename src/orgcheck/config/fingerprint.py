"""Config fingerprinting for report metadata."""

from __future__ import annotations

import hashlib
import json

from orgcheck.config.model import OrgcheckConfig


def config_fingerprint(config: OrgcheckConfig, rule_ids: tuple[str, ...] = ()) -> str:
    """Return a stable hash of everything that influences rule outcomes.

    Two reports with the same fingerprint were produced under the same
    standard and exemption policy, so their outcomes are comparable.
    """
    payload = {
        "organization": config.organization,
        "standard_phase": config.standard_phase,
        "required_tasks": list(config.required_tasks),
        "code_tasks": list(config.code_tasks),
        "exempt_repositories": sorted(config.exempt_repositories),
        "exempt_topics": sorted(config.exempt_topics),
        "exempt_archived": config.exempt_archived,
        "include_forks": config.include_forks,
        "disabled_rules": sorted(config.disabled_rules),
        "rule_ids": sorted(rule_ids),
    }
    blob = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(blob).hexdigest()
