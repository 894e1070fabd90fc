"""Configuration loading, validation, and fingerprinting for orgcheck runs."""

from __future__ import annotations

from orgcheck.config.fingerprint import config_fingerprint
from orgcheck.config.loader import load_config
from orgcheck.config.model import OrgcheckConfig
from orgcheck.config.validator import validate_config_file

__all__ = [
    "OrgcheckConfig",
    "config_fingerprint",
    "load_config",
    "validate_config_file",
]
