"""Rule model, rulepack loading, and snapshot evaluation."""

from .evaluator import evaluate_rule, evaluate_snapshot, required_inputs, select_rules, unknown_results
from .loader import BUNDLED_RULEPACK, load_rulepack
from .types import Rule

__all__ = [
    "BUNDLED_RULEPACK",
    "Rule",
    "evaluate_rule",
    "evaluate_snapshot",
    "load_rulepack",
    "required_inputs",
    "select_rules",
    "unknown_results",
]
