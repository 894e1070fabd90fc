"""Corrective pull requests for fixable compliance failures."""

from .dispatcher import RemediationDispatcher
from .fixes import FileChange, plan_fix, task_script

__all__ = ["FileChange", "RemediationDispatcher", "plan_fix", "task_script"]
