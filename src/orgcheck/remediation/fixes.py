"""Fix planning: the file changes that bring one repository in line with one rule."""

from __future__ import annotations

from dataclasses import dataclass

from orgcheck.constants.standard import TASK_DESCRIPTIONS, TASK_SCRIPT_TEMPLATE
from orgcheck.model import RepositorySnapshot, StandardVersion
from orgcheck.rules import Rule
from orgcheck.rules.types import TaskLayout


@dataclass(frozen=True)
class FileChange:
    """A single file write, or a deletion when ``content`` is ``None``."""

    path: str
    content: str | None
    executable: bool = False

    @property
    def is_delete(self) -> bool:
        return self.content is None

    def describe(self) -> str:
        if self.is_delete:
            return f"delete `{self.path}`"
        suffix = " (executable)" if self.executable else ""
        return f"create `{self.path}`{suffix}"


def plan_fix(rule: Rule, snapshot: RepositorySnapshot, standard: StandardVersion) -> tuple[FileChange, ...]:
    """Return the changes for ``rule.fix``; empty when there is nothing left to do."""
    match rule.fix:
        case "rename_config":
            return _plan_rename_config(snapshot, standard)
        case "create_task_scripts":
            task_set = rule.check.task_set if isinstance(rule.check, TaskLayout) else "required"
            return _plan_task_scripts(snapshot, standard, task_set)
        case None:
            return ()
    raise ValueError(f"{rule.rule_id}: unsupported fix {rule.fix!r}")


def task_script(task: str) -> str:
    """Render the placeholder script for a standard task."""
    description = TASK_DESCRIPTIONS.get(task, f"Run {task}")
    return TASK_SCRIPT_TEMPLATE.format(task=task, description=description)


def _plan_rename_config(snapshot: RepositorySnapshot, standard: StandardVersion) -> tuple[FileChange, ...]:
    legacy_text = snapshot.file_text(standard.legacy_config_filename)
    if legacy_text is None or snapshot.has_file(standard.config_filename):
        return ()
    return (
        FileChange(standard.config_filename, legacy_text),
        FileChange(standard.legacy_config_filename, None),
    )


def _plan_task_scripts(
    snapshot: RepositorySnapshot,
    standard: StandardVersion,
    task_set: str,
) -> tuple[FileChange, ...]:
    entries = snapshot.directory_entries(standard.task_dir) or ()
    return tuple(
        FileChange(f"{standard.task_dir}/{task}", task_script(task), executable=True)
        for task in standard.tasks_for(task_set)
        if task not in entries
    )
