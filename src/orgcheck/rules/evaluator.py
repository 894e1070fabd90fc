"""Pure rule evaluation over repository snapshots.

Evaluation never touches the network: everything a check reads was fetched
into the snapshot beforehand (see ``required_inputs``). Rules are evaluated
independently, so the order of ``rules`` never changes any outcome.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from orgcheck.exceptions import MalformedConfig
from orgcheck.model import EvaluationResult, RepositorySnapshot, StandardVersion
from orgcheck.rules.parsing import mise_run_tasks, parse_json, parse_toml, parse_workflow, workflow_steps
from orgcheck.rules.types import (
    AnyFilePresent,
    Check,
    CheckOutcome,
    ConfigFilename,
    FileAbsent,
    FilePresent,
    JsonParses,
    Rule,
    TaskLayout,
    TasksFileBased,
    WorkflowInvokes,
)

logger = logging.getLogger(__name__)


def select_rules(
    rules: Iterable[Rule],
    standard: StandardVersion,
    disabled: Iterable[str] = (),
) -> tuple[Rule, ...]:
    """Return rules in force for ``standard``, minus disabled ids, sorted by id."""
    disabled_ids = set(disabled)
    return tuple(
        sorted(
            (rule for rule in rules if rule.since_phase <= standard.phase and rule.rule_id not in disabled_ids),
            key=lambda rule: rule.rule_id,
        )
    )


def required_inputs(
    rules: Sequence[Rule],
    standard: StandardVersion,
) -> tuple[tuple[str, ...], tuple[str, ...], bool]:
    """Collect the file paths, directories, and language data the rules read."""
    files: set[str] = set()
    directories: set[str] = set()
    needs_languages = False
    for rule in rules:
        check_files, check_dirs = _check_inputs(rule.check, standard)
        files.update(check_files)
        directories.update(check_dirs)
        if rule.applies_when == "has_code" or isinstance(rule.check, WorkflowInvokes):
            needs_languages = True
    return tuple(sorted(files)), tuple(sorted(directories)), needs_languages


def evaluate_snapshot(
    snapshot: RepositorySnapshot,
    rules: Sequence[Rule],
    standard: StandardVersion,
) -> tuple[EvaluationResult, ...]:
    """Evaluate every in-force rule against one snapshot, one result per rule."""
    in_force = select_rules(rules, standard)
    return tuple(evaluate_rule(rule, snapshot, standard) for rule in in_force)


def evaluate_rule(rule: Rule, snapshot: RepositorySnapshot, standard: StandardVersion) -> EvaluationResult:
    """Evaluate a single rule; malformed repository files become failures."""
    if snapshot.exempt:
        reason = snapshot.exempt_reason or "repository is exempt"
        return EvaluationResult(snapshot.repository, rule.rule_id, "inapplicable", detail=reason)

    if rule.applies_when == "has_code" and not snapshot.has_code:
        return EvaluationResult(
            snapshot.repository,
            rule.rule_id,
            "inapplicable",
            detail="repository has no code",
        )

    try:
        verdict = run_check(rule.check, snapshot, standard)
    except MalformedConfig as exc:
        logger.debug("Malformed config in %s for %s: %s", snapshot.repository, rule.rule_id, exc)
        return EvaluationResult(snapshot.repository, rule.rule_id, "fail", detail=f"malformed config: {exc}")

    if verdict.passed:
        return EvaluationResult(snapshot.repository, rule.rule_id, "pass", detail=verdict.detail)
    return EvaluationResult(
        snapshot.repository,
        rule.rule_id,
        "fail",
        detail=verdict.detail,
        fixable=rule.fix is not None and verdict.fixable,
    )


def unknown_results(
    repository: str,
    rules: Sequence[Rule],
    standard: StandardVersion,
    reason: str,
) -> tuple[EvaluationResult, ...]:
    """Build ``unknown`` results for every in-force rule of a repository."""
    return tuple(
        EvaluationResult(repository, rule.rule_id, "unknown", detail=reason) for rule in select_rules(rules, standard)
    )


def run_check(check: Check, snapshot: RepositorySnapshot, standard: StandardVersion) -> CheckOutcome:
    """Dispatch a check variant to its implementation."""
    match check:
        case FilePresent(path=path):
            if snapshot.has_file(path):
                return CheckOutcome(True)
            return CheckOutcome(False, f"missing {path}")
        case FileAbsent(path=path):
            if snapshot.has_file(path):
                return CheckOutcome(False, f"unexpected {path}")
            return CheckOutcome(True)
        case AnyFilePresent(paths=paths):
            present = [path for path in paths if snapshot.has_file(path)]
            if present:
                return CheckOutcome(True, f"found {present[0]}")
            return CheckOutcome(False, f"none of {', '.join(paths)} present")
        case ConfigFilename():
            return _check_config_filename(snapshot, standard)
        case TaskLayout(task_set=task_set):
            return _check_task_layout(snapshot, standard, task_set)
        case TasksFileBased():
            return _check_tasks_file_based(snapshot, standard)
        case WorkflowInvokes(action=action):
            return _check_workflow(snapshot, standard, action)
        case JsonParses(paths=paths):
            return _check_json_parses(snapshot, paths)
    raise TypeError(f"unsupported check kind: {type(check).__name__}")


def _check_inputs(check: Check, standard: StandardVersion) -> tuple[tuple[str, ...], tuple[str, ...]]:
    match check:
        case FilePresent(path=path) | FileAbsent(path=path):
            return (path,), ()
        case AnyFilePresent(paths=paths) | JsonParses(paths=paths):
            return paths, ()
        case ConfigFilename() | TasksFileBased():
            return (standard.config_filename, standard.legacy_config_filename), ()
        case TaskLayout():
            return (), (standard.task_dir,)
        case WorkflowInvokes():
            return (standard.workflow_path,), ()
    raise TypeError(f"unsupported check kind: {type(check).__name__}")


def _check_config_filename(snapshot: RepositorySnapshot, standard: StandardVersion) -> CheckOutcome:
    expected = standard.config_filename
    legacy = standard.legacy_config_filename
    has_expected = snapshot.has_file(expected)
    if snapshot.has_file(legacy):
        if has_expected:
            return CheckOutcome(False, f"both {expected} and {legacy} exist; remove {legacy}", fixable=False)
        return CheckOutcome(False, f"found {legacy}; rename it to {expected}")
    if not has_expected:
        return CheckOutcome(False, f"missing {expected}", fixable=False)
    parse_toml(expected, snapshot.file_text(expected) or "")
    return CheckOutcome(True)


def _check_task_layout(snapshot: RepositorySnapshot, standard: StandardVersion, task_set: str) -> CheckOutcome:
    wanted = standard.tasks_for(task_set)
    entries = snapshot.directory_entries(standard.task_dir)
    if entries is None:
        return CheckOutcome(False, f"missing task directory {standard.task_dir}")
    missing = [task for task in wanted if task not in entries]
    if missing:
        return CheckOutcome(False, f"missing tasks in {standard.task_dir}: {', '.join(missing)}")
    return CheckOutcome(True)


def _check_tasks_file_based(snapshot: RepositorySnapshot, standard: StandardVersion) -> CheckOutcome:
    for path in (standard.config_filename, standard.legacy_config_filename):
        text = snapshot.file_text(path)
        if text is None:
            continue
        config = parse_toml(path, text)
        tasks = config.get("tasks", {})
        if not isinstance(tasks, dict):
            raise MalformedConfig(path, "`tasks` must be a table")
        inline = sorted(name for name in (*standard.required_tasks, *standard.code_tasks) if name in tasks)
        if inline:
            return CheckOutcome(
                False,
                f"tasks defined inline in {path}: {', '.join(inline)}; move them to {standard.task_dir}",
                fixable=False,
            )
        return CheckOutcome(True)
    return CheckOutcome(True, "no mise config")


def _check_workflow(snapshot: RepositorySnapshot, standard: StandardVersion, action: str) -> CheckOutcome:
    path = standard.workflow_path
    text = snapshot.file_text(path)
    if text is None:
        return CheckOutcome(False, f"missing {path}", fixable=False)

    steps = workflow_steps(path, parse_workflow(path, text))
    uses_action = any(
        isinstance(step.get("uses"), str) and step["uses"].split("@", 1)[0] == action for step in steps
    )
    invoked: set[str] = set()
    for step in steps:
        run = step.get("run")
        if isinstance(run, str):
            invoked |= mise_run_tasks(run)

    expected = list(standard.required_tasks)
    if snapshot.has_code:
        expected.extend(standard.code_tasks)
    missing = [task for task in expected if task not in invoked]

    problems: list[str] = []
    if not uses_action:
        problems.append(f"does not use {action}")
    if missing:
        problems.append(f"does not run: {', '.join(f'mise run {task}' for task in missing)}")
    if problems:
        return CheckOutcome(False, f"{path} " + "; ".join(problems), fixable=False)
    return CheckOutcome(True)


def _check_json_parses(snapshot: RepositorySnapshot, paths: tuple[str, ...]) -> CheckOutcome:
    for path in paths:
        text = snapshot.file_text(path)
        if text is None:
            continue
        parse_json(path, text)
        return CheckOutcome(True, f"found {path}")
    return CheckOutcome(False, f"none of {', '.join(paths)} present", fixable=False)
