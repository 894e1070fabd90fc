"""Parsers for fetched repository files; every failure surfaces as MalformedConfig."""

from __future__ import annotations

import json
import re
import shlex
import tomllib
from typing import Any

import yaml

from orgcheck.constants.config import TASK_NAME_PATTERN
from orgcheck.exceptions import MalformedConfig

_TASK_NAME_RE = re.compile(TASK_NAME_PATTERN)
_SHELL_SEPARATORS: frozenset[str] = frozenset({"&&", "||", ";", "|"})


def parse_toml(path: str, text: str) -> dict[str, Any]:
    """Parse a TOML document such as ``.mise.toml``."""
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise MalformedConfig(path, f"invalid TOML: {exc}") from exc


def parse_json(path: str, text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedConfig(path, f"invalid JSON: {exc}") from exc


def parse_workflow(path: str, text: str) -> dict[str, Any]:
    """Parse a GitHub Actions workflow and require a ``jobs`` mapping."""
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise MalformedConfig(path, f"invalid YAML: {exc}") from exc
    if not isinstance(raw, dict):
        raise MalformedConfig(path, "workflow must be a YAML mapping")
    jobs = raw.get("jobs")
    if not isinstance(jobs, dict) or not jobs:
        raise MalformedConfig(path, "workflow has no `jobs` mapping")
    return raw


def workflow_steps(path: str, workflow: dict[str, Any]) -> list[dict[str, Any]]:
    """Flatten the steps of every job, skipping entries that are not mappings."""
    steps: list[dict[str, Any]] = []
    for name, job in workflow["jobs"].items():
        if not isinstance(job, dict):
            continue
        job_steps = job.get("steps") or []
        if not isinstance(job_steps, list):
            raise MalformedConfig(path, f"steps of job `{name}` must be a list")
        for step in job_steps:
            if isinstance(step, dict):
                steps.append(step)
    return steps


def mise_run_tasks(command: str) -> set[str]:
    """Return task names invoked through ``mise run`` in a shell snippet.

    Handles several tasks joined with ``:::``, skips option flags, and ignores
    task arguments passed after ``--``.
    """
    tasks: set[str] = set()
    for line in command.splitlines():
        try:
            tokens = shlex.split(line, comments=True)
        except ValueError:
            tokens = line.split()
        for index in range(len(tokens) - 1):
            if tokens[index] != "mise" or tokens[index + 1] != "run":
                continue
            in_task_args = False
            for token in tokens[index + 2 :]:
                if token in _SHELL_SEPARATORS:
                    break
                if token == ":::":
                    in_task_args = False
                    continue
                if token == "--":
                    in_task_args = True
                    continue
                if in_task_args or token.startswith("-"):
                    continue
                if _TASK_NAME_RE.match(token):
                    tasks.add(token)
    return tasks
