"""Open corrective pull requests for fixable failures under the bot identity.

Each (repository, rule) pair maps to one deterministic branch name. An open
pull request from that branch means the fix is already proposed, so repeated
runs never open a second one.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from orgcheck.exceptions import ApiError, AuthError, RemediationConflict
from orgcheck.github import Committer
from orgcheck.model import (
    ComplianceReport,
    EvaluationResult,
    RemediationOutcome,
    RepositorySnapshot,
    StandardVersion,
)
from orgcheck.remediation.fixes import FileChange, plan_fix
from orgcheck.rules import Rule

logger = logging.getLogger(__name__)


class RemediationDispatcher:
    """Turns fixable ``fail`` results into at most one pull request each."""

    def __init__(
        self,
        client: Any,
        rules: Sequence[Rule],
        standard: StandardVersion,
        *,
        bot: Committer,
        branch_prefix: str,
        dry_run: bool = False,
    ) -> None:
        self._client = client
        self._rules = {rule.rule_id: rule for rule in rules}
        self._standard = standard
        self._bot = bot
        self._branch_prefix = branch_prefix.strip("/")
        self._dry_run = dry_run

    def branch_name(self, rule_id: str) -> str:
        return f"{self._branch_prefix}/{rule_id.lower().replace('_', '-')}"

    def plan(self, result: EvaluationResult, snapshot: RepositorySnapshot) -> tuple[FileChange, ...]:
        rule = self._rules.get(result.rule_id)
        if rule is None:
            return ()
        return plan_fix(rule, snapshot, self._standard)

    def dispatch(self, result: EvaluationResult, snapshot: RepositorySnapshot) -> RemediationOutcome:
        """Propose the fix for one result.

        Raises ``RemediationConflict`` when an open pull request from the
        fix branch already exists.
        """
        repository = result.repository
        rule = self._rules.get(result.rule_id)
        if result.outcome != "fail" or rule is None or rule.fix is None:
            return RemediationOutcome(repository, result.rule_id, "skipped", detail="no automatic fix")
        if not result.fixable:
            return RemediationOutcome(repository, result.rule_id, "skipped", detail="not automatically fixable")

        changes = plan_fix(rule, snapshot, self._standard)
        if not changes:
            return RemediationOutcome(repository, rule.rule_id, "noop", detail="nothing to change")

        branch = self.branch_name(rule.rule_id)
        owner = repository.split("/", 1)[0]
        existing = self._client.find_open_pull(repository, f"{owner}:{branch}")
        if existing is not None:
            raise RemediationConflict(repository, branch, existing.get("html_url"))

        summary = ", ".join(change.describe() for change in changes)
        if self._dry_run:
            logger.info("Would open %s on %s: %s", branch, repository, summary)
            return RemediationOutcome(repository, rule.rule_id, "planned", branch=branch, detail=summary)

        base = snapshot.default_branch
        head_sha = self._client.get_branch_head(repository, base)
        self._client.create_or_reset_branch(repository, branch, head_sha)
        message = f"{rule.title}\n\nApplied by {self._bot.name} for {rule.rule_id}."
        for change in changes:
            self._apply(repository, branch, change, message)

        pull = self._client.create_pull(
            repository,
            title=f"[orgcheck] {rule.title}",
            head=branch,
            base=base,
            body=_pull_body(rule, changes),
        )
        pull_url = pull.get("html_url")
        logger.info("Opened %s for %s in %s", pull_url or branch, rule.rule_id, repository)
        return RemediationOutcome(repository, rule.rule_id, "opened", branch=branch, pull_url=pull_url, detail=summary)

    def dispatch_all(
        self,
        report: ComplianceReport,
        snapshots: Mapping[str, RepositorySnapshot],
    ) -> tuple[RemediationOutcome, ...]:
        """Dispatch every fixable failure of ``report``; conflicts are reported, not retried."""
        outcomes: list[RemediationOutcome] = []
        for result in report.results:
            if result.outcome != "fail" or not result.fixable:
                continue
            snapshot = snapshots.get(result.repository)
            if snapshot is None:
                outcomes.append(
                    RemediationOutcome(result.repository, result.rule_id, "skipped", detail="no snapshot available")
                )
                continue
            try:
                outcomes.append(self.dispatch(result, snapshot))
            except RemediationConflict as exc:
                logger.info("%s", exc)
                outcomes.append(
                    RemediationOutcome(
                        result.repository,
                        result.rule_id,
                        "conflict",
                        branch=exc.branch,
                        pull_url=exc.pull_url,
                        detail="open pull request already exists",
                    )
                )
            except AuthError:
                raise
            except ApiError as exc:
                logger.warning("Remediation of %s in %s failed: %s", result.rule_id, result.repository, exc)
                outcomes.append(
                    RemediationOutcome(
                        result.repository,
                        result.rule_id,
                        "error",
                        branch=self.branch_name(result.rule_id),
                        detail=str(exc),
                    )
                )
        return tuple(outcomes)

    def _apply(self, repository: str, branch: str, change: FileChange, message: str) -> None:
        current = self._client.get_file(repository, change.path, branch)
        if change.content is None:
            if current is None:
                return
            self._client.delete_file(
                repository,
                change.path,
                sha=current.sha,
                message=message,
                branch=branch,
                committer=self._bot,
            )
            return
        self._client.put_file(
            repository,
            change.path,
            content=change.content,
            message=message,
            branch=branch,
            committer=self._bot,
            sha=current.sha if current is not None else None,
        )


def _pull_body(rule: Rule, changes: Sequence[FileChange]) -> str:
    lines = [f"This pull request fixes `{rule.rule_id}`: {rule.title}.", ""]
    if rule.description:
        lines.extend([rule.description, ""])
    lines.append("Changes:")
    lines.extend(f"- {change.describe()}" for change in changes)
    if any(change.executable for change in changes):
        lines.extend(
            [
                "",
                "The contents API cannot set file modes. Mark the new task scripts executable with "
                "`git update-index --chmod=+x <path>` before merging.",
            ]
        )
    return "\n".join(lines) + "\n"
