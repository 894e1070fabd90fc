"""Human-readable stdout reporter for compliance reports."""

from __future__ import annotations

from orgcheck.constants.branding import ASCII_LOGO_LINES, AUDIT_SUMMARY_TITLE
from orgcheck.constants.reporting import ANSI_RESET, OUTCOME_COLORS, OUTCOME_ORDER
from orgcheck.model import ComplianceReport, EvaluationResult


def _colorize(text: str, color: str) -> str:
    return f"{color}{text}{ANSI_RESET}"


class StdoutReporter:
    """Formats a compliance report as a summary header and a failure table."""

    def __init__(
        self,
        report: ComplianceReport,
        *,
        color: bool = True,
        verbose: bool = False,
        exit_code: int = 0,
    ) -> None:
        self._report = report
        self._color = color
        self._verbose = verbose
        self._exit_code = exit_code

    def render(self) -> str:
        """Render the full stdout report as a single string."""
        sections = [self._render_header(), self._render_failures_table()]
        if self._verbose:
            sections.append(self._render_unknowns())
        sections.append(self._render_remediations())
        return "\n".join(section for section in sections if section)

    def _paint(self, outcome: str, text: str | None = None) -> str:
        label = outcome if text is None else text
        color = OUTCOME_COLORS.get(outcome, "")
        return _colorize(label, color) if self._color and color else label

    def _render_header(self) -> str:
        r = self._report
        sep = "  " + "─" * 38

        lines = [
            "",
            f"  {ASCII_LOGO_LINES[0]}",
            f"  {ASCII_LOGO_LINES[1]}",
            f"  {AUDIT_SUMMARY_TITLE}",
            sep,
            "",
            f"  Organization  {r.organization or '-'}",
            f"  Phase         {r.phase}",
            f"  Repositories  {len(r.repositories)} ({self._format_counts(r.counts_by_status)})",
            f"  Results       {sum(r.counts_by_outcome.values())} ({self._format_counts(r.counts_by_outcome)})",
        ]
        if r.warnings:
            lines.append(f"  Warnings      {len(r.warnings)}")
            if self._verbose:
                lines.extend(f"    - {warning}" for warning in r.warnings)

        state = "FAIL" if self._exit_code == 1 else "PASS"
        lines.append(f"  Verdict       {self._paint('fail' if state == 'FAIL' else 'pass', state)}")
        lines.append(f"  Duration      {r.duration_seconds:.3f}s")
        lines.append("")
        return "\n".join(lines)

    def _format_counts(self, counts: dict) -> str:
        """Render counts in fixed outcome order."""
        return " · ".join(f"{counts.get(outcome, 0)} {self._paint(outcome)}" for outcome in OUTCOME_ORDER)

    def _render_failures_table(self) -> str:
        failures = [result for result in self._report.results if result.outcome == "fail"]
        if not failures:
            return ""
        return self._render_table("Failing rules", failures)

    def _render_unknowns(self) -> str:
        unknowns = [result for result in self._report.results if result.outcome == "unknown"]
        if not unknowns:
            return ""
        return self._render_table("Unknown results", unknowns)

    def _render_table(self, title: str, results: list[EvaluationResult]) -> str:
        w_repo = max(10, min(40, max(len(result.repository) for result in results)))
        w_rule = max(8, max(len(result.rule_id) for result in results))
        w_fix = 3

        def _hline(left: str, mid: str, right: str) -> str:
            return f"  {left}{'─' * (w_repo + 2)}{mid}{'─' * (w_rule + 2)}{mid}{'─' * (w_fix + 2)}{right}"

        lines = [
            f"  {title}",
            _hline("┌", "┬", "┐"),
            f"  │ {'Repository':<{w_repo}} │ {'Rule':<{w_rule}} │ {'Fix':<{w_fix}} │",
            _hline("├", "┼", "┤"),
        ]
        for result in results:
            fix = "yes" if result.fixable else "no"
            repo = result.repository[:w_repo]
            lines.append(f"  │ {repo:<{w_repo}} │ {result.rule_id:<{w_rule}} │ {fix:<{w_fix}} │")
            if self._verbose and result.detail:
                lines.append(f"      {result.detail}")
        lines.append(_hline("└", "┴", "┘"))
        return "\n".join(lines)

    def _render_remediations(self) -> str:
        if not self._report.remediations:
            return ""
        lines = ["", "  Remediation"]
        for outcome in self._report.remediations:
            target = outcome.pull_url or outcome.branch or "-"
            lines.append(f"    {outcome.repository}  {outcome.rule_id}  {outcome.status}  {target}")
        return "\n".join(lines)
