"""Aggregation of check results into a conformance report.

Warnings never fail a run: the exit status depends on Error findings only.
"""

import json
from collections import Counter
from typing import Any, Iterable

from envelope_conformance.models.report import ConformanceSummary
from envelope_conformance.models.sample import SampleResult

EXIT_PASS = 0
EXIT_FAIL = 1


class ReportEmitter:
    """Collects sample results and renders the run's report."""

    def __init__(self) -> None:
        self._results: list[SampleResult] = []

    def add(self, result: SampleResult) -> None:
        self._results.append(result)

    def extend(self, results: Iterable[SampleResult]) -> None:
        for result in results:
            self.add(result)

    @property
    def results(self) -> list[SampleResult]:
        return list(self._results)

    def summary(self) -> ConformanceSummary:
        """Computes totals over every collected result.

        Returns:
            Counts per rule, error/warning totals, pass/fail sample counts
            and the exit code (0 when no Error was found, 1 otherwise).
        """
        by_rule: Counter[str] = Counter()
        errors = warnings = failed = 0
        for result in self._results:
            for finding in result.findings:
                by_rule[finding.rule.value] += 1
                if finding.is_error:
                    errors += 1
                else:
                    warnings += 1
            if not result.passed:
                failed += 1

        return ConformanceSummary(
            checked=len(self._results),
            passed=len(self._results) - failed,
            failed=failed,
            errors=errors,
            warnings=warnings,
            by_rule=dict(sorted(by_rule.items())),
            exit_code=EXIT_FAIL if errors else EXIT_PASS,
        )

    def exit_code(self) -> int:
        return self.summary().exit_code

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary().model_dump(mode="json"),
            "results": [r.model_dump(mode="json") for r in self._results],
        }

    def render_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)

    def render_text(self) -> str:
        lines: list[str] = []
        for result in self._results:
            verdict = "PASS" if result.passed else "FAIL"
            target = f" {result.method} {result.path}" if result.path else ""
            lines.append(
                f"{verdict} {result.name}{target} [{result.status}, {result.shape.value}]"
            )
            for finding in result.findings:
                lines.append(f"  {finding.render()}")

        summary = self.summary()
        lines.append("")
        lines.append(
            f"{summary.checked} checked, {summary.passed} passed, {summary.failed} failed "
            f"({summary.errors} errors, {summary.warnings} warnings)"
        )
        for rule, count in summary.by_rule.items():
            lines.append(f"  {rule}: {count}")
        return "\n".join(lines)

    def render_markdown(self) -> str:
        summary = self.summary()
        if not self._results:
            return "No responses checked."

        lines = [
            "### Conformance report",
            "",
            f"- **checked**: {summary.checked}",
            f"- **passed**: {summary.passed}",
            f"- **failed**: {summary.failed}",
            f"- **errors**: {summary.errors}",
            f"- **warnings**: {summary.warnings}",
        ]
        if summary.by_rule:
            lines += ["", "| rule | count |", "|---|---|"]
            lines += [f"| {rule} | {count} |" for rule, count in summary.by_rule.items()]

        failing = [r for r in self._results if r.findings]
        if failing:
            lines += ["", "| sample | status | severity | rule | path | message |"]
            lines.append("|---|---|---|---|---|---|")
            for result in failing:
                for f in result.findings:
                    message = f.message.replace("|", "\\|")
                    lines.append(
                        f"| {result.name} | {result.status} | {f.severity.value} "
                        f"| {f.rule.value} | `{f.path or '/'}` | {message} |"
                    )
        return "\n".join(lines)
