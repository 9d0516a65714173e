"""
Report Formatter
================
Human-readable rendering of TestReports and repair results.

STRICT DETERMINISM CONTRACT:
  - This module NEVER calls an LLM.
  - This module NEVER reads environment variables or files.
  - Given the same report, it ALWAYS returns the exact same text.

Layout of render():
    rule line / title / rule line
    id, timestamp, score, grade, pass-fail
    rule line / section title / rule line
    one line per check:  "<glyph> <name>: <passed>/<total> (<score> pts)"
    one line per issue:  "   └─ <issue>"
    closing rule line
"""
from game_qa.models.repair_attempt import RepairResult
from game_qa.models.test_report import TestReport

RULE = "━" * 64
PASS_GLYPH = "✅"
FAIL_GLYPH = "❌"
ISSUE_PREFIX = "   └─ "


def render(report: TestReport) -> str:
    """Render a TestReport as a multi-line summary."""
    status = f"{PASS_GLYPH} PASSED" if report.passed else f"{FAIL_GLYPH} FAILED"
    lines = [
        RULE,
        "Game code test report",
        RULE,
        "",
        f"Artifact ID: {report.artifact_id}",
        f"Tested at:   {report.timestamp}",
        f"Score:       {report.score}/{report.max_score}",
        f"Grade:       {report.grade}",
        f"Result:      {status}",
        "",
        RULE,
        "Check details",
        RULE,
    ]

    for check in report.checks.values():
        glyph = PASS_GLYPH if check.success else FAIL_GLYPH
        lines.append("")
        lines.append(f"{glyph} {check.name}: {check.passed}/{check.total} ({check.score} pts)")
        for issue in check.issues:
            lines.append(f"{ISSUE_PREFIX}{issue}")

    lines.append("")
    lines.append(RULE)
    return "\n".join(lines) + "\n"


def render_fix_log(result: RepairResult) -> str:
    """Summarise a RepairResult: outcome line plus one line per attempt."""
    lines = [f"Repair {result.outcome.value}: {result.attempts} attempt(s)"]
    if result.message:
        lines.append(f"Note: {result.message}")
    for entry in result.fix_log:
        glyph = PASS_GLYPH if entry.applied else FAIL_GLYPH
        issues = ", ".join(entry.issues_addressed) or "-"
        line = f"{glyph} attempt {entry.sequence}: {issues}"
        if entry.error:
            line += f" ({entry.error})"
        lines.append(line)
    return "\n".join(lines) + "\n"
