"""
Quick Validator
===============
Cheap, category-scoped re-check run between repair attempts.

Only the categories that failed in the original report are re-checked,
and only with a narrow signature test each:

    session_sdk   — wrong alias ``session.code`` gone, ``session.sessionCode`` present
    timer_system  — decrement and zero-threshold signatures both present
    bug_patterns  — BugPattern scan re-run on its own

Categories without a quick rule are treated as clean. This is narrower
than a full QualityAnalyzer pass and can disagree with it: a clean quick
validation does not promise a clean full report.
"""
from typing import Callable, Dict, Iterable, List, Sequence

from game_qa.core import constants
from game_qa.analyzer.bug_patterns import DEFAULT_BUG_PATTERNS, scan_bug_patterns
from game_qa.models.bug_pattern import BugPattern

QuickRule = Callable[[str], List[str]]


def _session_sdk_residuals(text: str) -> List[str]:
    residuals: List[str] = []
    if "session.code" in text:
        residuals.append("session.code alias still used")
    if "session.sessionCode" not in text:
        residuals.append("session.sessionCode still missing")
    return residuals


def _timer_residuals(text: str) -> List[str]:
    residuals: List[str] = []
    if "timeLeft--" not in text and "time--" not in text:
        residuals.append("timer decrement still missing")
    if "timeLeft <= 0" not in text and "time <= 0" not in text:
        residuals.append("timer zero check still missing")
    return residuals


def bug_pattern_rule(patterns: Sequence[BugPattern] = DEFAULT_BUG_PATTERNS) -> QuickRule:
    def residuals(text: str) -> List[str]:
        return [pattern.issue() for pattern in scan_bug_patterns(text, patterns)]
    return residuals


DEFAULT_QUICK_RULES: Dict[str, QuickRule] = {
    constants.SESSION_SDK: _session_sdk_residuals,
    constants.TIMER_SYSTEM: _timer_residuals,
    constants.BUG_PATTERNS: bug_pattern_rule(),
}


def quick_validate(
    text: str,
    failed_keys: Iterable[str],
    rules: Dict[str, QuickRule] = DEFAULT_QUICK_RULES,
) -> List[str]:
    """
    Re-check only ``failed_keys`` against ``text``.

    Returns
    -------
    list of str
        Residual issue strings; empty means the quick tier is clean.
    """
    residuals: List[str] = []
    for key in failed_keys:
        rule = rules.get(key)
        if rule is not None:
            residuals.extend(rule(text))
    return residuals
