"""
Rubric Checks
=============
The seven weighted categories, expressed as tables of named rules.

Two kinds of check share one interface (``key``, ``name``,
``evaluate(text, weight)``):

    RuleCheck         — a fixed set of boolean subchecks; full weight when all
                        pass, otherwise floor(passed / total * weight).
    PatternScanCheck  — inverse scoring over BugPatterns; every unguarded
                        pattern costs ``penalty`` points, floored at zero.

All predicates are plain substring or regex tests over the raw artifact
text. Nothing here parses or executes JavaScript.
"""
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Sequence, Tuple

from game_qa.core import constants
from game_qa.models.bug_pattern import BugPattern
from game_qa.models.check_result import CheckResult
from .bug_patterns import DEFAULT_BUG_PATTERNS, scan_bug_patterns


Predicate = Callable[[str], bool]
IssueBuilder = Callable[[Dict[str, bool]], List[str]]


# ---------------------------------------------------------------------------
# Predicate helpers
# ---------------------------------------------------------------------------
def contains(*needles: str) -> Predicate:
    """True if any of the needles occurs in the text."""
    return lambda text: any(needle in text for needle in needles)


def contains_all(*needles: str) -> Predicate:
    return lambda text: all(needle in text for needle in needles)


def lacks(needle: str) -> Predicate:
    return lambda text: needle not in text


@dataclass(frozen=True)
class SubcheckRule:
    name: str
    predicate: Predicate

    def evaluate(self, text: str) -> bool:
        return bool(self.predicate(text))


def weighted_score(passed: int, total: int, weight: int) -> int:
    """Full weight on success, otherwise the floored proportional share."""
    if total <= 0:
        return 0
    if passed == total:
        return weight
    return math.floor(passed / total * weight)


def _no_issues(details: Dict[str, bool]) -> List[str]:
    return []


def _single_issue(message: str) -> IssueBuilder:
    def build(details: Dict[str, bool]) -> List[str]:
        return [] if all(details.values()) else [message]
    return build


# ---------------------------------------------------------------------------
# Check kinds
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class RuleCheck:
    key: str
    name: str
    rules: Tuple[SubcheckRule, ...]
    issues: IssueBuilder = _no_issues

    def evaluate(self, text: str, weight: int) -> CheckResult:
        details = {rule.name: rule.evaluate(text) for rule in self.rules}
        passed = sum(details.values())
        total = len(details)
        return CheckResult(
            key=self.key,
            name=self.name,
            passed=passed,
            total=total,
            success=passed == total,
            score=weighted_score(passed, total, weight),
            weight=weight,
            issues=self.issues(details),
            details=details,
        )


@dataclass(frozen=True)
class PatternScanCheck:
    key: str
    name: str
    patterns: Tuple[BugPattern, ...] = DEFAULT_BUG_PATTERNS
    penalty: int = constants.DEFECT_PENALTY

    def evaluate(self, text: str, weight: int) -> CheckResult:
        found = scan_bug_patterns(text, self.patterns)
        found_names = {pattern.name for pattern in found}
        # Severity changes only the issue wording, never the score
        score = max(0, weight - len(found) * self.penalty)
        return CheckResult(
            key=self.key,
            name=self.name,
            passed=len(self.patterns) - len(found),
            total=len(self.patterns),
            success=not found,
            score=score,
            weight=weight,
            issues=[pattern.issue() for pattern in found],
            details={pattern.name: pattern.name not in found_names for pattern in self.patterns},
        )


# ---------------------------------------------------------------------------
# Issue builders
# ---------------------------------------------------------------------------
def _session_sdk_issues(details: Dict[str, bool]) -> List[str]:
    issues: List[str] = []
    if not details["sdk_constructed"]:
        issues.append("SessionSDK initialisation missing")
    if not details["connected_listener"]:
        issues.append("'connected' event listener missing")
    if not details["session_code_field"]:
        issues.append("session.sessionCode usage missing")
    if not details["no_session_code_alias"]:
        issues.append("bug: session.code used (should be session.sessionCode)")
    if not details["event_unwrap_pattern"]:
        issues.append("CustomEvent unwrap pattern missing (event.detail || event)")
    return issues


# ---------------------------------------------------------------------------
# Default rubric
# ---------------------------------------------------------------------------
SESSION_SDK_CHECK = RuleCheck(
    key=constants.SESSION_SDK,
    name="SessionSDK integration",
    rules=(
        SubcheckRule("sdk_constructed", contains("new SessionSDK")),
        SubcheckRule("connected_listener", contains("sdk.on('connected'")),
        SubcheckRule("session_created_listener", contains("sdk.on('session-created'")),
        SubcheckRule("session_code_field", contains("session.sessionCode")),
        SubcheckRule("no_session_code_alias", lacks("session.code")),
        SubcheckRule("sensor_data_listener", contains("sdk.on('sensor-data'")),
        SubcheckRule("event_unwrap_pattern", contains("event.detail || event")),
        SubcheckRule("qr_code_generation", contains("generateQRCode")),
    ),
    issues=_session_sdk_issues,
)

SENSOR_PROCESSING_CHECK = RuleCheck(
    key=constants.SENSOR_PROCESSING,
    name="Sensor data processing",
    rules=(
        SubcheckRule("process_function", contains("function processSensorData")),
        SubcheckRule("orientation_access", contains("orientation.gamma", "orientation.beta")),
        SubcheckRule("range_clamp", contains_all("Math.max", "Math.min")),
        SubcheckRule("paddle_movement", contains("paddle.x")),
    ),
    issues=_single_issue("sensor data processing logic incomplete"),
)

GAME_LOOP_CHECK = RuleCheck(
    key=constants.GAME_LOOP,
    name="Game loop",
    rules=(
        SubcheckRule("update_function", contains("function update()")),
        SubcheckRule("render_function", contains("function render()")),
        SubcheckRule("game_loop_function", contains("function gameLoop()")),
        SubcheckRule("request_animation_frame", contains("requestAnimationFrame")),
    ),
)

TIMER_SYSTEM_CHECK = RuleCheck(
    key=constants.TIMER_SYSTEM,
    name="Timer system",
    rules=(
        SubcheckRule("timer_variable", contains("timeLeft", "time")),
        SubcheckRule("interval", contains("setInterval")),
        SubcheckRule("time_decrement", contains("timeLeft--", "time--")),
        SubcheckRule("time_check", contains("timeLeft <= 0", "time <= 0")),
    ),
    issues=_single_issue("bug: timer may not work"),
)

BUG_PATTERN_CHECK = PatternScanCheck(
    key=constants.BUG_PATTERNS,
    name="Bug pattern detection",
)

STATE_MANAGEMENT_CHECK = RuleCheck(
    key=constants.STATE_MANAGEMENT,
    name="State management",
    rules=(
        SubcheckRule("game_state", contains("gameState", "game.state")),
        SubcheckRule("score_tracking", contains("score")),
        SubcheckRule("lives_tracking", contains("lives")),
        SubcheckRule("game_started_flag", contains("gameStarted", "game.started")),
    ),
)

UI_UPDATE_CHECK = RuleCheck(
    key=constants.UI_UPDATE,
    name="UI update",
    rules=(
        SubcheckRule("update_ui_function", contains("function updateUI", "updateUI()")),
        SubcheckRule("score_display", contains("getElementById('score')")),
        SubcheckRule("lives_display", contains("getElementById('lives')")),
    ),
)

DEFAULT_CHECKS: Sequence = (
    SESSION_SDK_CHECK,
    SENSOR_PROCESSING_CHECK,
    GAME_LOOP_CHECK,
    TIMER_SYSTEM_CHECK,
    BUG_PATTERN_CHECK,
    STATE_MANAGEMENT_CHECK,
    UI_UPDATE_CHECK,
)
