"""
Quality Analyzer
================
Scores a generated game artifact against the seven-category rubric.

STRICT DETERMINISM CONTRACT:
  - No LLM calls, no I/O, no execution of the artifact.
  - Same artifact text → same checks, scores, grade and issues.
    (Only the timestamp varies; pass ``now`` to pin it.)
  - Total: a check that blows up is logged and scored 0, never raised.

OUTPUT CONTRACT:
  test_artifact(artifact, artifact_id) -> TestReport
  score  = sum of check scores (0..100)
  grade  = grade_for(score)
  passed = score >= pass_threshold (60 by default)
"""
import dataclasses
import logging
from datetime import datetime, timezone
from typing import Dict, Optional, Sequence

from game_qa.core.config import DEFAULT_CONFIG, QAConfig
from game_qa.core.constants import FAILING_GRADE, GRADE_TABLE
from game_qa.models.check_result import CheckResult
from game_qa.models.test_report import TestReport
from .checks import DEFAULT_CHECKS, PatternScanCheck

logger = logging.getLogger(__name__)


def grade_for(score: int) -> str:
    """Map an aggregate score to its letter grade."""
    for minimum, grade in GRADE_TABLE:
        if score >= minimum:
            return grade
    return FAILING_GRADE


class QualityAnalyzer:
    """
    Runs every rubric check over an artifact and aggregates a TestReport.

    Parameters
    ----------
    config : QAConfig or None
        Weights, pass threshold and defect penalty (defaults if omitted).
    checks : sequence or None
        Check objects exposing ``key``, ``name`` and ``evaluate(text, weight)``.
    """

    def __init__(
        self,
        config: Optional[QAConfig] = None,
        checks: Optional[Sequence] = None,
    ) -> None:
        self.config = config or DEFAULT_CONFIG
        self.checks = tuple(self._configure(check) for check in (checks or DEFAULT_CHECKS))

    def _configure(self, check):
        if isinstance(check, PatternScanCheck) and check.penalty != self.config.defect_penalty:
            return dataclasses.replace(check, penalty=self.config.defect_penalty)
        return check

    # -------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------
    def test_artifact(
        self,
        artifact: str,
        artifact_id: str,
        now: Optional[datetime] = None,
    ) -> TestReport:
        """Score ``artifact`` and return a fresh TestReport."""
        if not isinstance(artifact, str):
            logger.warning("Artifact %s is %s, scoring as empty text", artifact_id, type(artifact).__name__)
            artifact = ""

        results: Dict[str, CheckResult] = {}
        for check in self.checks:
            results[check.key] = self._run_check(check, artifact)

        score = sum(result.score for result in results.values())
        grade = grade_for(score)
        passed = score >= self.config.pass_threshold
        timestamp = (now or datetime.now(timezone.utc)).isoformat()

        logger.info("Tested %s: %d/100 (%s, %s)", artifact_id, score, grade, "pass" if passed else "fail")
        return TestReport(
            artifact_id=artifact_id,
            timestamp=timestamp,
            checks=results,
            score=score,
            grade=grade,
            passed=passed,
        )

    # -------------------------------------------------------------------
    # Internal Helpers
    # -------------------------------------------------------------------
    def _run_check(self, check, text: str) -> CheckResult:
        weight = self.config.weight(check.key)
        try:
            return check.evaluate(text, weight)
        except Exception as e:
            logger.error("Check %s failed to evaluate: %s", check.key, e, exc_info=True)
            return CheckResult(
                key=check.key,
                name=check.name,
                passed=0,
                total=0,
                success=False,
                score=0,
                weight=weight,
                issues=[f"check could not be evaluated: {e}"],
            )


def test_artifact(
    artifact: str,
    artifact_id: str,
    *,
    config: Optional[QAConfig] = None,
    now: Optional[datetime] = None,
) -> TestReport:
    """Convenience wrapper around QualityAnalyzer(config).test_artifact()."""
    return QualityAnalyzer(config).test_artifact(artifact, artifact_id, now=now)


# Not a pytest test function despite the name
test_artifact.__test__ = False
