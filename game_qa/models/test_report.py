"""
Test Report Model
=================
Aggregate scoring result for one artifact version.

Created fresh by every analyzer run and never mutated afterwards.
``score`` is the sum of all check scores; ``passed`` is ``score >= 60``
under the default configuration.
"""
from typing import Dict, List

from pydantic import BaseModel, ConfigDict

from game_qa.core.constants import MAX_SCORE
from .check_result import CheckResult


class TestReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Not a pytest test class despite the name
    __test__ = False

    artifact_id: str
    timestamp: str
    checks: Dict[str, CheckResult]
    score: int
    max_score: int = MAX_SCORE
    grade: str
    passed: bool

    def failed_checks(self) -> List[CheckResult]:
        """Checks whose success flag is False, in rubric order."""
        return [check for check in self.checks.values() if not check.success]

    @property
    def issues(self) -> List[str]:
        return [issue for check in self.checks.values() for issue in check.issues]
