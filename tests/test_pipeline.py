"""
Pipeline Tests
==============
End-to-end: assemble → test → repair → re-test, with mocked or offline
repairers only.
"""
import asyncio
import time

import pytest
from unittest.mock import AsyncMock, MagicMock

from game_qa.agents.repair_orchestrator import ExternalCodeRepairer
from game_qa.core import constants
from game_qa.core.config import QAConfig
from game_qa.core.errors import RepairInvocationError
from game_qa.models.repair_attempt import RepairOutcome
from game_qa.services.pattern_rewriter import SESSION_CODE_ALIAS, PatternRewriteRepairer
from game_qa.services.pipeline import PipelineStatus, run_pipeline


def _returning(text: str) -> MagicMock:
    repairer = MagicMock(spec=ExternalCodeRepairer)
    repairer.repair = AsyncMock(return_value=text)
    return repairer


def _quick_clean_only(broken_game: str) -> str:
    """Clears the SDK and timer quick rules but stays below the pass mark."""
    return (
        broken_game
        .replace("session.code", "session.sessionCode")
        .replace(
            "setInterval(() => {}, 1000);",
            "setInterval(() => { timeLeft--; if (timeLeft <= 0) { timeLeft = 0; } }, 1000);",
        )
    )


# ---------------------------------------------------------------------------
# 1. Pipeline statuses
# ---------------------------------------------------------------------------
class TestRunPipeline:

    def test_assembly_failure(self, good_logic):
        repairer = _returning("")
        result = asyncio.run(run_pipeline("<html>no markers</html>", good_logic, "a", repairer))

        assert result.status == PipelineStatus.ASSEMBLY_FAILED
        assert "Start marker not found" in result.error
        assert result.initial_report is None
        repairer.repair.assert_not_awaited()

    def test_good_logic_passes_without_repair(self, structure, good_logic, good_game):
        repairer = _returning("")
        result = asyncio.run(run_pipeline(structure, good_logic, "good", repairer))

        assert result.status == PipelineStatus.PASSED
        assert result.artifact == good_game
        assert result.initial_report.score == 100
        assert result.final_report == result.initial_report
        assert result.repair is None
        repairer.repair.assert_not_awaited()

    def test_repair_resolves(self, structure, broken_logic, good_game):
        repairer = _returning(good_game)
        result = asyncio.run(run_pipeline(structure, broken_logic, "fixme", repairer))

        assert result.status == PipelineStatus.RESOLVED
        assert result.initial_report.score == 37
        assert result.final_report.score == 100
        assert result.repair.outcome == RepairOutcome.RESOLVED
        assert result.repair.attempts == 1
        assert result.artifact == good_game

    def test_quick_clean_but_full_retest_fails(self, structure, broken_logic, broken_game):
        repairer = _returning(_quick_clean_only(broken_game))
        result = asyncio.run(run_pipeline(structure, broken_logic, "partial", repairer))

        assert result.repair.success is True
        assert result.final_report.score == 50
        assert result.final_report.passed is False
        assert result.status == PipelineStatus.UNRESOLVED

    def test_pattern_repairer_partially_improves(self, structure, broken_logic):
        result = asyncio.run(run_pipeline(structure, broken_logic, "pattern", PatternRewriteRepairer()))

        assert result.status == PipelineStatus.UNRESOLVED
        assert result.repair.outcome == RepairOutcome.UNRESOLVED
        assert result.repair.attempts == 3
        assert [a.applied for a in result.repair.fix_log] == [True, False, False]
        assert "session.code" not in result.artifact
        assert result.final_report.score == 42
        assert result.final_report.score > result.initial_report.score

    def test_expired_deadline(self, structure, broken_logic):
        repairer = _returning("")
        result = asyncio.run(run_pipeline(
            structure, broken_logic, "late", repairer, deadline=time.monotonic() - 1,
        ))

        assert result.status == PipelineStatus.UNRESOLVED
        assert result.repair.outcome == RepairOutcome.DEADLINE_EXCEEDED
        assert result.repair.attempts == 0
        repairer.repair.assert_not_awaited()

    def test_custom_markers(self, good_logic):
        config = QAConfig(start_marker="<!-- begin -->", end_marker="<!-- end -->")
        structure = "<html>\n<!-- begin -->\n<!-- end -->\n</html>\n"
        result = asyncio.run(run_pipeline(structure, good_logic, "m", _returning(""), config=config))

        assert result.status != PipelineStatus.ASSEMBLY_FAILED
        assert good_logic in result.artifact

    def test_result_serialises(self, structure, good_logic):
        result = asyncio.run(run_pipeline(structure, good_logic, "json", _returning("")))
        payload = result.model_dump(mode="json")
        assert payload["status"] == "passed"
        assert payload["final_report"]["checks"][constants.SESSION_SDK]["score"] == 20


# ---------------------------------------------------------------------------
# 2. Pattern rewriter
# ---------------------------------------------------------------------------
class TestPatternRewriter:

    def test_rewrites_session_alias(self):
        text = "el.textContent = session.code;\nlog(session.code);"
        repaired = asyncio.run(PatternRewriteRepairer().repair(text, ["SDK"], 1))
        assert repaired == "el.textContent = session.sessionCode;\nlog(session.sessionCode);"

    def test_leaves_correct_field_alone(self):
        text, count = SESSION_CODE_ALIAS.apply("session.sessionCode; session.codes")
        assert count == 0
        assert text == "session.sessionCode; session.codes"

    def test_nothing_to_rewrite_raises(self, good_game):
        with pytest.raises(RepairInvocationError, match="No known rewrite"):
            asyncio.run(PatternRewriteRepairer().repair(good_game, ["Timer system"], 1))

    def test_satisfies_repairer_contract(self):
        assert isinstance(PatternRewriteRepairer(), ExternalCodeRepairer)
