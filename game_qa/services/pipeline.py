"""
Quality Pipeline
================
End-to-end run: Assemble → Test → Repair → Re-test.

Caller-visible outcomes (PipelineStatus):
    ASSEMBLY_FAILED — structure template broken; nothing was tested
    PASSED          — first report passed; no repair attempted
    RESOLVED        — repair loop reported success AND the full re-test passed
    UNRESOLVED      — repair exhausted, hit the deadline, or the full re-test
                      still fails (artifact may still be partially improved)

Only the assembler's StructuralError is turned into a status here; it is
the sole hard failure of the core and is never retried.
"""
import logging
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from game_qa.agents.repair_orchestrator import ExternalCodeRepairer, RepairOrchestrator
from game_qa.analyzer.quality_analyzer import QualityAnalyzer
from game_qa.assembler.template_assembler import assemble
from game_qa.core.config import DEFAULT_CONFIG, QAConfig
from game_qa.core.errors import StructuralError
from game_qa.models.repair_attempt import RepairResult
from game_qa.models.test_report import TestReport

logger = logging.getLogger(__name__)


class PipelineStatus(str, Enum):
    ASSEMBLY_FAILED = "assembly_failed"
    PASSED = "passed"
    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"


class PipelineResult(BaseModel):
    status: PipelineStatus
    artifact: Optional[str] = None
    initial_report: Optional[TestReport] = None
    final_report: Optional[TestReport] = None
    repair: Optional[RepairResult] = None
    error: Optional[str] = None


async def run_pipeline(
    structure: str,
    logic: str,
    artifact_id: str,
    repairer: ExternalCodeRepairer,
    *,
    config: Optional[QAConfig] = None,
    deadline: Optional[float] = None,
) -> PipelineResult:
    """
    Assemble, score and (if needed) repair one artifact.

    Parameters
    ----------
    structure, logic : str
        Template text with both markers, and the logic block to splice in.
    artifact_id : str
        Identifier carried into every TestReport.
    repairer : ExternalCodeRepairer
        Repair capability used when the first report fails.
    config : QAConfig or None
        Explicit run parameters (defaults if omitted).
    deadline : float or None
        Absolute time.monotonic() deadline for the repair loop.

    Returns
    -------
    PipelineResult
    """
    config = config or DEFAULT_CONFIG

    try:
        artifact = assemble(
            structure,
            logic,
            start_marker=config.start_marker,
            end_marker=config.end_marker,
        )
    except StructuralError as e:
        logger.error("Assembly failed for %s: %s", artifact_id, e)
        return PipelineResult(status=PipelineStatus.ASSEMBLY_FAILED, error=str(e))

    analyzer = QualityAnalyzer(config)
    initial = analyzer.test_artifact(artifact, artifact_id)
    if initial.passed:
        return PipelineResult(
            status=PipelineStatus.PASSED,
            artifact=artifact,
            initial_report=initial,
            final_report=initial,
        )

    orchestrator = RepairOrchestrator(repairer, config=config)
    repair = await orchestrator.fix_defects(artifact, initial, deadline=deadline)

    final = analyzer.test_artifact(repair.final_artifact, artifact_id)
    status = PipelineStatus.RESOLVED if repair.success and final.passed else PipelineStatus.UNRESOLVED
    logger.info(
        "Pipeline %s for %s: %d → %d (%s → %s)",
        status.value, artifact_id, initial.score, final.score, initial.grade, final.grade,
    )
    return PipelineResult(
        status=status,
        artifact=repair.final_artifact,
        initial_report=initial,
        final_report=final,
        repair=repair,
    )
