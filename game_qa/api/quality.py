"""
Quality API
===========
HTTP routes exposing the quality gate to external callers.

    POST /api/assemble  — splice logic into a structure template
    POST /api/test      — score an artifact, return the TestReport
    POST /api/report    — score an artifact, return the rendered text report
    POST /api/fix       — score, then run the repair loop
    POST /api/pipeline  — assemble → test → repair → re-test

StructuralError maps to HTTP 422; every other failure is reported inside
the response body, never as an HTTP error.
"""
import logging
from typing import Literal

from fastapi import APIRouter, HTTPException
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from game_qa.agents.repair_orchestrator import ExternalCodeRepairer, RepairOrchestrator
from game_qa.analyzer.quality_analyzer import QualityAnalyzer
from game_qa.assembler.template_assembler import assemble
from game_qa.core.config import QAConfig
from game_qa.core.errors import StructuralError
from game_qa.core.report_formatter import render
from game_qa.llm.repairer import LLMCodeRepairer
from game_qa.models.repair_attempt import RepairResult
from game_qa.models.test_report import TestReport
from game_qa.services.pattern_rewriter import PatternRewriteRepairer
from game_qa.services.pipeline import PipelineResult, PipelineStatus, run_pipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Quality"])

RepairerName = Literal["llm", "pattern"]


# ---------------------------------------------------------------------------
# Request / Response schemas
# ---------------------------------------------------------------------------
class AssembleRequest(BaseModel):
    structure: str
    logic: str


class AssembleResponse(BaseModel):
    artifact: str


class ArtifactRequest(BaseModel):
    artifact: str
    artifact_id: str = "artifact"


class FixRequest(ArtifactRequest):
    repairer: RepairerName = "llm"


class FixResponse(BaseModel):
    report: TestReport
    repair: RepairResult


class PipelineRequest(AssembleRequest):
    artifact_id: str = "artifact"
    repairer: RepairerName = "llm"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _request_config() -> QAConfig:
    """One config per request, shared by every route."""
    return QAConfig.from_env()


def _get_repairer(name: str) -> ExternalCodeRepairer:
    if name == "pattern":
        return PatternRewriteRepairer()
    return LLMCodeRepairer()


async def _close(repairer: ExternalCodeRepairer) -> None:
    close = getattr(repairer, "close", None)
    if close is not None:
        await close()


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
@router.post("/assemble", response_model=AssembleResponse)
async def assemble_artifact(request: AssembleRequest):
    config = _request_config()
    try:
        artifact = assemble(
            request.structure,
            request.logic,
            start_marker=config.start_marker,
            end_marker=config.end_marker,
        )
        return AssembleResponse(artifact=artifact)
    except StructuralError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/test", response_model=TestReport)
async def test_artifact_route(request: ArtifactRequest):
    return QualityAnalyzer(_request_config()).test_artifact(request.artifact, request.artifact_id)


@router.post("/report", response_class=PlainTextResponse)
async def report_artifact(request: ArtifactRequest):
    report = QualityAnalyzer(_request_config()).test_artifact(request.artifact, request.artifact_id)
    return render(report)


@router.post("/fix", response_model=FixResponse)
async def fix_artifact(request: FixRequest):
    config = _request_config()
    report = QualityAnalyzer(config).test_artifact(request.artifact, request.artifact_id)
    repairer = _get_repairer(request.repairer)
    try:
        result = await RepairOrchestrator(repairer, config=config).fix_defects(request.artifact, report)
    finally:
        await _close(repairer)
    return FixResponse(report=report, repair=result)


@router.post("/pipeline", response_model=PipelineResult)
async def pipeline_route(request: PipelineRequest):
    repairer = _get_repairer(request.repairer)
    try:
        result = await run_pipeline(
            request.structure,
            request.logic,
            request.artifact_id,
            repairer,
            config=_request_config(),
        )
    finally:
        await _close(repairer)
    if result.status == PipelineStatus.ASSEMBLY_FAILED:
        raise HTTPException(status_code=422, detail=result.error)
    return result
