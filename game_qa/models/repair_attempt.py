"""
Repair Models
=============
Pydantic models tracking the repair loop.

RepairAttempt — one iteration of the loop:
    sequence         — 1-based attempt number
    issues_addressed — names of the failing checks sent to the repairer
    applied          — True if the repairer returned a program that replaced
                       the current artifact
    error            — repairer / timeout message when applied is False

RepairResult — the outcome of one fix_defects() call:
    success          — True for PASSED and RESOLVED outcomes only
    outcome          — see RepairOutcome
    final_artifact   — last artifact obtained (original if nothing applied)
    attempts         — number of attempts started
    fix_log          — ordered RepairAttempt history, len <= max attempts
    message          — set when success is False
"""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class RepairOutcome(str, Enum):
    PASSED = "passed"                        # report already passing, nothing to do
    RESOLVED = "resolved"                    # quick validation came back clean
    UNRESOLVED = "unresolved"                # attempts exhausted
    DEADLINE_EXCEEDED = "deadline_exceeded"  # caller deadline hit mid-loop


class RepairAttempt(BaseModel):
    sequence: int
    issues_addressed: List[str] = []
    applied: bool = False
    error: Optional[str] = None


class RepairResult(BaseModel):
    success: bool
    outcome: RepairOutcome
    final_artifact: str
    attempts: int = 0
    fix_log: List[RepairAttempt] = []
    message: Optional[str] = None
