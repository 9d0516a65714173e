"""
Check Result Model
==================
Pydantic model for the outcome of one weighted rubric category.

Fields:
    key         — stable category key (e.g. "session_sdk")
    name        — human-readable category name
    passed      — number of subchecks that passed
    total       — number of subchecks evaluated
    success     — True only if every subcheck passed
    score       — weight when successful, else floor(passed / total * weight)
    weight      — maximum points for the category
    issues      — issue strings surfaced to the report and the repairer
    details     — per-subcheck outcome, keyed by rule name

Immutable once built: a CheckResult belongs to exactly one TestReport.
"""
from typing import Dict, List

from pydantic import BaseModel, ConfigDict


class CheckResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    name: str
    passed: int
    total: int
    success: bool
    score: int
    weight: int
    issues: List[str] = []
    details: Dict[str, bool] = {}

    def describe(self) -> str:
        """One-line summary used when describing failures to a repairer."""
        return f"{self.name} failed ({self.passed}/{self.total})"
