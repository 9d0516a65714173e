"""
Repair Orchestrator
===================
Drives the bounded Repair → Validate loop for a failing artifact.

State machine:
    Idle → Testing → {Passed | Repairing}
    Repairing → Validating → {Resolved | Repairing | Exhausted}
    any waiting state → DeadlineExceeded (caller deadline elapsed)

Loop rules:
    - A passing report returns immediately: 0 attempts, empty fix log.
    - All failing checks are sent to the repairer as ONE batch per attempt.
    - Each attempt replaces the whole artifact; nothing is patched in place.
      A later attempt can therefore drop a fix made by an earlier one.
    - A failed repairer call (error, timeout, empty output) is logged into
      the fix log and the loop continues with the next attempt.
    - After an applied attempt only the quick validator runs; a clean quick
      validation ends the loop early.
    - The caller's deadline spans the whole loop, not a single attempt.

Failure semantics:
    fix_defects() never raises. Every failure mode is reported through
    RepairResult.success / outcome and the fix log. Task cancellation
    (asyncio.CancelledError) is the caller's own signal and propagates.
"""
import asyncio
import logging
import time
from enum import Enum
from typing import Dict, List, Optional, Protocol, Sequence, runtime_checkable

from game_qa.core.config import DEFAULT_CONFIG, QAConfig
from game_qa.core.constants import DEADLINE_MESSAGE, RESIDUAL_DEFECTS_MESSAGE
from game_qa.models.check_result import CheckResult
from game_qa.models.repair_attempt import RepairAttempt, RepairOutcome, RepairResult
from game_qa.models.test_report import TestReport
from .quick_validator import DEFAULT_QUICK_RULES, QuickRule, quick_validate

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Repairer contract
# ---------------------------------------------------------------------------
@runtime_checkable
class ExternalCodeRepairer(Protocol):
    """
    Anything that can rewrite an artifact to address a batch of issues.

    Must return the complete repaired program text, or raise
    RepairInvocationError when no extractable program was produced.
    """

    async def repair(
        self,
        artifact: str,
        issue_descriptions: Sequence[str],
        attempt_number: int,
    ) -> str:
        ...


class RepairState(str, Enum):
    IDLE = "idle"
    TESTING = "testing"
    PASSED = "passed"
    REPAIRING = "repairing"
    VALIDATING = "validating"
    RESOLVED = "resolved"
    EXHAUSTED = "exhausted"
    DEADLINE_EXCEEDED = "deadline_exceeded"


def describe_failures(failed: Sequence[CheckResult]) -> List[str]:
    """One description per failing check: summary line plus its issues."""
    descriptions: List[str] = []
    for check in failed:
        lines = [check.describe()]
        lines.extend(f"- {issue}" for issue in check.issues)
        descriptions.append("\n".join(lines))
    return descriptions


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------
class RepairOrchestrator:
    """
    Bounded-retry repair loop around an ExternalCodeRepairer.

    Parameters
    ----------
    repairer : ExternalCodeRepairer
        The fallible external repair capability.
    config : QAConfig or None
        Supplies max_attempts, attempt_timeout and deadline_seconds defaults.
    max_attempts : int or None
        Overrides config.max_attempts.
    attempt_timeout : float or None
        Seconds allowed for one repairer call (None = unbounded).
    quick_rules : dict or None
        Category key → quick validation rule (defaults to DEFAULT_QUICK_RULES).

    The orchestrator holds only this fixed configuration, so one instance
    may serve concurrent fix_defects() calls.
    """

    def __init__(
        self,
        repairer: ExternalCodeRepairer,
        config: Optional[QAConfig] = None,
        max_attempts: Optional[int] = None,
        attempt_timeout: Optional[float] = None,
        quick_rules: Optional[Dict[str, QuickRule]] = None,
    ) -> None:
        self.repairer = repairer
        self.config = config or DEFAULT_CONFIG
        self.max_attempts = max_attempts if max_attempts is not None else self.config.max_attempts
        self.attempt_timeout = attempt_timeout if attempt_timeout is not None else self.config.attempt_timeout
        self.quick_rules = quick_rules if quick_rules is not None else DEFAULT_QUICK_RULES
        if self.max_attempts < 0:
            raise ValueError(f"max_attempts must be >= 0, got {self.max_attempts}")

    # -------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------
    async def fix_defects(
        self,
        artifact: str,
        report: TestReport,
        *,
        deadline: Optional[float] = None,
        timeout: Optional[float] = None,
    ) -> RepairResult:
        """
        Attempt to repair ``artifact`` until quick validation is clean.

        Parameters
        ----------
        artifact : str
            The artifact version that ``report`` was produced from.
        report : TestReport
            Full analyzer report for ``artifact``.
        deadline : float or None
            Absolute ``time.monotonic()`` value by which the loop must stop.
        timeout : float or None
            Seconds budget for the whole loop, measured from this call.
            Falls back to config.deadline_seconds. The earlier of
            ``deadline`` and ``timeout`` wins.

        Returns
        -------
        RepairResult
        """
        artifact_id = report.artifact_id
        self._transition(artifact_id, RepairState.IDLE)
        self._transition(artifact_id, RepairState.TESTING)

        if report.passed:
            self._transition(artifact_id, RepairState.PASSED)
            logger.info("No repair needed for %s (%d/100)", artifact_id, report.score)
            return RepairResult(
                success=True,
                outcome=RepairOutcome.PASSED,
                final_artifact=artifact,
                attempts=0,
                fix_log=[],
            )

        failed = report.failed_checks()
        names = [check.name for check in failed]
        keys = [check.key for check in failed]
        descriptions = describe_failures(failed)
        end_at = self._resolve_deadline(deadline, timeout)

        current = artifact
        fix_log: List[RepairAttempt] = []

        for attempt in range(1, self.max_attempts + 1):
            remaining = self._remaining(end_at)
            if remaining is not None and remaining <= 0:
                return self._deadline_result(artifact_id, current, attempt - 1, fix_log)

            self._transition(artifact_id, RepairState.REPAIRING)
            logger.info(
                "Repair attempt %d/%d for %s (%d failing checks)",
                attempt, self.max_attempts, artifact_id, len(failed),
            )
            limit = self._attempt_limit(remaining)
            started = time.monotonic()

            try:
                repaired = await asyncio.wait_for(
                    self.repairer.repair(current, list(descriptions), attempt),
                    timeout=limit,
                )
            except asyncio.TimeoutError as e:
                if self._deadline_hit(end_at, remaining, started, limit):
                    fix_log.append(RepairAttempt(
                        sequence=attempt,
                        issues_addressed=names,
                        applied=False,
                        error="deadline exceeded during repair call",
                    ))
                    return self._deadline_result(artifact_id, current, attempt, fix_log)
                error = self._timeout_message(started, limit, e)
                logger.warning("Attempt %d for %s: %s", attempt, artifact_id, error)
                fix_log.append(RepairAttempt(
                    sequence=attempt,
                    issues_addressed=names,
                    applied=False,
                    error=error,
                ))
                continue
            except Exception as e:
                logger.warning("Attempt %d for %s failed: %s", attempt, artifact_id, e)
                fix_log.append(RepairAttempt(
                    sequence=attempt,
                    issues_addressed=names,
                    applied=False,
                    error=str(e) or type(e).__name__,
                ))
                continue

            if not isinstance(repaired, str) or not repaired.strip():
                logger.warning("Attempt %d for %s returned no program text", attempt, artifact_id)
                fix_log.append(RepairAttempt(
                    sequence=attempt,
                    issues_addressed=names,
                    applied=False,
                    error="repairer returned no program text",
                ))
                continue

            current = repaired
            fix_log.append(RepairAttempt(sequence=attempt, issues_addressed=names, applied=True))

            self._transition(artifact_id, RepairState.VALIDATING)
            residuals = quick_validate(current, keys, self.quick_rules)
            if not residuals:
                self._transition(artifact_id, RepairState.RESOLVED)
                logger.info("All targeted defects resolved for %s after %d attempt(s)", artifact_id, attempt)
                return RepairResult(
                    success=True,
                    outcome=RepairOutcome.RESOLVED,
                    final_artifact=current,
                    attempts=attempt,
                    fix_log=fix_log,
                )
            logger.info("Attempt %d for %s left residuals: %s", attempt, artifact_id, "; ".join(residuals))

        self._transition(artifact_id, RepairState.EXHAUSTED)
        logger.warning("Max repair attempts reached for %s, partially repaired", artifact_id)
        return RepairResult(
            success=False,
            outcome=RepairOutcome.UNRESOLVED,
            final_artifact=current,
            attempts=self.max_attempts,
            fix_log=fix_log,
            message=RESIDUAL_DEFECTS_MESSAGE,
        )

    # -------------------------------------------------------------------
    # Internal Helpers
    # -------------------------------------------------------------------
    def _resolve_deadline(self, deadline: Optional[float], timeout: Optional[float]) -> Optional[float]:
        budget = timeout if timeout is not None else self.config.deadline_seconds
        candidates = [d for d in (deadline,) if d is not None]
        if budget is not None:
            candidates.append(time.monotonic() + budget)
        return min(candidates) if candidates else None

    @staticmethod
    def _remaining(end_at: Optional[float]) -> Optional[float]:
        if end_at is None:
            return None
        return end_at - time.monotonic()

    @classmethod
    def _expired(cls, end_at: Optional[float]) -> bool:
        remaining = cls._remaining(end_at)
        return remaining is not None and remaining <= 0

    def _deadline_hit(
        self,
        end_at: Optional[float],
        remaining: Optional[float],
        started: float,
        limit: Optional[float],
    ) -> bool:
        """
        True when a TimeoutError means the caller's deadline ran out.

        A TimeoutError raised by the repairer itself before ``limit``
        elapsed is an ordinary failed attempt, not the deadline.
        """
        if self._expired(end_at):
            return True
        if remaining is None or limit is None:
            return False
        deadline_capped = self.attempt_timeout is None or remaining <= self.attempt_timeout
        return deadline_capped and self._limit_elapsed(started, limit)

    @staticmethod
    def _limit_elapsed(started: float, limit: Optional[float]) -> bool:
        # asyncio timers may fire a hair early
        return limit is not None and time.monotonic() - started >= limit * 0.9

    def _timeout_message(self, started: float, limit: Optional[float], error: BaseException) -> str:
        if self._limit_elapsed(started, limit):
            return f"repair call timed out after {limit:.1f}s"
        return str(error) or "repairer raised TimeoutError"

    def _attempt_limit(self, remaining: Optional[float]) -> Optional[float]:
        limits = [t for t in (self.attempt_timeout, remaining) if t is not None]
        return min(limits) if limits else None

    def _deadline_result(
        self,
        artifact_id: str,
        current: str,
        attempts: int,
        fix_log: List[RepairAttempt],
    ) -> RepairResult:
        self._transition(artifact_id, RepairState.DEADLINE_EXCEEDED)
        logger.warning("Deadline exceeded for %s after %d attempt(s)", artifact_id, attempts)
        return RepairResult(
            success=False,
            outcome=RepairOutcome.DEADLINE_EXCEEDED,
            final_artifact=current,
            attempts=attempts,
            fix_log=fix_log,
            message=DEADLINE_MESSAGE,
        )

    @staticmethod
    def _transition(artifact_id: str, state: RepairState) -> None:
        logger.debug("Repair state for %s → %s", artifact_id, state.value)


async def fix_defects(
    artifact: str,
    report: TestReport,
    repairer: ExternalCodeRepairer,
    *,
    config: Optional[QAConfig] = None,
    deadline: Optional[float] = None,
    timeout: Optional[float] = None,
) -> RepairResult:
    """Convenience wrapper: one-off RepairOrchestrator(repairer, config).fix_defects()."""
    orchestrator = RepairOrchestrator(repairer, config=config)
    return await orchestrator.fix_defects(artifact, report, deadline=deadline, timeout=timeout)
