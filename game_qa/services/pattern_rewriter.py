"""
Pattern Rewriter
================
Offline ExternalCodeRepairer for defects with a known one-line fix.

NO LLM HERE. Each rewrite is an explicit regex substitution. Defects that
need real restructuring (ball stuck to paddle, dead timer) have no rewrite
and are left to the LLM repairer.

If no rewrite changes the artifact the call raises RepairInvocationError,
so the orchestrator logs the attempt as not applied.
"""
import logging
import re
from dataclasses import dataclass
from typing import Sequence, Tuple

from game_qa.core.errors import RepairInvocationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rewrite:
    name: str
    pattern: re.Pattern
    replacement: str

    def apply(self, text: str) -> Tuple[str, int]:
        return self.pattern.subn(self.replacement, text)


SESSION_CODE_ALIAS = Rewrite(
    name="session.code → session.sessionCode",
    pattern=re.compile(r"session\.code\b"),
    replacement="session.sessionCode",
)

DEFAULT_REWRITES: tuple[Rewrite, ...] = (SESSION_CODE_ALIAS,)


class PatternRewriteRepairer:
    """Applies every known rewrite; fails when nothing changed."""

    def __init__(self, rewrites: Sequence[Rewrite] = DEFAULT_REWRITES) -> None:
        self.rewrites = tuple(rewrites)

    async def repair(
        self,
        artifact: str,
        issue_descriptions: Sequence[str],
        attempt_number: int,
    ) -> str:
        text = artifact
        applied = 0
        for rewrite in self.rewrites:
            text, count = rewrite.apply(text)
            if count:
                logger.info("Attempt %d: applied %s (%d occurrence(s))", attempt_number, rewrite.name, count)
                applied += count

        if not applied:
            raise RepairInvocationError("No known rewrite applies to this artifact")
        return text
