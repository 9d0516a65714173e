"""
LLM Code Repairer
=================
ExternalCodeRepairer backed by the LLM provider chain.

Flow per call:
    1. Build the repair prompt from the issue batch and attempt number
    2. Call the providers with fallback (LLMClient + LLMRouter)
    3. Extract the program from the completion text
    4. Raise RepairInvocationError if any step yields no program

The repairer never validates the program beyond extraction; judging the
result is the orchestrator's quick validator's job.
"""
import logging
import re
from typing import Optional, Sequence

from game_qa.core.errors import RepairInvocationError
from game_qa.llm.client import LLMClient
from game_qa.llm.prompts import SYSTEM_PROMPT, build_repair_prompt
from game_qa.llm.router import LLMRouter

logger = logging.getLogger(__name__)

_HTML_FENCE_RE = re.compile(r"```html\n([\s\S]*?)\n```")
_DOCTYPE = "<!DOCTYPE html>"


def extract_program(content: str) -> str:
    """
    Pull the complete program out of a completion.

    Order of preference:
        1. the first ```html fenced block
        2. the whole text, when it contains a <!DOCTYPE html> declaration

    Raises
    ------
    RepairInvocationError
        When neither boundary is recognisable.
    """
    match = _HTML_FENCE_RE.search(content or "")
    if match and match.group(1).strip():
        return match.group(1).strip()

    if content and _DOCTYPE in content:
        return content.strip()

    raise RepairInvocationError("No HTML program found in repair response")


class LLMCodeRepairer:
    """
    Rewrites an artifact with an LLM to address a batch of issues.

    Parameters
    ----------
    router : LLMRouter or None
        Provider router (auto-created if not provided).
    client : LLMClient or None
        HTTP client (auto-created if not provided).
    """

    def __init__(
        self,
        router: Optional[LLMRouter] = None,
        client: Optional[LLMClient] = None,
    ) -> None:
        self.router = router or LLMRouter()
        self.client = client or LLMClient()

    async def repair(
        self,
        artifact: str,
        issue_descriptions: Sequence[str],
        attempt_number: int,
    ) -> str:
        prompt = build_repair_prompt(artifact, issue_descriptions, attempt_number)
        response = await self.client.complete_with_fallback(
            user_prompt=prompt,
            system_prompt=SYSTEM_PROMPT,
            router=self.router,
        )
        if not response.success:
            raise RepairInvocationError(f"Repair generation failed: {response.error}")

        program = extract_program(response.text)
        logger.info(
            "Attempt %d: %s returned %d chars of program text",
            attempt_number, response.provider_name, len(program),
        )
        return program

    async def close(self) -> None:
        """Clean up the LLM client."""
        if self.client:
            await self.client.close()
