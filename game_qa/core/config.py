"""
Configuration
=============
Loads environment variables from .env file using python-dotenv.

Environment Variables:
    ANTHROPIC_API_KEY        — Primary LLM provider API key (Anthropic)
    OPENAI_API_KEY           — Fallback LLM provider API key (OpenAI)
    GROQ_API_KEY             — Second fallback LLM provider (Groq)
    REPAIR_MAX_ATTEMPTS      — Max repair attempts per artifact (default: 3)
    REPAIR_ATTEMPT_TIMEOUT   — Seconds one repair call may take (default: 120)
    REPAIR_DEADLINE          — Seconds the whole repair loop may take (default: 480)
    PASS_THRESHOLD           — Minimum aggregate score to pass (default: 60)

Timeout Philosophy:
    REPAIR_ATTEMPT_TIMEOUT bounds a single call to the repairer.
    REPAIR_DEADLINE bounds the whole loop; whichever expires first wins.

Module constants are read once at import and never mutated. Everything
the analyzer and orchestrator need travels in an explicit QAConfig.
"""
import os
from types import MappingProxyType
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from game_qa.core import constants

load_dotenv()

ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
GROQ_API_KEY = os.getenv("GROQ_API_KEY")

ANTHROPIC_MODEL = os.getenv("ANTHROPIC_MODEL", "claude-3-5-sonnet-latest")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
GROQ_MODEL = os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile")

REPAIR_MAX_ATTEMPTS = int(os.getenv("REPAIR_MAX_ATTEMPTS", constants.MAX_REPAIR_ATTEMPTS))
REPAIR_ATTEMPT_TIMEOUT = float(os.getenv("REPAIR_ATTEMPT_TIMEOUT", 120))
REPAIR_DEADLINE = float(os.getenv("REPAIR_DEADLINE", 480))
PASS_THRESHOLD = int(os.getenv("PASS_THRESHOLD", constants.PASS_THRESHOLD))

# Provider health cooldown
PROVIDER_COOLDOWN_THRESHOLD = int(os.getenv("PROVIDER_COOLDOWN_THRESHOLD", 3))
PROVIDER_COOLDOWN_SKIP_COUNT = int(os.getenv("PROVIDER_COOLDOWN_SKIP_COUNT", 5))

# Log directory for the file handler (empty = console only)
LOG_DIR = os.getenv("LOG_DIR", "logs")


class QAConfig(BaseModel):
    """Explicit, immutable parameters for one pipeline run."""
    model_config = ConfigDict(frozen=True)

    weights: Mapping[str, int] = Field(default_factory=lambda: dict(constants.CHECK_WEIGHTS), validate_default=True)
    pass_threshold: int = constants.PASS_THRESHOLD
    defect_penalty: int = constants.DEFECT_PENALTY
    start_marker: str = constants.MARKER_A
    end_marker: str = constants.MARKER_B
    max_attempts: int = Field(default=constants.MAX_REPAIR_ATTEMPTS, ge=1)
    attempt_timeout: Optional[float] = None
    deadline_seconds: Optional[float] = None

    @field_validator("weights", mode="after")
    @classmethod
    def _freeze_weights(cls, value: Mapping[str, int]) -> Mapping[str, int]:
        # Read-only view shared by every run using this config
        return MappingProxyType(dict(value))

    @field_serializer("weights")
    def _dump_weights(self, value: Mapping[str, int]) -> dict[str, int]:
        return dict(value)

    def weight(self, key: str) -> int:
        return self.weights.get(key, constants.CHECK_WEIGHTS.get(key, 0))

    @classmethod
    def from_env(cls) -> "QAConfig":
        """Build a config from the environment-derived module constants."""
        return cls(
            pass_threshold=PASS_THRESHOLD,
            max_attempts=REPAIR_MAX_ATTEMPTS,
            attempt_timeout=REPAIR_ATTEMPT_TIMEOUT,
            deadline_seconds=REPAIR_DEADLINE,
        )


DEFAULT_CONFIG = QAConfig()
