"""
LLM Router
==========
Decides which LLM provider serves a repair request and manages switching.

Routing Strategy:
    1. Try the first healthy provider in priority order (Anthropic first)
    2. On failure (HTTP error, timeout, rate limit) → next healthy provider
    3. When every provider fails the repairer raises RepairInvocationError
       and the orchestrator records the attempt as not applied

Provider Health Tracking:
    - Track consecutive failures per provider
    - After PROVIDER_COOLDOWN_THRESHOLD failures in a row, skip the provider
      for PROVIDER_COOLDOWN_SKIP_COUNT selections
    - Reset health counters with reset()
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from game_qa.core.config import (
    ANTHROPIC_API_KEY, OPENAI_API_KEY, GROQ_API_KEY,
    ANTHROPIC_MODEL, OPENAI_MODEL, GROQ_MODEL,
    PROVIDER_COOLDOWN_THRESHOLD, PROVIDER_COOLDOWN_SKIP_COUNT,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Provider Configuration
# ---------------------------------------------------------------------------
@dataclass
class ProviderConfig:
    """Configuration for a single LLM provider."""
    name: str
    api_key: str
    base_url: str
    model: str
    max_retries: int = 2
    timeout_seconds: int = 60
    max_tokens: int = 8192
    temperature: float = 0.1


# Default provider configs
ANTHROPIC_CONFIG = ProviderConfig(
    name="anthropic",
    api_key=ANTHROPIC_API_KEY or "",
    base_url="https://api.anthropic.com/v1",
    model=ANTHROPIC_MODEL,
)

OPENAI_CONFIG = ProviderConfig(
    name="openai",
    api_key=OPENAI_API_KEY or "",
    base_url="https://api.openai.com/v1",
    model=OPENAI_MODEL,
)

GROQ_CONFIG = ProviderConfig(
    name="groq",
    api_key=GROQ_API_KEY or "",
    base_url="https://api.groq.com/openai/v1",
    model=GROQ_MODEL,
    max_retries=1,
)

DEFAULT_PROVIDERS: tuple[ProviderConfig, ...] = (ANTHROPIC_CONFIG, OPENAI_CONFIG, GROQ_CONFIG)


# ---------------------------------------------------------------------------
# Provider Health Tracker
# ---------------------------------------------------------------------------
@dataclass
class ProviderHealth:
    """Tracks consecutive failures and cooldown for a provider."""
    consecutive_failures: int = 0
    is_healthy: bool = True
    max_failures: int = PROVIDER_COOLDOWN_THRESHOLD
    cooldown_remaining: int = 0

    def record_failure(self) -> None:
        """Record a failure. Enter cooldown after max consecutive failures."""
        self.consecutive_failures += 1
        if self.consecutive_failures >= self.max_failures:
            self.is_healthy = False
            self.cooldown_remaining = PROVIDER_COOLDOWN_SKIP_COUNT
            logger.warning(
                "Provider entering cooldown after %d failures (skip %d calls)",
                self.consecutive_failures, self.cooldown_remaining,
            )

    def record_success(self) -> None:
        """Record a success. Reset failure counter."""
        self.consecutive_failures = 0

    def tick_cooldown(self) -> None:
        """Decrement cooldown. Re-enable when it expires."""
        if self.cooldown_remaining > 0:
            self.cooldown_remaining -= 1
            if self.cooldown_remaining <= 0:
                self.is_healthy = True
                # One more failure after cooldown puts it straight back
                self.consecutive_failures = max(1, self.max_failures - 1)
                logger.info("Provider cooldown expired, re-enabled (cautious)")

    def reset(self) -> None:
        self.consecutive_failures = 0
        self.is_healthy = True
        self.cooldown_remaining = 0


# ---------------------------------------------------------------------------
# LLM Router
# ---------------------------------------------------------------------------
class LLMRouter:
    """
    Routes repair requests to the best available provider.

    Usage:
        router = LLMRouter()
        config = router.get_provider()
        # ... make request ...
        router.report_success("anthropic")   # or report_failure("anthropic")
    """

    def __init__(self, providers: Optional[Sequence[ProviderConfig]] = None) -> None:
        self._providers: List[ProviderConfig] = list(providers or DEFAULT_PROVIDERS)
        self._health: Dict[str, ProviderHealth] = {
            provider.name: ProviderHealth() for provider in self._providers
        }

    @property
    def providers(self) -> List[ProviderConfig]:
        return list(self._providers)

    def get_provider(self) -> ProviderConfig:
        """
        Return the first healthy provider.

        Falls back to the first configured provider when every provider is
        cooling down.
        """
        for h in self._health.values():
            h.tick_cooldown()

        for provider in self._providers:
            health = self._health.get(provider.name)
            if health and health.is_healthy:
                logger.debug("Selected provider: %s", provider.name)
                return provider

        logger.warning("All providers unhealthy, falling back to primary")
        return self._providers[0]

    def get_fallback_provider(self, *exclude_names: str) -> ProviderConfig | None:
        """Next healthy provider not in ``exclude_names``, or None."""
        for provider in self._providers:
            if provider.name not in exclude_names:
                health = self._health.get(provider.name)
                if health and health.is_healthy:
                    logger.info("Falling back to %s (skipping %s)", provider.name, ", ".join(exclude_names))
                    return provider
        return None

    def report_success(self, provider_name: str) -> None:
        health = self._health.get(provider_name)
        if health:
            health.record_success()

    def report_failure(self, provider_name: str) -> None:
        health = self._health.get(provider_name)
        if health:
            health.record_failure()

    def reset(self) -> None:
        for health in self._health.values():
            health.reset()

    def get_health(self, provider_name: str) -> ProviderHealth | None:
        return self._health.get(provider_name)

    @property
    def provider_health_state(self) -> Dict[str, Any]:
        """Per-provider health and cooldown, for the /health endpoint."""
        return {
            name: {
                "is_healthy": h.is_healthy,
                "consecutive_failures": h.consecutive_failures,
                "cooldown_remaining": h.cooldown_remaining,
            }
            for name, h in self._health.items()
        }
