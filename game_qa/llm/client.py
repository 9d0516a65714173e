"""
LLM Client
==========
Asynchronous HTTP client wrapper for LLM providers.
Supports Anthropic (Messages API) and any OpenAI-compatible endpoint
(OpenAI, Groq).

Provider Fallback:
    - Primary: first healthy provider chosen by LLMRouter
    - Fallback triggers on: HTTP error, timeout, rate limit, empty response
    - Each provider has independent retry logic (max_retries per provider)
    - HTTP 429 skips the remaining retries and switches provider at once

The client returns raw completion text. Pulling the program out of that
text is the repairer's job (see repairer.extract_program).
"""
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from game_qa.llm.router import ProviderConfig, LLMRouter

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "2023-06-01"


# ---------------------------------------------------------------------------
# LLM Response
# ---------------------------------------------------------------------------
@dataclass
class LLMResponse:
    """Completion text returned by one provider."""
    text: str
    provider_name: str
    success: bool = True
    error: str = ""


# ---------------------------------------------------------------------------
# LLM Client
# ---------------------------------------------------------------------------
class LLMClient:
    """
    Async HTTP client for calling LLM providers.

    Usage:
        client = LLMClient()
        response = await client.complete("Fix this game...", "You are...", config)
        await client.close()
    """

    def __init__(self, http: Optional[httpx.AsyncClient] = None) -> None:
        self._http: Optional[httpx.AsyncClient] = http

    async def _get_http(self, timeout: float) -> httpx.AsyncClient:
        """Lazy-initialise the HTTP client."""
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        return self._http

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._http and not self._http.is_closed:
            await self._http.aclose()
            self._http = None

    async def complete(
        self,
        user_prompt: str,
        system_prompt: str,
        provider: ProviderConfig,
    ) -> LLMResponse:
        """
        Send a prompt to one provider, retrying up to provider.max_retries.

        Returns
        -------
        LLMResponse
            success=False with an error message when every retry failed.
        """
        for attempt in range(1, provider.max_retries + 1):
            try:
                if provider.name == "anthropic":
                    text = await self._call_anthropic(user_prompt, system_prompt, provider)
                else:
                    text = await self._call_openai_compatible(user_prompt, system_prompt, provider)

                if text and text.strip():
                    return LLMResponse(text=text, provider_name=provider.name)

                logger.warning("Provider %s attempt %d: empty response", provider.name, attempt)

            except httpx.TimeoutException:
                logger.warning("Provider %s attempt %d: timeout", provider.name, attempt)
            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                logger.warning("Provider %s attempt %d: HTTP %d", provider.name, attempt, status)
                if status == 429:
                    break
            except httpx.HTTPError as e:
                logger.warning("Provider %s attempt %d: %s", provider.name, attempt, e)
            except ValueError as e:
                logger.warning("Provider %s attempt %d: invalid JSON body (%s)", provider.name, attempt, e)

        return LLMResponse(
            text="",
            provider_name=provider.name,
            success=False,
            error=f"All {provider.max_retries} retries exhausted for {provider.name}",
        )

    async def _call_anthropic(
        self,
        user_prompt: str,
        system_prompt: str,
        provider: ProviderConfig,
    ) -> str:
        """Call the Anthropic Messages API."""
        http = await self._get_http(provider.timeout_seconds)
        headers = {
            "x-api-key": provider.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }
        payload = {
            "model": provider.model,
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_prompt}],
            "max_tokens": provider.max_tokens,
            "temperature": provider.temperature,
        }
        resp = await http.post(f"{provider.base_url}/messages", json=payload, headers=headers)
        resp.raise_for_status()
        data = resp.json()

        try:
            blocks = data.get("content", [])
            return "".join(block.get("text", "") for block in blocks if block.get("type") == "text")
        except (AttributeError, TypeError):
            return ""

    async def _call_openai_compatible(
        self,
        user_prompt: str,
        system_prompt: str,
        provider: ProviderConfig,
    ) -> str:
        """Call an OpenAI-compatible chat completions API (OpenAI, Groq)."""
        http = await self._get_http(provider.timeout_seconds)
        headers = {
            "Authorization": f"Bearer {provider.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": provider.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": provider.temperature,
            "max_tokens": provider.max_tokens,
        }
        resp = await http.post(f"{provider.base_url}/chat/completions", json=payload, headers=headers)
        resp.raise_for_status()
        data = resp.json()

        try:
            choices = data.get("choices", [])
            if choices:
                return choices[0].get("message", {}).get("content", "") or ""
        except (IndexError, KeyError, TypeError, AttributeError):
            pass
        return ""

    async def complete_with_fallback(
        self,
        user_prompt: str,
        system_prompt: str,
        router: LLMRouter,
    ) -> LLMResponse:
        """
        Call the router's primary provider, then each healthy fallback in turn.

        Returns
        -------
        LLMResponse
            Response from whichever provider succeeded, or a failure response.
        """
        primary = router.get_provider()
        tried = [primary.name]
        response = await self.complete(user_prompt, system_prompt, primary)

        while True:
            if response.success:
                router.report_success(response.provider_name)
                return response
            router.report_failure(response.provider_name)

            fallback = router.get_fallback_provider(*tried)
            if fallback is None:
                break
            tried.append(fallback.name)
            response = await self.complete(user_prompt, system_prompt, fallback)

        return LLMResponse(
            text="",
            provider_name=primary.name,
            success=False,
            error=f"All providers failed ({', '.join(tried)})",
        )
