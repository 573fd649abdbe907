"""
LLM Tool with multi-provider support and automatic fallback.

Provider priority:
1. Gemini (google-genai, cloud, JSON response mode)
2. OpenRouter (OpenAI-compatible HTTP, cloud fallback)

Every call is bounded by provider_timeout_seconds. Providers that fail are
put in backoff by the ProviderHealthTracker and skipped until it expires.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Tuple

import httpx
from google import genai
from google.genai import types

from ..config import Settings, get_settings
from .provider_health import ProviderHealthTracker

logger = logging.getLogger(__name__)

ProviderFunc = Callable[[str, Optional[str], float, int, bool], Awaitable[Optional[str]]]


class LLMTool:
    """
    LLM wrapper with automatic fallback across the configured providers.
    Gemini is PRIMARY, OpenRouter is the cloud fallback.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        health: Optional[ProviderHealthTracker] = None,
    ):
        """Initialize LLM tool."""
        self.settings = settings or get_settings()
        self.health = health or ProviderHealthTracker(settings=self.settings)

        self._gemini_client = None
        self._gemini_configured = False
        self._openrouter_configured = bool(self.settings.openrouter_api_key)
        self.last_provider: Optional[str] = None

        self._configure_providers()

    def _configure_providers(self) -> None:
        """Configure available LLM providers."""
        if self.settings.gemini_api_key:
            try:
                self._gemini_client = genai.Client(api_key=self.settings.gemini_api_key)
                self._gemini_configured = True
                logger.info(f"Gemini configured: {self.settings.gemini_model}")
            except Exception as e:
                logger.warning(f"Failed to configure Gemini: {e}")

        if self._openrouter_configured:
            logger.info(f"OpenRouter configured: {self.settings.openrouter_model}")

    @property
    def any_configured(self) -> bool:
        return self._gemini_configured or self._openrouter_configured

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        json_mode: bool = False,
    ) -> str:
        """Generate text using LLM with automatic fallback.

        Raises RuntimeError when every provider is unconfigured, in backoff,
        or failed on this call.
        """
        providers = self._get_provider_chain()
        if not providers:
            raise RuntimeError("No LLM providers configured")

        errors = []
        timeout = self.settings.provider_timeout_seconds

        for provider_name, provider_func in providers:
            if not self.health.is_available(provider_name):
                logger.info(f"Skipping {provider_name} (backoff active)")
                errors.append(f"{provider_name}: Skipped (backoff)")
                continue

            try:
                logger.debug(f"Trying {provider_name}...")
                response = await asyncio.wait_for(
                    provider_func(prompt, system_prompt, temperature, max_tokens, json_mode),
                    timeout=timeout,
                )
                if not response:
                    raise ValueError("Empty response")
                self.health.record_success(provider_name)
                self.last_provider = provider_name
                logger.info(f"LLM success via {provider_name}")
                return response
            except asyncio.TimeoutError:
                logger.warning(f"{provider_name}: Timed out after {timeout:.0f}s")
                self.health.record_failure(provider_name, "timeout")
                errors.append(f"{provider_name}: Timeout")
            except Exception as e:
                error_str = str(e) or type(e).__name__
                is_rate_limit = "429" in error_str or "RESOURCE_EXHAUSTED" in error_str
                if is_rate_limit:
                    logger.warning(f"{provider_name}: Rate limited")
                else:
                    logger.warning(f"{provider_name} failed: {error_str[:200]}")
                self.health.record_failure(provider_name, "429" if is_rate_limit else error_str)
                errors.append(f"{provider_name}: {error_str[:120]}")

        error_summary = "; ".join(errors[-3:])
        raise RuntimeError(f"All LLM providers failed. Errors: {error_summary}")

    def _get_provider_chain(self) -> List[Tuple[str, ProviderFunc]]:
        """Get ordered list of configured providers.

        Priority: Gemini → OpenRouter.
        """
        providers = []
        if self._gemini_configured:
            providers.append(("gemini", self._call_gemini))
        if self._openrouter_configured:
            providers.append(("openrouter", self._call_openrouter))
        return providers

    async def _call_gemini(
        self,
        prompt: str,
        system_prompt: Optional[str],
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> Optional[str]:
        """Call Gemini API through the async google-genai client."""
        config = types.GenerateContentConfig(
            temperature=temperature,
            max_output_tokens=max_tokens,
        )
        if system_prompt:
            config.system_instruction = system_prompt
        if json_mode:
            config.response_mime_type = "application/json"

        response = await self._gemini_client.aio.models.generate_content(
            model=self.settings.gemini_model,
            contents=prompt,
            config=config,
        )
        return response.text

    async def _call_openrouter(
        self,
        prompt: str,
        system_prompt: Optional[str],
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> Optional[str]:
        """Call OpenRouter API (OpenAI-compatible)."""
        url = "https://openrouter.ai/api/v1/chat/completions"

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        headers = {
            "Authorization": f"Bearer {self.settings.openrouter_api_key}",
            "Content-Type": "application/json",
            "X-Title": "Pin Trends",
        }

        payload = {
            "model": self.settings.openrouter_model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        async with httpx.AsyncClient(timeout=self.settings.provider_timeout_seconds) as client:
            response = await client.post(url, json=payload, headers=headers)
            if response.status_code != 200:
                raise RuntimeError(f"OpenRouter API {response.status_code}: {response.text[:500]}")

            data = response.json()
            choices = data.get("choices") or []
            if not choices:
                raise ValueError(f"OpenRouter returned no choices: {str(data)[:300]}")
            return choices[0].get("message", {}).get("content", "")

    def get_provider_status(self) -> dict:
        """Report configured providers and their breaker state."""
        return {
            "gemini": self._gemini_configured,
            "openrouter": self._openrouter_configured,
            "any_available": bool(self.health.filter_available(
                [name for name, _ in self._get_provider_chain()]
            )),
        }
