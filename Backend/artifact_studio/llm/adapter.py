# artifact_studio/llm/adapter.py
"""
Generation service client - single interface over all providers.

Shapes the two-message request, enforces a per-call timeout, retries
transient failures with backoff and sanitizes successful responses.
Stateless between calls: one instance may serve many sequential calls.
"""
import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional

from artifact_studio.core.config import settings
from artifact_studio.core.exceptions import (
    GenerationError,
    GenerationTimeoutError,
    MalformedResponseError,
    ServerError,
)
from artifact_studio.core.logging import log
from artifact_studio.core.result import Err, Ok, Result
from artifact_studio.llm.sanitizer import sanitize_response
from artifact_studio.orchestration.cancellation import CancellationToken
from artifact_studio.orchestration.retry_policy import RetryPolicy


# Provider contract: call(prompt, system_prompt, model, temperature, max_tokens, timeout) -> str
ProviderCall = Callable[..., Awaitable[str]]
PostProcess = Callable[[str], str]


class GenerationClient:
    """
    Unified client for the external text-generation service.

    Handles:
    - Provider selection
    - Per-call timeout
    - Bounded retries for transient failures (RetryPolicy)
    - Response sanitization
    """

    def __init__(
        self,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        provider_call: Optional[ProviderCall] = None,
        retry_policy: Optional[RetryPolicy] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.provider = provider or settings.llm.default_provider
        self.model = model or settings.llm.default_model
        self.timeout = timeout or settings.llm.request_timeout
        self.retry_policy = retry_policy or RetryPolicy(
            initial_delay=settings.generation.initial_backoff,
            multiplier=settings.generation.backoff_multiplier,
        )
        self._provider_call = provider_call or self._resolve_provider(self.provider)

    @staticmethod
    def _resolve_provider(provider: str) -> ProviderCall:
        # Import here to avoid circular imports
        from .providers import PROVIDERS

        if provider not in PROVIDERS:
            raise ValueError(f"Unknown provider: {provider} (known: {sorted(PROVIDERS)})")
        return PROVIDERS[provider]

    async def _call_once(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int,
        timeout: float,
    ) -> str:
        """
        Single provider call - no retries.
        """
        try:
            return await asyncio.wait_for(
                self._provider_call(
                    prompt=user_prompt,
                    system_prompt=system_prompt,
                    model=self.model,
                    temperature=temperature,
                    max_tokens=max_tokens,
                    timeout=timeout,
                ),
                timeout=timeout,
            )
        except GenerationError:
            raise
        except asyncio.TimeoutError:
            raise GenerationTimeoutError(self.provider, f"No response within {timeout:.0f}s")
        except Exception as e:
            raise ServerError(self.provider, f"Provider error: {e}")

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_attempts: int = 2,
        timeout: Optional[float] = None,
        temperature: float = 0.3,
        max_tokens: int = 3000,
        cancel_token: Optional[CancellationToken] = None,
        label: str = "generation",
        postprocess: Optional[PostProcess] = sanitize_response,
    ) -> str:
        """
        Generate text for a system + user prompt pair.

        Args:
            max_attempts: Total attempts including the first one
            timeout: Per-attempt timeout in seconds (defaults to settings)
            temperature: Sampling temperature
            max_tokens: Maximum response tokens
            cancel_token: Checked before every attempt
            label: Name used in logs
            postprocess: Cleaning applied to the response (None for raw text)

        Returns:
            The (post-processed) response text

        Raises:
            GenerationError: After exhausting attempts or on a non-retryable failure
            RunCancelledError: If cancelled before an attempt
        """
        timeout = timeout or self.timeout

        async def attempt() -> str:
            text = await self._call_once(system_prompt, user_prompt, temperature, max_tokens, timeout)
            if not text or not text.strip():
                raise MalformedResponseError(self.provider, "Empty response")
            return text

        log("LLM", f"→ {label} [{self.provider}/{self.model}] prompt={len(user_prompt)} chars, max_tokens={max_tokens}")
        raw = await self.retry_policy.run(
            attempt,
            max_attempts=max_attempts,
            label=label,
            cancel_token=cancel_token,
        )
        log("LLM", f"← {label}: {len(raw)} chars")

        return postprocess(raw) if postprocess else raw

    async def try_generate(self, system_prompt: str, user_prompt: str, **kwargs: Any) -> Result[str]:
        """
        Like generate(), but returns Ok(text) | Err(GenerationError) instead of raising.

        RunCancelledError still propagates: cancellation is not a step failure.
        """
        try:
            return Ok(await self.generate(system_prompt, user_prompt, **kwargs))
        except GenerationError as e:
            return Err(e)

    async def check_connection(self) -> bool:
        """Send a minimal request to verify credentials and reachability."""
        try:
            await self.generate(
                "",
                "Hello",
                max_attempts=1,
                max_tokens=10,
                timeout=min(self.timeout, 30.0),
                label="connection check",
                postprocess=None,
            )
            return True
        except GenerationError as e:
            log("LLM", f"Connection check failed: {e}")
            return False

    def api_info(self) -> Dict[str, Any]:
        info: Dict[str, Any] = {
            "provider": self.provider,
            "model": self.model,
            "has_api_key": bool(settings.llm.api_key_for(self.provider)),
        }
        if self.provider == "deepseek":
            info["base_url"] = settings.llm.deepseek_base_url
        return info
