# artifact_studio/llm/providers/deepseek.py
"""
DeepSeek provider implementation (OpenAI-compatible chat completions).
"""
from typing import Optional

from artifact_studio.core.config import settings
from .openai import call_chat_completions


DEFAULT_MODEL = "deepseek-chat"


def api_url() -> str:
    return f"{settings.llm.deepseek_base_url.rstrip('/')}/v1/chat/completions"


async def call(
    prompt: str,
    system_prompt: str = "",
    model: Optional[str] = None,
    temperature: float = 0.7,
    max_tokens: int = 4000,
    timeout: Optional[float] = None,
) -> str:
    """
    Call DeepSeek API.

    Returns:
        The generated text

    Raises:
        GenerationError subclass on API errors
    """
    return await call_chat_completions(
        provider="deepseek",
        url=api_url(),
        api_key=settings.llm.deepseek_api_key,
        prompt=prompt,
        system_prompt=system_prompt,
        model=model or DEFAULT_MODEL,
        temperature=temperature,
        max_tokens=max_tokens,
        timeout=timeout or settings.llm.request_timeout,
    )
