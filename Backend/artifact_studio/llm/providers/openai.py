# artifact_studio/llm/providers/openai.py
"""
OpenAI provider implementation (chat completions).

The request/response helpers are shared with every OpenAI-compatible
endpoint (see deepseek.py).
"""
from typing import Any, Dict, Optional

from artifact_studio.core.config import settings
from artifact_studio.core.exceptions import AuthError, MalformedResponseError
from .base import post_json


DEFAULT_MODEL = "gpt-4o-mini"
API_URL = "https://api.openai.com/v1/chat/completions"


def build_chat_payload(
    prompt: str,
    system_prompt: str,
    model: str,
    temperature: float,
    max_tokens: int,
) -> Dict[str, Any]:
    messages = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": prompt})

    return {
        "model": model,
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_tokens,
        "stream": False,
    }


def extract_chat_text(provider: str, data: Dict[str, Any]) -> str:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise MalformedResponseError(provider, f"Failed to parse response: {e}")
    if not content:
        raise MalformedResponseError(provider, "Empty completion")
    return content


async def call_chat_completions(
    provider: str,
    url: str,
    api_key: Optional[str],
    prompt: str,
    system_prompt: str,
    model: str,
    temperature: float,
    max_tokens: int,
    timeout: float,
) -> str:
    if not api_key:
        raise AuthError(provider, f"{provider.upper()}_API_KEY not configured")

    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }
    payload = build_chat_payload(prompt, system_prompt, model, temperature, max_tokens)
    data = await post_json(provider, url, payload, timeout, headers=headers)
    return extract_chat_text(provider, data)


async def call(
    prompt: str,
    system_prompt: str = "",
    model: Optional[str] = None,
    temperature: float = 0.7,
    max_tokens: int = 4000,
    timeout: Optional[float] = None,
) -> str:
    """
    Call OpenAI API.

    Returns:
        The generated text

    Raises:
        GenerationError subclass on API errors
    """
    return await call_chat_completions(
        provider="openai",
        url=API_URL,
        api_key=settings.llm.openai_api_key,
        prompt=prompt,
        system_prompt=system_prompt,
        model=model or DEFAULT_MODEL,
        temperature=temperature,
        max_tokens=max_tokens,
        timeout=timeout or settings.llm.request_timeout,
    )
