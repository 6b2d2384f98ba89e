# artifact_studio/llm/providers/gemini.py
"""
Google Gemini provider implementation.
"""
from typing import Optional

from artifact_studio.core.config import settings
from artifact_studio.core.exceptions import AuthError, MalformedResponseError
from .base import post_json


DEFAULT_MODEL = "gemini-2.0-flash"
API_URL = "https://generativelanguage.googleapis.com/v1beta/models"


async def call(
    prompt: str,
    system_prompt: str = "",
    model: Optional[str] = None,
    temperature: float = 0.7,
    max_tokens: int = 4000,
    timeout: Optional[float] = None,
) -> str:
    """
    Call Google Gemini API.

    Returns:
        The generated text

    Raises:
        GenerationError subclass on API errors
    """
    api_key = settings.llm.gemini_api_key
    if not api_key:
        raise AuthError("gemini", "GEMINI_API_KEY not configured")

    model = model or DEFAULT_MODEL
    url = f"{API_URL}/{model}:generateContent?key={api_key}"

    payload = {
        "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        "generationConfig": {
            "temperature": temperature,
            "maxOutputTokens": max_tokens,
        },
    }

    # Gemini takes the system prompt as a separate instruction
    if system_prompt:
        payload["systemInstruction"] = {"parts": [{"text": system_prompt}]}

    data = await post_json("gemini", url, payload, timeout or settings.llm.request_timeout)

    candidates = data.get("candidates") or []
    if not candidates:
        raise MalformedResponseError("gemini", "No candidates in response")

    parts = (candidates[0].get("content") or {}).get("parts") or []
    text = "".join(part.get("text", "") for part in parts)
    if not text:
        raise MalformedResponseError("gemini", "No text parts in response")
    return text
