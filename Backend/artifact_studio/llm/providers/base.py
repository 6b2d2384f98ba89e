# artifact_studio/llm/providers/base.py
"""
Shared transport helpers for provider implementations.

Every provider maps its failures onto the GenerationError taxonomy here so the
adapter's retry decision never has to parse error strings.
"""
import asyncio
import json
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

import aiohttp

from artifact_studio.core.exceptions import (
    AuthError,
    BadRequestError,
    GenerationError,
    GenerationTimeoutError,
    MalformedResponseError,
    NetworkUnreachableError,
    RateLimitError,
    ServerError,
)
from artifact_studio.core.logging import log


def error_for_status(provider: str, status: int, body: str) -> GenerationError:
    """Map an HTTP status onto the matching GenerationError."""
    snippet = body[:200]
    if status in (401, 403):
        return AuthError(provider, f"Credentials rejected ({status}): {snippet}", status)
    if status == 429:
        return RateLimitError(provider, f"Rate limited (429): {snippet}", status)
    if status == 408:
        return GenerationTimeoutError(provider, f"Request timeout (408): {snippet}", status)
    if status >= 500:
        return ServerError(provider, f"Server error ({status}): {snippet}", status)
    return BadRequestError(provider, f"Bad request ({status}): {snippet}", status)


@asynccontextmanager
async def translate_transport_errors(provider: str, timeout: float) -> AsyncIterator[None]:
    """Turn aiohttp / asyncio transport failures into GenerationErrors."""
    try:
        yield
    except GenerationError:
        raise
    except asyncio.TimeoutError:
        raise GenerationTimeoutError(provider, f"No response within {timeout:.0f}s")
    except aiohttp.ClientConnectorError as e:
        raise NetworkUnreachableError(provider, f"Cannot connect: {e}")
    except aiohttp.ServerDisconnectedError as e:
        raise ServerError(provider, f"Server disconnected: {e}")
    except aiohttp.ClientError as e:
        raise NetworkUnreachableError(provider, f"Transport error: {e}")


async def post_json(
    provider: str,
    url: str,
    payload: Dict[str, Any],
    timeout: float,
    headers: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    """
    POST a JSON payload and return the decoded JSON body.

    Raises:
        GenerationError subclass matching the failure
    """
    async with translate_transport_errors(provider, timeout):
        async with aiohttp.ClientSession() as session:
            async with session.post(
                url,
                json=payload,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as response:
                text = await response.text()

                if response.status != 200:
                    log("LLM", f"[{provider.upper()}] Error {response.status}: {text[:300]}")
                    raise error_for_status(provider, response.status, text)

                try:
                    return json.loads(text)
                except json.JSONDecodeError as e:
                    raise MalformedResponseError(provider, f"Response is not JSON: {e}")
