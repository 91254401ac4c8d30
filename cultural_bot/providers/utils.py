"""
Shared HTTP helpers for provider modules.
"""
import asyncio
import aiohttp
from typing import Optional, Dict, Any
from contextlib import asynccontextmanager

from cultural_bot.providers.base import ProviderHTTPError, ProviderTimeoutError, ProviderResponseError


@asynccontextmanager
async def get_session(session: Optional[aiohttp.ClientSession] = None):
    """Context manager for aiohttp session handling.

    If session is provided, yields it.
    If not, creates a new session and closes it after use.
    """
    if session is not None:
        yield session
    else:
        async with aiohttp.ClientSession() as new_session:
            yield new_session


async def _read_json(resp, url: str, provider_name: str) -> Any:
    if resp.status < 200 or resp.status >= 300:
        raise ProviderHTTPError(
            f"{provider_name} returned status {resp.status} for {url}",
            status=resp.status,
            provider_name=provider_name,
        )
    try:
        return await resp.json(content_type=None)
    except (ValueError, aiohttp.ContentTypeError) as e:
        raise ProviderResponseError(f"{provider_name} returned invalid JSON: {e}", provider_name=provider_name)


async def http_get_json(
    url: str,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = 10.0,
    session: Optional[aiohttp.ClientSession] = None,
    provider_name: str = "http",
) -> Any:
    """GET a JSON document.

    Raises:
        ProviderHTTPError: non-2xx status
        ProviderTimeoutError: the request exceeded `timeout` seconds
        ProviderResponseError: the body is not JSON
    """
    try:
        async with get_session(session) as sess:
            async with sess.get(url, params=params, headers=headers, timeout=aiohttp.ClientTimeout(total=timeout)) as resp:
                return await _read_json(resp, url, provider_name)
    except asyncio.TimeoutError:
        raise ProviderTimeoutError(f"{provider_name} timed out after {timeout}s", provider_name=provider_name)


async def http_post_json(
    url: str,
    json_data: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = 30.0,
    session: Optional[aiohttp.ClientSession] = None,
    provider_name: str = "http",
) -> Any:
    """POST a JSON payload and parse the JSON answer. Raises like http_get_json."""
    try:
        async with get_session(session) as sess:
            async with sess.post(url, json=json_data, headers=headers, timeout=aiohttp.ClientTimeout(total=timeout)) as resp:
                return await _read_json(resp, url, provider_name)
    except asyncio.TimeoutError:
        raise ProviderTimeoutError(f"{provider_name} timed out after {timeout}s", provider_name=provider_name)
