import asyncio
from urllib.parse import urljoin

import httpx

from .config import get_settings
from .security import ensure_public_url

MAX_REDIRECTS = 5

_client: httpx.AsyncClient | None = None
_client_lock = asyncio.Lock()


async def get_http_client() -> httpx.AsyncClient:
    global _client

    if _client is None:
        async with _client_lock:
            if _client is None:
                settings = get_settings()
                limits = httpx.Limits(
                    max_connections=settings.http_max_connections,
                    max_keepalive_connections=settings.http_max_keepalive,
                )
                _client = httpx.AsyncClient(
                    timeout=settings.http_timeout,
                    limits=limits,
                    headers={
                        "User-Agent": settings.http_user_agent,
                        "Accept": "*/*",
                    },
                )
    return _client


async def get_public(
    client: httpx.AsyncClient,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    max_redirects: int = MAX_REDIRECTS,
) -> httpx.Response:
    """GET ``url``, following redirects only to hosts that pass the host policy.

    Every hop, the first included, goes through ``ensure_public_url``; a
    redirect into a private range raises ``BlockedHostError`` before it is sent.
    """
    current = ensure_public_url(url)
    for _ in range(max_redirects + 1):
        response = await client.get(current, headers=headers, follow_redirects=False)
        location = response.headers.get("location")
        if not response.is_redirect or not location:
            return response
        current = ensure_public_url(urljoin(str(response.url), location))
    raise httpx.TooManyRedirects(
        f"Exceeded {max_redirects} redirects for {url}", request=response.request
    )


async def shutdown_http_client() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
