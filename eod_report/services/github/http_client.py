"""
Pooled HTTP client shared by every GitHub fetcher.

A report cycle issues one search per stream plus a sub-lookup per commit and
per assigned issue, so all of them go through one AsyncClient. Timeouts and
pool sizes come from Settings; per-request deadlines (e.g. the sub-lookup
timeout) override the read timeout at call time.
"""

import logging

import httpx

from eod_report.config import settings

logger = logging.getLogger(__name__)

_client: httpx.AsyncClient | None = None


def _build_client() -> httpx.AsyncClient:
    timeout = httpx.Timeout(settings.github_timeout, connect=settings.github_connect_timeout)
    limits = httpx.Limits(
        max_connections=settings.github_max_connections,
        max_keepalive_connections=settings.github_max_keepalive_connections,
    )
    return httpx.AsyncClient(timeout=timeout, limits=limits, http2=True)


def get_github_client() -> httpx.AsyncClient:
    """
    Return the shared GitHub client, creating it on first use or after close.

    No auth header lives on the client; each fetcher sends its own, so
    anonymous and token-bearing fetchers share the pool.
    """
    global _client
    if _client is None or _client.is_closed:
        _client = _build_client()
        logger.debug(
            f"Opened GitHub client (timeout={settings.github_timeout}s, "
            f"max_connections={settings.github_max_connections})"
        )
    return _client


async def close_github_client() -> None:
    """Close the shared client. Called from the app lifespan on shutdown."""
    global _client
    if _client is not None and not _client.is_closed:
        await _client.aclose()
        _client = None
        logger.debug("Closed GitHub client")
