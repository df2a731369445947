"""Async HTTP client that fetches rendered diagrams from a PlantUML server."""

from __future__ import annotations

from typing import Any

import httpx

from umlstudio.errors import RenderError
from umlstudio.logging import get_logger

logger = get_logger("render")


class RenderClient:
    """
    Thin async wrapper around ``httpx.AsyncClient`` for encoded diagram URLs.

    Example:
        async with RenderClient(timeout=10.0) as client:
            svg = await client.fetch(url)
    """

    def __init__(self, timeout: float = 30.0, client: Any = None) -> None:
        self.timeout = timeout
        self._client: Any = client  # httpx.AsyncClient
        self._owns_client = client is None

    async def __aenter__(self) -> RenderClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
            )
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None

    async def fetch(self, url: str) -> bytes:
        """
        Download the rendered image behind ``url``.

        Raises:
            RenderError: If ``url`` is empty or the server answers with an error
        """
        if not url:
            raise RenderError("Nothing to render")
        if self._client is None:
            raise RuntimeError("RenderClient must be used as an async context manager")

        logger.debug("Fetching %s", url[:120])
        try:
            resp = await self._client.get(url)
        except httpx.HTTPError as exc:
            raise RenderError(f"Request to rendering server failed: {exc}") from exc

        if resp.status_code >= 400:
            raise RenderError(
                f"Rendering server returned HTTP {resp.status_code}",
                status_code=resp.status_code,
            )
        return resp.content
