from __future__ import annotations

import httpx


class ServiceClient:
    """Owns a single httpx.AsyncClient for one upstream service."""

    def __init__(self, base_url: str, timeout: float = 30.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def start(self) -> None:
        """Initialize the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout))

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _http(self) -> httpx.AsyncClient:
        if not self._client:
            await self.start()
        return self._client  # type: ignore[return-value]

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"


def error_message(response: httpx.Response) -> str:
    """Pull the backend's human-readable message out of an error response."""
    try:
        data = response.json()
    except ValueError:
        return ""
    if isinstance(data, dict):
        return str(data.get("message") or data.get("error") or data.get("detail") or "")
    return ""
