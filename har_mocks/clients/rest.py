"""
Live REST client for JSON endpoints.

Counterpart of GraphQLClient for plain REST captures: one GET per check,
bounded by a timeout, body decoded as JSON.
"""

from __future__ import annotations

import httpx

from har_mocks.exceptions import LiveEndpointError
from har_mocks.types import JsonValue

__all__ = ['RestClient']


class RestClient:
    """
    Async JSON-over-HTTP client.

        async with RestClient(timeout=10.0) as client:
            body = await client.get_json(url)
    """

    def __init__(self, timeout: float = 10.0, client: httpx.AsyncClient | None = None) -> None:
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    async def __aenter__(self) -> RestClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_json(self, url: str) -> JsonValue:
        """
        Fetch and decode a JSON document.

        Raises:
            httpx.HTTPError: On transport failure or timeout
            LiveEndpointError: On a non-2xx status or a body that isn't JSON
        """
        response = await self._client.get(url, headers={'Accept': 'application/json'})

        if not response.is_success:
            raise LiveEndpointError(f'GET {url}: HTTP {response.status_code}')

        try:
            return response.json()
        except (ValueError, RecursionError) as e:
            raise LiveEndpointError(f'GET {url}: response is not decodable JSON') from e
