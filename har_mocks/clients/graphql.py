"""
Live GraphQL endpoint client.

Implements the LiveEndpoint protocol over httpx. Connection setup, retries
and auth beyond an optional bearer token are out of scope: one POST per
operation, bounded by a timeout.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from har_mocks.exceptions import LiveEndpointError
from har_mocks.schemas.operations import LiveResponse

__all__ = ['GraphQLClient']


def _error_messages(errors: Any) -> list[str]:
    if not isinstance(errors, list):
        return [str(errors)]
    messages = []
    for error in errors:
        if isinstance(error, Mapping) and 'message' in error:
            messages.append(str(error['message']))
        else:
            messages.append(str(error))
    return messages


class GraphQLClient:
    """
    Async GraphQL-over-HTTP client.

    Use as an async context manager so the underlying connection pool is
    closed:

        async with GraphQLClient(endpoint, timeout=10.0) as client:
            response = await client.send('GetCountry', query)
    """

    def __init__(
        self,
        endpoint: str,
        timeout: float = 10.0,
        token: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize client.

        Args:
            endpoint: GraphQL endpoint URL
            timeout: Per-request timeout in seconds (connect, read, write, pool)
            token: Optional bearer token
            client: Pre-built httpx client (tests inject one with a MockTransport)
        """
        self.endpoint = endpoint
        self.headers = {'Content-Type': 'application/json'}
        if token:
            self.headers['Authorization'] = f'Bearer {token}'
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    async def __aenter__(self) -> GraphQLClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def send(
        self,
        operation_name: str,
        query: str,
        variables: Mapping[str, Any] | None = None,
    ) -> LiveResponse:
        """
        Execute one operation.

        Returns:
            LiveResponse. Non-2xx statuses become errors=['HTTP <status>'];
            a GraphQL `errors` array becomes its messages.

        Raises:
            httpx.HTTPError: On transport failure or timeout
            LiveEndpointError: If a 2xx response body isn't a JSON object
        """
        body: dict[str, Any] = {'operationName': operation_name, 'query': query}
        if variables is not None:
            body['variables'] = dict(variables)

        response = await self._client.post(self.endpoint, json=body, headers=self.headers)

        if not response.is_success:
            return LiveResponse(errors=[f'HTTP {response.status_code}'])

        try:
            payload = response.json()
        except (ValueError, RecursionError) as e:
            raise LiveEndpointError(f'{operation_name}: response is not decodable JSON') from e

        if not isinstance(payload, Mapping):
            raise LiveEndpointError(f'{operation_name}: response is not a JSON object')

        errors = payload.get('errors')
        if errors:
            return LiveResponse(data=payload.get('data'), errors=_error_messages(errors))

        return LiveResponse(data=payload.get('data'))
