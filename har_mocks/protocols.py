"""
Shared protocols for har-mocks services.

This module contains Protocol definitions used across multiple services.
Having a single source of truth for protocols prevents type incompatibility
issues when the same protocol is defined in multiple modules.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from har_mocks.schemas.operations import LiveResponse


class LoggerProtocol(Protocol):
    """
    Protocol for async logger - enables services to work with any logging implementation.

    Implementations:
    - CLILogger (cli/logger.py): Logs to stdout with optional verbose mode
    - NullLogger (below): No-op implementation for when logging is optional
    """

    async def info(self, message: str) -> None: ...
    async def warning(self, message: str) -> None: ...
    async def error(self, message: str) -> None: ...


class NullLogger:
    """
    No-op logger implementation for when logging is optional.

    Use this when a function requires a LoggerProtocol but the caller
    doesn't need logging output.
    """

    async def info(self, message: str) -> None:
        pass

    async def warning(self, message: str) -> None:
        pass

    async def error(self, message: str) -> None:
        pass


@runtime_checkable
class LiveEndpoint(Protocol):
    """Live GraphQL endpoint used for drift validation."""

    async def send(
        self,
        operation_name: str,
        query: str,
        variables: Mapping[str, Any] | None = None,
    ) -> LiveResponse:
        """
        Execute one operation against the live server.

        Returns:
            LiveResponse with data and/or error messages. HTTP status failures
            are reported as errors rather than raised.

        Raises:
            httpx.HTTPError: On transport failure (connection, timeout)
        """
        ...
