"""
Drift validation - compare stored mocks against the live server.

Read-only: nothing on disk is modified. Operations are replayed strictly one
at a time in archive order, so the remote endpoint sees at most one request
in flight and reports come out in a deterministic order.

Classification per operation:
    DRIFT   - no stored mock, or field paths differ (added/removed listed)
    ERROR   - transport/HTTP failure, GraphQL errors, or timeout
    REMOVED - live call succeeded but returned no data payload
    OK      - field paths identical (values may differ)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping, Sequence

import httpx

from har_mocks.exceptions import LiveEndpointError
from har_mocks.protocols import LiveEndpoint, LoggerProtocol, NullLogger
from har_mocks.schemas.har import HarArchive
from har_mocks.schemas.operations import DriftResult, DriftStatus, LiveResponse, Operation, ValidationSummary
from har_mocks.services.extractor import extract_operations
from har_mocks.services.fingerprint import field_paths
from har_mocks.types import JsonValue

__all__ = [
    'DriftValidator',
    'RegistryLookup',
    'compare_field_paths',
    'summarize',
]

logger = logging.getLogger(__name__)

RegistryLookup = Callable[[str], JsonValue | None]

# Longest added/removed list printed inline before truncating
_MAX_LISTED_FIELDS = 5


def compare_field_paths(mock_data: JsonValue, live_data: JsonValue) -> tuple[list[str], list[str]]:
    """
    Field-level schema comparison.

    Returns:
        (added, removed): paths only live / only in the mock, both sorted
    """
    mock_fields = field_paths(mock_data)
    live_fields = field_paths(live_data)
    return sorted(live_fields - mock_fields), sorted(mock_fields - live_fields)


def summarize(results: Sequence[DriftResult]) -> ValidationSummary:
    counts = {status: 0 for status in DriftStatus}
    for result in results:
        counts[result.status] += 1
    return ValidationSummary(
        ok=counts[DriftStatus.OK],
        drift=counts[DriftStatus.DRIFT],
        error=counts[DriftStatus.ERROR],
        removed=counts[DriftStatus.REMOVED],
    )


def _format_fields(fields: Sequence[str]) -> str:
    if len(fields) <= _MAX_LISTED_FIELDS:
        return ', '.join(fields)
    shown = ', '.join(fields[:_MAX_LISTED_FIELDS])
    return f'{shown} ... and {len(fields) - _MAX_LISTED_FIELDS} more'


class DriftValidator:
    """Replays each archived operation against a live endpoint and diffs field shapes."""

    def __init__(
        self,
        logger: LoggerProtocol | None = None,
        call_timeout: float = 10.0,
        pass_timeout: float = 300.0,
    ) -> None:
        """
        Initialize validator.

        Args:
            logger: Progress logger
            call_timeout: Bound on one live round-trip in seconds
            pass_timeout: Bound on the whole validation pass in seconds.
                Operations not started before it elapses are reported as ERROR.
        """
        self.logger = logger or NullLogger()
        self.call_timeout = call_timeout
        self.pass_timeout = pass_timeout

    async def validate(
        self,
        archive: HarArchive,
        registry_lookup: RegistryLookup,
        live_fetch: LiveEndpoint,
    ) -> list[DriftResult]:
        """
        Validate every operation in the archive.

        Args:
            archive: Capture listing the operations (and their query text)
            registry_lookup: Returns the stored mock payload for a name, or None
            live_fetch: Live endpoint

        Returns:
            One result per operation, in first-appearance order
        """
        operations = extract_operations(archive)
        await self.logger.info(f'Found {len(operations)} operation(s) to validate')

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.pass_timeout
        results: list[DriftResult] = []

        for operation in operations:
            remaining = deadline - loop.time()
            if remaining <= 0:
                result = DriftResult(
                    operation_name=operation.name,
                    status=DriftStatus.ERROR,
                    message=f'Validation pass exceeded {self.pass_timeout:g}s before this operation ran',
                )
            else:
                result = await self._validate_operation(operation, registry_lookup, live_fetch, remaining)

            await self._log_result(result)
            results.append(result)

        return results

    async def _validate_operation(
        self,
        operation: Operation,
        registry_lookup: RegistryLookup,
        live_fetch: LiveEndpoint,
        remaining: float,
    ) -> DriftResult:
        name = operation.name
        await self.logger.info(f'Validating: {name}')

        payload = registry_lookup(name)
        if payload is None:
            return DriftResult(operation_name=name, status=DriftStatus.DRIFT, message='Mock missing')

        mock_data = payload.get('data') if isinstance(payload, Mapping) else None
        if mock_data is None:
            return DriftResult(operation_name=name, status=DriftStatus.DRIFT, message='Mock has no data payload')

        timeout = min(self.call_timeout, remaining)
        try:
            live = await asyncio.wait_for(live_fetch.send(name, operation.query), timeout=timeout)
        except TimeoutError:
            return DriftResult(
                operation_name=name,
                status=DriftStatus.ERROR,
                message=f'Live server did not respond within {timeout:g}s',
            )
        except (httpx.HTTPError, LiveEndpointError) as e:
            return DriftResult(
                operation_name=name,
                status=DriftStatus.ERROR,
                message=f'Live server request failed: {str(e) or type(e).__name__}',
            )
        except Exception as e:
            # LiveEndpoint is a protocol; implementations may raise anything
            logger.debug('Live fetch for %s raised', name, exc_info=True)
            return DriftResult(
                operation_name=name,
                status=DriftStatus.ERROR,
                message=f'Live server request failed: {type(e).__name__}: {e}',
            )

        return self._classify(name, mock_data, live)

    def _classify(self, name: str, mock_data: JsonValue, live: LiveResponse) -> DriftResult:
        if live.errors:
            return DriftResult(
                operation_name=name,
                status=DriftStatus.ERROR,
                message=f'Live server returned errors: {", ".join(live.errors)}',
            )

        if live.data is None:
            return DriftResult(
                operation_name=name,
                status=DriftStatus.REMOVED,
                message='Operation may have been removed from API',
            )

        added, removed = compare_field_paths(mock_data, live.data)
        if not added and not removed:
            return DriftResult(
                operation_name=name,
                status=DriftStatus.OK,
                message='Schema matches - all fields present',
            )

        changes = []
        if added:
            changes.append(f'{len(added)} added')
        if removed:
            changes.append(f'{len(removed)} removed')
        return DriftResult(
            operation_name=name,
            status=DriftStatus.DRIFT,
            message=f'Schema drift: {", ".join(changes)}',
            added_fields=added,
            removed_fields=removed,
        )

    async def _log_result(self, result: DriftResult) -> None:
        if result.status is DriftStatus.OK:
            await self.logger.info(f'  {result.operation_name}: {result.message}')
            return

        if result.status is DriftStatus.ERROR:
            await self.logger.error(f'  {result.operation_name}: {result.message}')
        else:
            await self.logger.warning(f'  {result.operation_name}: {result.message}')

        if result.added_fields:
            await self.logger.warning(f'    Added: {_format_fields(result.added_fields)}')
        if result.removed_fields:
            await self.logger.warning(f'    Removed: {_format_fields(result.removed_fields)}')
