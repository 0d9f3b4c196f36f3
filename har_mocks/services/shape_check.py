"""
REST shape check - has a live JSON endpoint changed structure since it was recorded?

Plain REST captures carry no operation name, so the exchange is located by a
URL fragment and compared through shape signatures (sorted key paths) rather
than fingerprints: when the shape moved, the added and removed paths tell the
operator what to re-record.
"""

from __future__ import annotations

from har_mocks.clients.rest import RestClient
from har_mocks.protocols import LoggerProtocol, NullLogger
from har_mocks.schemas.har import HarArchive
from har_mocks.schemas.operations import ShapeCheckResult
from har_mocks.services.extractor import read_response_by_url
from har_mocks.services.fingerprint import diff_signatures, shape_signature
from har_mocks.types import JsonValue

__all__ = [
    'ShapeCheckService',
    'compare_shapes',
]

# Longest added/removed list logged before truncating
_MAX_LOGGED_PATHS = 50


def compare_shapes(archived: JsonValue, live: JsonValue) -> ShapeCheckResult:
    archived_signature = shape_signature(archived)
    live_signature = shape_signature(live)
    added, removed = diff_signatures(archived_signature, live_signature)
    return ShapeCheckResult(
        archived_signature=archived_signature,
        live_signature=live_signature,
        added=added,
        removed=removed,
    )


class ShapeCheckService:
    """Compares an archived REST response with the same endpoint fetched live."""

    def __init__(self, logger: LoggerProtocol | None = None) -> None:
        self.logger = logger or NullLogger()

    async def check(
        self,
        archive: HarArchive,
        url_fragment: str,
        live_url: str,
        client: RestClient,
    ) -> ShapeCheckResult:
        """
        Diff the shape of the archived response against the live one.

        Args:
            archive: Capture holding the REST exchange
            url_fragment: Substring identifying the exchange's URL
            live_url: URL to fetch live (normally the recorded request URL)
            client: Live REST client

        Raises:
            ArchiveEntryError: If the exchange is missing or has no embedded JSON body
            LiveEndpointError: If the live endpoint fails or returns non-JSON
            httpx.HTTPError: On transport failure
        """
        archived = read_response_by_url(archive, url_fragment)
        live = await client.get_json(live_url)
        result = compare_shapes(archived, live)

        if not result.changed:
            await self.logger.info(f'JSON structure of {url_fragment} unchanged')
            return result

        await self.logger.warning(f'JSON structure of {url_fragment} changed - re-record recommended')
        if result.added:
            await self.logger.warning(f'  New fields: {", ".join(result.added[:_MAX_LOGGED_PATHS])}')
        if result.removed:
            await self.logger.warning(f'  Removed fields: {", ".join(result.removed[:_MAX_LOGGED_PATHS])}')
        return result
