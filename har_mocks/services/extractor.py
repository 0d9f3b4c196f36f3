"""
GraphQL operation extraction from HAR archives.

An operation is identified by its name: the explicit `operationName` of the
request payload, or else the identifier following the `query`/`mutation`
keyword in the query text. Extraction never fails on a single bad entry; an
entry that can't be understood is skipped and the pass continues.

Within one pass the first occurrence of a name wins. Later occurrences in a
capture are treated as retries of the same query.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterator
from typing import Any

from har_mocks.exceptions import ArchiveEntryError
from har_mocks.schemas.har import HarArchive, HarEntry
from har_mocks.schemas.operations import INTROSPECTION_OPERATION, Operation
from har_mocks.types import JsonValue

__all__ = [
    'BODY_DECODE_ERRORS',
    'extract_operation_entries',
    'extract_operations',
    'extract_responses_by_operation',
    'operation_name_for',
    'operation_name_from_payload',
    'read_response_by_url',
]

logger = logging.getLogger(__name__)

# Methods whose requests carry a GraphQL payload
BODY_METHODS = frozenset({'POST'})

_OPERATION_NAME_PATTERN = re.compile(r'(?:query|mutation)\s+(\w+)')

# Malformed text, or nesting deeper than the decoder's recursion limit
BODY_DECODE_ERRORS = (json.JSONDecodeError, RecursionError)


def _parse_request_payload(entry: HarEntry) -> dict[str, Any] | None:
    """Request body as a JSON object, or None for non-POST / missing / malformed bodies."""
    if entry.method.upper() not in BODY_METHODS:
        return None

    body = entry.request_body
    if not body:
        return None

    try:
        payload = json.loads(body)
    except BODY_DECODE_ERRORS:
        logger.debug('Skipping %s: request body is not decodable JSON', entry.url)
        return None

    if not isinstance(payload, dict):
        return None
    return payload


def operation_name_from_payload(payload: dict[str, Any]) -> str | None:
    """Explicit operationName, else the name after the query/mutation keyword."""
    explicit = payload.get('operationName')
    if isinstance(explicit, str) and explicit:
        return explicit

    query = payload.get('query')
    if isinstance(query, str):
        match = _OPERATION_NAME_PATTERN.search(query)
        if match:
            return match.group(1)
    return None


def operation_name_for(entry: HarEntry) -> str | None:
    """
    Operation name carried by an exchange, or None if it has none.

    Introspection is NOT filtered here; callers decide what to do with it.
    """
    payload = _parse_request_payload(entry)
    if payload is None:
        return None
    return operation_name_from_payload(payload)


def _iter_user_operations(archive: HarArchive) -> Iterator[tuple[Operation, HarEntry]]:
    """Yield (operation, entry) for every exchange carrying a non-introspection operation."""
    for entry in archive.entries:
        payload = _parse_request_payload(entry)
        if payload is None:
            continue

        name = operation_name_from_payload(payload)
        if name is None or name == INTROSPECTION_OPERATION:
            continue

        query = payload.get('query')
        yield Operation(name=name, query=query if isinstance(query, str) else ''), entry


def extract_operations(archive: HarArchive) -> list[Operation]:
    """
    Distinct operations in archive order.

    Returns:
        Operations unique by name (first occurrence kept), introspection excluded
    """
    operations: list[Operation] = []
    seen: set[str] = set()

    for operation, _entry in _iter_user_operations(archive):
        if operation.name in seen:
            continue
        seen.add(operation.name)
        operations.append(operation)

    return operations


def extract_operation_entries(archive: HarArchive) -> dict[str, HarEntry]:
    """Operation name -> first exchange carrying it (introspection excluded), in archive order."""
    entries: dict[str, HarEntry] = {}
    for operation, entry in _iter_user_operations(archive):
        entries.setdefault(operation.name, entry)
    return entries


def extract_responses_by_operation(archive: HarArchive) -> dict[str, JsonValue]:
    """
    Parsed response body per operation.

    Entries with no recorded response, or a response that isn't JSON, are
    skipped with a warning. The first parseable response for a name wins.
    """
    responses: dict[str, JsonValue] = {}

    for operation, entry in _iter_user_operations(archive):
        if operation.name in responses:
            continue

        text = entry.response_body
        if not text:
            logger.warning('No response body recorded for %s', operation.name)
            continue

        try:
            responses[operation.name] = json.loads(text)
        except BODY_DECODE_ERRORS as e:
            logger.warning('Failed to parse response for %s: %s', operation.name, e)

    return responses


def read_response_by_url(archive: HarArchive, url_fragment: str) -> JsonValue:
    """
    Parsed response of the first exchange whose URL contains url_fragment.

    Used for plain REST captures, where exchanges are identified by URL
    rather than by operation name. Unlike the operation extractors this is
    strict: the caller asked for one specific exchange.

    Raises:
        ArchiveEntryError: If no exchange matches, its response body wasn't
            embedded in the capture, or the body isn't JSON
    """
    entry = next((e for e in archive.entries if url_fragment in e.url), None)
    if entry is None:
        raise ArchiveEntryError(url_fragment, 'no exchange with a matching URL')

    text = entry.response_body
    if not text:
        raise ArchiveEntryError(
            url_fragment,
            'response body not embedded (content.text missing); record with embedded content',
        )

    try:
        return json.loads(text)
    except BODY_DECODE_ERRORS as e:
        raise ArchiveEntryError(url_fragment, f'response body is not JSON: {type(e).__name__}') from e
