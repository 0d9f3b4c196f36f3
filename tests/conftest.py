"""Shared helpers for building HAR captures in tests."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from har_mocks.schemas.har import HarArchive, HarEntry

FIXTURES_DIR = Path(__file__).parent.parent / 'fixtures'
ARCHIVE_FIXTURES_DIR = FIXTURES_DIR / 'archives'

GRAPHQL_URL = 'https://countries.trevorblades.com/'

# Valid JSON nested deeper than the decoder's recursion limit
DEEPLY_NESTED_JSON = '[' * 100_000 + ']' * 100_000


def make_entry(
    operation_name: str | None,
    query: str | None = None,
    response: Any = None,
    method: str = 'POST',
    include_name: bool = True,
    started: str = '2026-01-03T10:33:00.000Z',
) -> HarEntry:
    """Build one HAR entry for a GraphQL call.

    `response` is JSON-encoded into response.content.text; pass None to leave
    the response body uncaptured.
    """
    if query is None and operation_name is not None:
        query = f'query {operation_name} {{ field }}'

    body: dict[str, Any] = {'query': query}
    if include_name and operation_name is not None:
        body['operationName'] = operation_name

    content: dict[str, Any] = {'mimeType': 'application/json'}
    if response is not None:
        content['text'] = json.dumps(response)

    return HarEntry.model_validate(
        {
            'startedDateTime': started,
            'request': {
                'method': method,
                'url': GRAPHQL_URL,
                'postData': {'mimeType': 'application/json', 'text': json.dumps(body)},
            },
            'response': {'status': 200, 'content': content},
        }
    )


def make_raw_entry(
    request_text: str | None = None,
    response_text: str | None = None,
    url: str = GRAPHQL_URL,
    method: str = 'POST',
) -> HarEntry:
    """Build one HAR entry from verbatim body texts (no JSON encoding applied)."""
    request: dict[str, Any] = {'method': method, 'url': url}
    if request_text is not None:
        request['postData'] = {'mimeType': 'application/json', 'text': request_text}

    content: dict[str, Any] = {'mimeType': 'application/json'}
    if response_text is not None:
        content['text'] = response_text

    return HarEntry.model_validate({'request': request, 'response': {'status': 200, 'content': content}})


def make_archive(*entries: HarEntry) -> HarArchive:
    return HarArchive.model_validate(
        {
            'log': {
                'version': '1.2',
                'creator': {'name': 'Playwright', 'version': '1.49.1'},
                'entries': [e.model_dump(mode='json', by_alias=True, exclude_unset=True) for e in entries],
            }
        }
    )


def operation_names(archive: HarArchive) -> list[str | None]:
    """Explicit operationName of every entry, in order (None when absent)."""
    names = []
    for entry in archive.entries:
        body = json.loads(entry.request_body) if entry.request_body else {}
        names.append(body.get('operationName'))
    return names


@pytest.fixture
def countries_archive_path() -> Path:
    return ARCHIVE_FIXTURES_DIR / 'countries.har'


@pytest.fixture
def malformed_archive_path() -> Path:
    return ARCHIVE_FIXTURES_DIR / 'malformed_bodies.har'


@pytest.fixture
def write_har(tmp_path: Path) -> Callable[[HarArchive, str], Path]:
    """Write an archive into tmp_path and return its path."""

    def _write(archive: HarArchive, name: str = 'graphql-operations.har') -> Path:
        path = tmp_path / name
        data = archive.model_dump(mode='json', by_alias=True, exclude_unset=True)
        path.write_text(json.dumps(data, indent=2), encoding='utf-8')
        return path

    return _write
