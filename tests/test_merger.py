"""Tests for merging a recording session into the stored archive."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest

from har_mocks.exceptions import ArchiveReadError
from har_mocks.schemas.har import HarArchive
from har_mocks.services.archive import load_archive
from har_mocks.services.merger import ArchiveMergeService, merge_archives
from tests.conftest import make_archive, make_entry, operation_names

WriteHar = Callable[[HarArchive, str], Path]


def _response_of(archive: HarArchive, index: int) -> dict:
    return json.loads(archive.entries[index].response_body)


def test_merge_updates_in_place_and_appends_new() -> None:
    existing = make_archive(
        make_entry('GetCountries', response={'data': {'countries': []}}),
        make_entry('GetCountry', response={'data': {'country': {'code': 'US'}}}),
    )
    new = make_archive(
        make_entry('GetContinent', response={'data': {'continent': {'code': 'EU'}}}),
        make_entry('GetCountries', response={'data': {'countries': [{'code': 'AD'}]}}),
    )

    result = merge_archives(existing, new)

    assert result.status == 'merged'
    assert operation_names(result.archive) == ['GetCountries', 'GetCountry', 'GetContinent']
    assert list(result.added) == ['GetContinent']
    assert list(result.updated) == ['GetCountries']
    assert _response_of(result.archive, 0) == {'data': {'countries': [{'code': 'AD'}]}}
    # Input archive is never modified
    assert _response_of(existing, 0) == {'data': {'countries': []}}


def test_merged_entry_count_is_existing_plus_new_names() -> None:
    existing = make_archive(make_entry('A'), make_entry('B'), make_entry('C'))
    new = make_archive(make_entry('B'), make_entry('D'), make_entry('E'))

    result = merge_archives(existing, new)
    assert len(result.archive.entries) == 5
    assert len(set(operation_names(result.archive))) == 5


def test_repeat_within_new_session_first_capture_wins() -> None:
    new = make_archive(
        make_entry('GetThing', response={'data': {'v': 1}}),
        make_entry('GetThing', response={'data': {'v': 2}}),
    )
    result = merge_archives(HarArchive.empty(), new)

    assert operation_names(result.archive) == ['GetThing']
    assert _response_of(result.archive, 0) == {'data': {'v': 1}}


def test_older_retries_of_updated_operation_are_dropped() -> None:
    existing = make_archive(make_entry('GetThing'), make_entry('Other'), make_entry('GetThing'))
    new = make_archive(make_entry('GetThing', response={'data': {'v': 3}}))

    result = merge_archives(existing, new)
    assert operation_names(result.archive) == ['GetThing', 'Other']


def test_entries_without_operation_name_are_preserved() -> None:
    anonymous = make_entry(None, query='{ anonymous }')
    existing = make_archive(make_entry('IntrospectionQuery'), anonymous, make_entry('GetThing'))
    new = make_archive(make_entry('GetThing'))

    result = merge_archives(existing, new)
    assert operation_names(result.archive) == ['IntrospectionQuery', None, 'GetThing']


def test_nothing_to_merge_returns_existing_unchanged() -> None:
    existing = make_archive(make_entry('GetThing'))

    no_archive = merge_archives(existing, None)
    assert no_archive.status == 'no_new_archive'
    assert no_archive.archive == existing

    no_ops = merge_archives(existing, make_archive(make_entry('IntrospectionQuery')))
    assert no_ops.status == 'no_operations'
    assert no_ops.archive == existing


def test_merge_is_idempotent() -> None:
    existing = make_archive(make_entry('A'), make_entry('B'))
    new = make_archive(make_entry('B', response={'data': {'b': 1}}))

    once = merge_archives(existing, new).archive
    twice = merge_archives(once, new).archive
    assert twice == once


def test_merge_keeps_archive_envelope() -> None:
    result = merge_archives(make_archive(make_entry('A')), make_archive(make_entry('B')))
    dumped = result.archive.model_dump(mode='json', by_alias=True, exclude_unset=True)
    assert dumped['log']['creator'] == {'name': 'Playwright', 'version': '1.49.1'}


@pytest.mark.asyncio
async def test_merge_files_writes_archive_and_removes_session(write_har: WriteHar) -> None:
    existing_path = write_har(make_archive(make_entry('GetCountry')), 'graphql-operations.har')
    new_path = write_har(make_archive(make_entry('GetContinent')), 'graphql-operations.har.new')

    result = await ArchiveMergeService().merge_files(existing_path, new_path)

    assert result.status == 'merged'
    assert not new_path.exists()
    assert operation_names(load_archive(existing_path)) == ['GetCountry', 'GetContinent']


@pytest.mark.asyncio
async def test_merge_files_without_existing_archive(write_har: WriteHar, tmp_path: Path) -> None:
    existing_path = tmp_path / 'mocks' / 'graphql-operations.har'
    new_path = write_har(make_archive(make_entry('GetCountry')), 'session.har')

    result = await ArchiveMergeService().merge_files(existing_path, new_path)

    assert list(result.added) == ['GetCountry']
    assert operation_names(load_archive(existing_path)) == ['GetCountry']


@pytest.mark.asyncio
async def test_merge_files_without_session_leaves_archive_untouched(write_har: WriteHar, tmp_path: Path) -> None:
    existing_path = write_har(make_archive(make_entry('GetCountry')), 'graphql-operations.har')
    before = existing_path.read_bytes()

    result = await ArchiveMergeService().merge_files(existing_path, tmp_path / 'graphql-operations.har.new')

    assert result.status == 'no_new_archive'
    assert existing_path.read_bytes() == before


@pytest.mark.asyncio
async def test_session_without_operations_is_kept_for_inspection(write_har: WriteHar) -> None:
    existing_path = write_har(make_archive(make_entry('GetCountry')), 'graphql-operations.har')
    new_path = write_har(make_archive(make_entry('GetThing', method='GET')), 'graphql-operations.har.new')
    before = existing_path.read_bytes()

    result = await ArchiveMergeService().merge_files(existing_path, new_path)

    assert result.status == 'no_operations'
    assert new_path.exists()
    assert existing_path.read_bytes() == before


@pytest.mark.asyncio
async def test_corrupt_existing_archive_aborts_merge(tmp_path: Path, write_har: WriteHar) -> None:
    existing_path = tmp_path / 'graphql-operations.har'
    existing_path.write_text('not json', encoding='utf-8')
    new_path = write_har(make_archive(make_entry('GetCountry')), 'graphql-operations.har.new')

    with pytest.raises(ArchiveReadError):
        await ArchiveMergeService().merge_files(existing_path, new_path)

    assert new_path.exists()
    assert existing_path.read_text(encoding='utf-8') == 'not json'
