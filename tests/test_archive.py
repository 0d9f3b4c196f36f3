"""Tests for reading and writing the HAR archive resource."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from har_mocks.exceptions import ArchiveReadError
from har_mocks.schemas.har import HarArchive
from har_mocks.services.archive import load_archive, read_archive, save_archive


def test_missing_archive_is_empty(tmp_path: Path) -> None:
    path = tmp_path / 'absent.har'
    assert read_archive(path) is None
    assert list(load_archive(path).entries) == []


def test_corrupt_archive_is_fatal(tmp_path: Path) -> None:
    path = tmp_path / 'corrupt.har'
    path.write_text('{"log": {"entries": [', encoding='utf-8')

    with pytest.raises(ArchiveReadError) as exc_info:
        load_archive(path)
    assert exc_info.value.path == path


def test_round_trip_preserves_unmodeled_fields(countries_archive_path: Path, tmp_path: Path) -> None:
    archive = load_archive(countries_archive_path)
    out = tmp_path / 'copy.har'
    save_archive(archive, out)

    original = json.loads(countries_archive_path.read_text(encoding='utf-8'))
    written = json.loads(out.read_text(encoding='utf-8'))
    assert written == original


def test_save_creates_parent_directory_and_leaves_no_temp_files(tmp_path: Path) -> None:
    out = tmp_path / 'mocks' / 'graphql-operations.har'
    save_archive(HarArchive.empty(), out)

    assert json.loads(out.read_text(encoding='utf-8')) == {'log': {'entries': []}}
    assert [p.name for p in out.parent.iterdir()] == ['graphql-operations.har']


def test_with_entries_keeps_envelope(countries_archive_path: Path) -> None:
    archive = load_archive(countries_archive_path)
    trimmed = archive.with_entries(archive.entries[:1])

    dumped = trimmed.model_dump(mode='json', by_alias=True, exclude_unset=True)
    assert dumped['log']['creator'] == {'name': 'Playwright', 'version': '1.49.1'}
    assert len(dumped['log']['entries']) == 1
    assert len(archive.entries) == 5
