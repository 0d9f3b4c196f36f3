"""
Tests for HAR capture fixtures.

These tests validate that all fixtures in the fixtures/ directory
parse as HAR archives. This serves multiple purposes:

1. Regression testing - ensures model changes don't break real captures
2. Documentation - fixtures demonstrate real-world edge cases
3. CI integration - can run in CI without access to a live recorder
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from har_mocks.schemas.har import HarArchive
from tests.conftest import ARCHIVE_FIXTURES_DIR, FIXTURES_DIR


def get_archive_fixtures() -> list[Path]:
    """Get all HAR fixture files."""
    if not ARCHIVE_FIXTURES_DIR.exists():
        return []
    return sorted(ARCHIVE_FIXTURES_DIR.glob('*.har'))


@pytest.mark.parametrize(
    'fixture_path',
    get_archive_fixtures(),
    ids=lambda p: p.name,
)
def test_archive_fixture_validates(fixture_path: Path) -> None:
    """Each fixture must parse as a HAR archive with at least one entry."""
    archive = HarArchive.model_validate_json(fixture_path.read_bytes())
    assert archive.entries, f'Fixture {fixture_path.name} has no entries'


def test_fixtures_directory_exists() -> None:
    """Verify fixtures directory structure exists."""
    assert FIXTURES_DIR.exists(), 'fixtures/ directory not found'
    assert ARCHIVE_FIXTURES_DIR.exists(), 'fixtures/archives/ directory not found'


def test_archives_have_manifest() -> None:
    """Verify archives has a manifest.json documenting the fixtures."""
    manifest_path = ARCHIVE_FIXTURES_DIR / 'manifest.json'
    assert manifest_path.exists(), 'fixtures/archives/manifest.json not found'

    with open(manifest_path) as f:
        manifest = json.load(f)

    assert 'fixtures' in manifest, 'manifest.json missing "fixtures" key'

    fixture_files = {p.name for p in get_archive_fixtures()}
    documented_fixtures = set(manifest['fixtures'].keys())

    undocumented = fixture_files - documented_fixtures
    assert not undocumented, f'Fixtures not documented in manifest: {undocumented}'
