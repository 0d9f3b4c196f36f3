"""
Mock artifact generation - one <Operation>.mock.json per recorded operation.

Generation is whole-archive and overwrite-only: the latest capture of an
operation always replaces its artifact, there is no merge at artifact level.
The registry is NOT touched here; callers rebuild it afterwards so the index
is always derived from the complete artifact set.
"""

from __future__ import annotations

import json
import re
from datetime import UTC, datetime
from pathlib import Path

import pydantic
from filelock import FileLock

from har_mocks.protocols import LoggerProtocol, NullLogger
from har_mocks.schemas.har import HarArchive
from har_mocks.schemas.operations import ARTIFACT_SUFFIX, MockArtifact, StalenessReport
from har_mocks.services.extractor import extract_operations, extract_responses_by_operation
from har_mocks.services.fingerprint import fingerprint
from har_mocks.storage.local import LocalFileSystemStorage

__all__ = [
    'MockGeneratorService',
    'artifact_filename',
    'mocks_dir_lock',
    'read_artifact',
]

# GraphQL Name grammar; anything else can't safely become a file name
_GRAPHQL_NAME = re.compile(r'^[_A-Za-z][_0-9A-Za-z]*$')


def artifact_filename(operation_name: str) -> str:
    return f'{operation_name}{ARTIFACT_SUFFIX}'


def mocks_dir_lock(output_dir: Path) -> FileLock:
    """Lock serializing writers of one mocks directory (generation and registry rebuild)."""
    return FileLock(output_dir / '.mocks.lock')


def read_artifact(path: Path) -> MockArtifact:
    """
    Load one artifact file.

    Raises:
        OSError: If the file can't be read
        pydantic.ValidationError: If the content isn't a valid artifact
    """
    return MockArtifact.model_validate_json(path.read_bytes())


class MockGeneratorService:
    """Writes mock artifacts for every operation in an archive."""

    def __init__(self, logger: LoggerProtocol | None = None) -> None:
        self.logger = logger or NullLogger()

    async def generate(self, archive: HarArchive, output_dir: Path) -> int:
        """
        Write one artifact per (operation, response) pair.

        Args:
            archive: Parsed capture
            output_dir: Mocks directory (created if missing)

        Returns:
            Number of artifacts written
        """
        responses = extract_responses_by_operation(archive)
        storage = LocalFileSystemStorage(output_dir, create=True)
        recorded_at = datetime.now(UTC)
        written = 0

        with mocks_dir_lock(output_dir):
            for operation_name, payload in responses.items():
                if not _GRAPHQL_NAME.match(operation_name):
                    await self.logger.warning(f'Skipping operation with invalid name: {operation_name!r}')
                    continue

                artifact = MockArtifact(
                    operation_name=operation_name,
                    fingerprint=fingerprint(payload),
                    recorded_at=recorded_at,
                    response_payload=payload,
                )
                data = json.dumps(artifact.model_dump(mode='json'), indent=2, ensure_ascii=False)
                storage.save(artifact_filename(operation_name), data.encode('utf-8'))
                written += 1
                await self.logger.info(f'Created {artifact_filename(operation_name)} (fingerprint {artifact.fingerprint})')

        await self.logger.info(f'Extracted {written} GraphQL operation(s) to {output_dir}')
        return written

    async def check_staleness(self, archive: HarArchive, output_dir: Path) -> StalenessReport:
        """
        Compare archive responses with stored artifacts.

        An operation is `missing` when it has no artifact and `changed` when the
        archive response fingerprint differs from the stored one. An artifact
        that can't be read counts as changed.
        """
        responses = extract_responses_by_operation(archive)
        missing: list[str] = []
        changed: list[str] = []

        for operation in extract_operations(archive):
            artifact_path = output_dir / artifact_filename(operation.name)
            if not artifact_path.exists():
                missing.append(operation.name)
                continue

            payload = responses.get(operation.name)
            if payload is None:
                # No usable response in the archive, nothing to compare against
                continue

            try:
                stored = read_artifact(artifact_path)
            except (OSError, pydantic.ValidationError) as e:
                await self.logger.warning(f'Unreadable artifact {artifact_path.name}: {e}')
                changed.append(operation.name)
                continue

            current = fingerprint(payload)
            if current != stored.fingerprint:
                await self.logger.info(
                    f'Schema change detected for {operation.name}: {stored.fingerprint} -> {current}'
                )
                changed.append(operation.name)

        return StalenessReport(missing=missing, changed=changed)
