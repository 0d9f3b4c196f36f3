"""
Mock registry - name-keyed lookup over the generated artifacts.

The registry is a derived value: rebuild() recomputes it from scratch out of
whatever artifacts exist in the mocks directory, then materializes it as
mock-registry.json. There is no incremental patching, so the registry and the
artifact set can't disagree.

A rebuild either succeeds completely or raises RegistryBuildError; the index
file is only replaced (atomically) after every artifact has loaded, so on
failure the previous index remains authoritative.

Consumers receive a MockRegistry object explicitly (no process-wide map) and
look mocks up with has_mock() / get_mock() / list_mocks().
"""

from __future__ import annotations

import copy
import json
from collections.abc import Mapping
from datetime import UTC, datetime
from pathlib import Path
from types import MappingProxyType

import attrs
import pydantic

from har_mocks.exceptions import RegistryBuildError
from har_mocks.protocols import LoggerProtocol, NullLogger
from har_mocks.schemas.operations import ARTIFACT_SUFFIX, REGISTRY_INDEX_FILENAME, RegistryIndex
from har_mocks.services.generator import mocks_dir_lock, read_artifact
from har_mocks.storage.local import LocalFileSystemStorage
from har_mocks.types import JsonValue

__all__ = [
    'MockRegistry',
    'RegistryBuilder',
    'load_registry',
]


def _freeze(mocks: Mapping[str, JsonValue]) -> Mapping[str, JsonValue]:
    return MappingProxyType(dict(mocks))


@attrs.define(frozen=True)
class MockRegistry:
    """Immutable operation name -> mock response payload mapping."""

    mocks: Mapping[str, JsonValue] = attrs.field(converter=_freeze, factory=dict)

    def has_mock(self, operation_name: str) -> bool:
        return operation_name in self.mocks

    def get_mock(self, operation_name: str) -> JsonValue | None:
        """Copy of the stored payload, or None. Callers may mutate the copy freely."""
        if operation_name not in self.mocks:
            return None
        return copy.deepcopy(self.mocks[operation_name])

    def list_mocks(self) -> list[str]:
        return sorted(self.mocks)

    def __len__(self) -> int:
        return len(self.mocks)

    def __contains__(self, operation_name: object) -> bool:
        return operation_name in self.mocks


def load_registry(index_path: Path) -> MockRegistry:
    """
    Load a previously materialized registry index.

    Raises:
        FileNotFoundError: If the index doesn't exist (run extraction first)
        RegistryBuildError: If the index can't be parsed
    """
    try:
        index = RegistryIndex.model_validate_json(index_path.read_bytes())
    except pydantic.ValidationError as e:
        raise RegistryBuildError(index_path, str(e)) from e
    return MockRegistry(mocks=index.mocks)


class RegistryBuilder:
    """Rebuilds the registry from the artifacts in a mocks directory."""

    def __init__(self, logger: LoggerProtocol | None = None) -> None:
        self.logger = logger or NullLogger()

    async def rebuild(self, output_dir: Path) -> MockRegistry:
        """
        Recompute the registry from every *.mock.json in output_dir.

        Returns:
            The new registry (its keys are exactly the artifacts present)

        Raises:
            RegistryBuildError: If any artifact can't be parsed, or its
                operation_name doesn't match its filename
        """
        storage = LocalFileSystemStorage(output_dir, create=True)

        with mocks_dir_lock(output_dir):
            mocks: dict[str, JsonValue] = {}

            for artifact_path in storage.list(ARTIFACT_SUFFIX):
                expected_name = artifact_path.name.removesuffix(ARTIFACT_SUFFIX)
                try:
                    artifact = read_artifact(artifact_path)
                except (OSError, pydantic.ValidationError) as e:
                    await self.logger.error(f'Cannot load {artifact_path.name}')
                    raise RegistryBuildError(artifact_path, str(e)) from e

                if artifact.operation_name != expected_name:
                    raise RegistryBuildError(
                        artifact_path,
                        f'operation_name {artifact.operation_name!r} does not match file name',
                    )
                mocks[expected_name] = artifact.response_payload

            if not mocks:
                await self.logger.warning(f'No mock files found in {output_dir}')

            index = RegistryIndex(generated_at=datetime.now(UTC), mocks=mocks)
            data = json.dumps(index.model_dump(mode='json'), indent=2, ensure_ascii=False)
            storage.save(REGISTRY_INDEX_FILENAME, data.encode('utf-8'))

        registry = MockRegistry(mocks=mocks)
        await self.logger.info(f'Updated {REGISTRY_INDEX_FILENAME} with {len(registry)} operation(s):')
        for name in registry.list_mocks():
            await self.logger.info(f'  - {name}')
        return registry
