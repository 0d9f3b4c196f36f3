"""
Pipeline operation schemas.

Models produced and consumed by the extraction, generation, validation and
merge services. Persisted models (MockArtifact, RegistryIndex) are the on-disk
format of the mocks directory; the rest are per-run results.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping, Sequence
from typing import Literal

import pydantic

from har_mocks.base_model import StrictModel
from har_mocks.schemas.har import HarArchive
from har_mocks.types import JsonDatetime, JsonValue

# Schema introspection traffic is never treated as an application operation
INTROSPECTION_OPERATION = 'IntrospectionQuery'

ARTIFACT_SUFFIX = '.mock.json'
REGISTRY_INDEX_FILENAME = 'mock-registry.json'


# ==============================================================================
# Extraction
# ==============================================================================


class Operation(StrictModel):
    """A named GraphQL operation; identity is `name` (case-sensitive)."""

    name: str
    query: str


# ==============================================================================
# Mock artifacts (persisted)
# ==============================================================================


class MockArtifact(StrictModel):
    """
    One generated mock, written as <operation_name>.mock.json.

    Overwritten (not versioned) whenever the operation is re-extracted.
    """

    operation_name: str
    fingerprint: str = pydantic.Field(description='Structural hash of response_payload')
    recorded_at: JsonDatetime
    response_payload: JsonValue


class RegistryIndex(StrictModel):
    """
    The materialized registry (mock-registry.json).

    AUTO-GENERATED: derived from the artifact set by every rebuild.
    """

    generated_at: JsonDatetime
    mocks: Mapping[str, JsonValue]


class StalenessReport(StrictModel):
    """Archive operations whose stored mock is absent or has a different fingerprint."""

    missing: Sequence[str]
    changed: Sequence[str]

    @property
    def up_to_date(self) -> bool:
        return not self.missing and not self.changed


# ==============================================================================
# Drift validation (never persisted)
# ==============================================================================


class DriftStatus(enum.StrEnum):
    OK = 'OK'
    DRIFT = 'DRIFT'
    ERROR = 'ERROR'
    REMOVED = 'REMOVED'


class LiveResponse(StrictModel):
    """
    Result of one live call.

    `data is None` covers both an absent and a null data payload; an empty
    object is a real (empty) payload.
    """

    data: JsonValue = None
    errors: Sequence[str] = ()


class DriftResult(StrictModel):
    """Validation outcome for a single operation."""

    operation_name: str
    status: DriftStatus
    message: str
    added_fields: Sequence[str] = ()
    removed_fields: Sequence[str] = ()


class ValidationSummary(StrictModel):
    """Counts per status for one validation pass."""

    ok: int
    drift: int
    error: int
    removed: int

    @property
    def requires_action(self) -> bool:
        return bool(self.drift or self.error or self.removed)


# ==============================================================================
# Merge
# ==============================================================================

MergeStatus = Literal['merged', 'no_new_archive', 'no_operations']


class MergeResult(StrictModel):
    """
    Outcome of reconciling a new capture with the stored archive.

    Status:
    - merged: new archive contained user operations and was reconciled
    - no_new_archive: nothing was captured; existing archive untouched
    - no_operations: new archive parsed but held no user operations
    """

    status: MergeStatus
    archive: HarArchive
    added: Sequence[str] = ()
    updated: Sequence[str] = ()


# ==============================================================================
# REST shape check (never persisted)
# ==============================================================================


class ShapeCheckResult(StrictModel):
    """Archived vs live shape signature of one REST exchange."""

    archived_signature: str
    live_signature: str
    added: Sequence[str] = ()
    removed: Sequence[str] = ()

    @property
    def changed(self) -> bool:
        return self.archived_signature != self.live_signature
