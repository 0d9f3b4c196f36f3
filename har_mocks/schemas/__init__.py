"""Schemas for HAR archives and pipeline results."""

from har_mocks.schemas.har import HarArchive, HarContent, HarEntry, HarLog, HarPostData, HarRequest, HarResponse
from har_mocks.schemas.operations import (
    ARTIFACT_SUFFIX,
    INTROSPECTION_OPERATION,
    REGISTRY_INDEX_FILENAME,
    DriftResult,
    DriftStatus,
    LiveResponse,
    MergeResult,
    MockArtifact,
    Operation,
    RegistryIndex,
    ShapeCheckResult,
    StalenessReport,
    ValidationSummary,
)

__all__ = [
    'ARTIFACT_SUFFIX',
    'INTROSPECTION_OPERATION',
    'REGISTRY_INDEX_FILENAME',
    'DriftResult',
    'DriftStatus',
    'HarArchive',
    'HarContent',
    'HarEntry',
    'HarLog',
    'HarPostData',
    'HarRequest',
    'HarResponse',
    'LiveResponse',
    'MergeResult',
    'MockArtifact',
    'Operation',
    'RegistryIndex',
    'ShapeCheckResult',
    'StalenessReport',
    'ValidationSummary',
]
