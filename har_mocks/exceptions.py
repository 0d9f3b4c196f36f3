"""
Shared exceptions for har-mocks.

Only whole-resource failures are raised. Per-operation problems (bad request
bodies, missing mocks, live errors) are collected and reported instead.

Exception Hierarchy:
    HarMocksError (base)
    ├── ArchiveReadError (archive exists but cannot be parsed)
    ├── ArchiveEntryError (requested exchange missing or without embedded body)
    ├── RegistryBuildError (a mock artifact cannot be loaded during rebuild)
    ├── MissingMockError (strict-mode lookup for an operation with no mock)
    └── LiveEndpointError (live endpoint returned something unusable)
"""

from __future__ import annotations

from pathlib import Path


class HarMocksError(Exception):
    """Base exception for all har-mocks errors."""


class ArchiveReadError(HarMocksError):
    """Raised when an archive file exists but is not a readable HAR document."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f'Cannot read archive {path}: {reason}')


class ArchiveEntryError(HarMocksError):
    """Raised when a specific exchange requested from an archive is absent or unusable."""

    def __init__(self, url_fragment: str, reason: str) -> None:
        self.url_fragment = url_fragment
        self.reason = reason
        super().__init__(f'Archive entry matching {url_fragment!r}: {reason}')


class RegistryBuildError(HarMocksError):
    """Raised when a mock artifact cannot be loaded. The previous registry stays authoritative."""

    def __init__(self, artifact_path: Path, reason: str) -> None:
        self.artifact_path = artifact_path
        self.reason = reason
        super().__init__(
            f'Registry rebuild aborted: invalid mock artifact {artifact_path.name}: {reason}\n'
            f'Fix or delete the artifact and re-run extraction.'
        )


class MissingMockError(HarMocksError):
    """Raised in strict mode when a request has no registered mock."""

    def __init__(self, operation_name: str | None) -> None:
        self.operation_name = operation_name
        super().__init__(f'Missing mock for operation: {operation_name}')


class LiveEndpointError(HarMocksError):
    """Raised when the live endpoint response cannot be interpreted."""
