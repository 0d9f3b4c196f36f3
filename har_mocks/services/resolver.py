"""
Request-to-mock resolution for the consuming test layer.

The test runner's interception hook hands every intercepted GraphQL request
body to resolve(); the result is either the mock payload to fulfil the
request with, or None meaning "let the request through to the live server".

Strict mode (default) turns a missing mock into MissingMockError so a test
never silently hits the network; permissive mode falls back to live traffic.
Introspection always goes through.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from har_mocks.config.base import PipelineSettings, settings
from har_mocks.exceptions import MissingMockError
from har_mocks.schemas.operations import INTROSPECTION_OPERATION, REGISTRY_INDEX_FILENAME
from har_mocks.services.extractor import BODY_DECODE_ERRORS, operation_name_from_payload
from har_mocks.services.registry import MockRegistry, load_registry
from har_mocks.types import JsonValue

__all__ = ['MockResolver']

logger = logging.getLogger(__name__)


class MockResolver:
    """Resolves intercepted GraphQL requests against a MockRegistry."""

    def __init__(self, registry: MockRegistry, strict: bool = True) -> None:
        self.registry = registry
        self.strict = strict

    @classmethod
    def from_settings(cls, pipeline_settings: PipelineSettings | None = None) -> MockResolver:
        """
        Resolver over the registry index in MOCKS_DIR, honoring STRICT_MODE.

        Raises:
            FileNotFoundError: If the registry hasn't been built yet
            RegistryBuildError: If the index can't be parsed
        """
        config = pipeline_settings or settings
        registry = load_registry(config.MOCKS_DIR / REGISTRY_INDEX_FILENAME)
        return cls(registry, strict=config.STRICT_MODE)

    def has_mock(self, operation_name: str) -> bool:
        return self.registry.has_mock(operation_name)

    def get_mock(self, operation_name: str) -> JsonValue | None:
        return self.registry.get_mock(operation_name)

    def list_mocks(self) -> list[str]:
        return self.registry.list_mocks()

    def resolve(self, request_body: str | Mapping[str, Any] | None) -> JsonValue | None:
        """
        Mock payload for an intercepted request, or None to pass it through.

        Args:
            request_body: Raw POST body text, or the already-parsed JSON payload

        Raises:
            MissingMockError: In strict mode, when the operation has no mock
        """
        operation_name = self._operation_name(request_body)

        if operation_name == INTROSPECTION_OPERATION:
            return None

        if operation_name is not None and self.registry.has_mock(operation_name):
            return self.registry.get_mock(operation_name)

        if self.strict:
            raise MissingMockError(operation_name)

        logger.warning('No mock found for: %s, falling back to live server', operation_name)
        return None

    @staticmethod
    def _operation_name(request_body: str | Mapping[str, Any] | None) -> str | None:
        if request_body is None:
            return None

        if isinstance(request_body, Mapping):
            payload = dict(request_body)
        else:
            try:
                payload = json.loads(request_body)
            except BODY_DECODE_ERRORS:
                return None

        if not isinstance(payload, dict):
            return None
        return operation_name_from_payload(payload)
