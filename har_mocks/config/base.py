"""
Pipeline configuration.

Settings are read from environment variables (prefixed HAR_MOCKS_) and an
optional .env file.
"""

from __future__ import annotations

import os
import pathlib
from typing import TypeVar

import lazy_object_proxy
import pydantic
import pydantic_settings

T = TypeVar('T', bound='PipelineSettings')


class PipelineSettings(pydantic_settings.BaseSettings):
    """Configuration for archive extraction, mock generation and drift validation."""

    model_config = pydantic_settings.SettingsConfigDict(
        env_prefix='HAR_MOCKS_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=True,  # Fail fast on misconfiguration
        extra='forbid',  # Reject unknown environment variables
    )

    # Application metadata
    APP_NAME: str = 'har-mocks'
    VERSION: str = '0.1.0'

    # Persisted layout
    HAR_PATH: pathlib.Path = pathlib.Path('mocks') / 'graphql-operations.har'
    MOCKS_DIR: pathlib.Path = pathlib.Path('mocks') / 'graphql'

    # Live endpoint used for validation
    GRAPHQL_ENDPOINT: str = 'https://countries.trevorblades.com/'
    LIVE_TIMEOUT_SECONDS: float = 10.0  # Bound on a single validation round-trip
    VALIDATION_TIMEOUT_SECONDS: float = 300.0  # Bound on the whole validation pass

    # Consumer-side behaviour for requests without a mock
    STRICT_MODE: bool = True

    @pydantic.field_validator('LIVE_TIMEOUT_SECONDS', 'VALIDATION_TIMEOUT_SECONDS')
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Timeouts must be positive; an unbounded live call is never allowed."""
        if v <= 0:
            raise ValueError('timeouts must be greater than 0 seconds')
        return v

    @pydantic.field_validator('GRAPHQL_ENDPOINT')
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        if not v.startswith(('http://', 'https://')):
            raise ValueError('GRAPHQL_ENDPOINT must be an http(s) URL')
        return v

    @property
    def new_har_path(self) -> pathlib.Path:
        """Location a fresh recording session writes to before it is merged."""
        return self.HAR_PATH.with_name(self.HAR_PATH.name + '.new')


def get_settings(settings_class: type[T] = PipelineSettings, env_file: str | None = None) -> T:
    """
    Factory for creating settings with dynamic .env file loading.

    LOAD_ENV_FILE environment variable specifies custom .env file path.
    When unset, loads from environment variables (and ./.env if present).

    Args:
        settings_class: Settings class to instantiate
        env_file: Optional path to .env file (overrides LOAD_ENV_FILE)

    Returns:
        Settings instance

    Raises:
        FileNotFoundError: If specified .env file doesn't exist
    """
    env_file_path = env_file or os.getenv('LOAD_ENV_FILE')

    if not env_file_path:
        return settings_class()

    resolved_path = pathlib.Path(env_file_path).resolve()
    if not resolved_path.exists():
        raise FileNotFoundError(f'Environment file not found: {resolved_path}')

    return settings_class(_env_file=resolved_path)


def lazy_settings(settings_class: type[T]) -> T:
    """
    Lazy settings - defers instantiation until first access.

    Args:
        settings_class: Settings class to instantiate

    Returns:
        Proxy that instantiates settings on first access
    """
    return lazy_object_proxy.Proxy(lambda: get_settings(settings_class))


# Module-level singleton (lazy-loaded)
settings = lazy_settings(PipelineSettings)
