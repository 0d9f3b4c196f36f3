"""
Shared Pydantic base models.

All models we own inherit from StrictModel. Models describing third-party
formats we only partially understand (HAR records) inherit from
PermissiveModel so unknown fields survive a load/save round-trip.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class StrictModel(BaseModel):
    """Base model with strict validation settings."""

    model_config = ConfigDict(
        extra='forbid',  # Raise error on unexpected fields
        strict=True,  # Strict type validation
        frozen=True,  # Immutable (cannot modify after creation)
    )


class PermissiveModel(BaseModel):
    """
    Base model for external formats.

    Symmetry with StrictModel:
    - StrictModel: extra='forbid' (rejects unknown fields)
    - PermissiveModel: extra='allow' (keeps unknown fields for re-serialization)
    """

    model_config = ConfigDict(
        extra='allow',
        frozen=True,
        populate_by_name=True,
    )
