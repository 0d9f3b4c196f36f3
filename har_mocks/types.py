"""
Shared type definitions for the har-mocks package.

Centralizes common type annotations used across multiple modules.
"""

from datetime import datetime
from typing import Annotated, Any

import pydantic

# Pydantic-enhanced datetime for JSON serialization (allows string→datetime conversion)
JsonDatetime = Annotated[datetime, pydantic.Field(strict=False)]

# Parsed JSON document (dict / list / str / int / float / bool / None)
JsonValue = Any
