"""Database utilities for DeepCurrent.

This module contains:
- Connection pool management
- Store error hierarchy
- Alembic migrations
"""

from deepcurrent.db.errors import (
    ConflictError,
    ConnectionError,
    InvalidTransitionError,
    NotFoundError,
    StoreError,
)

__all__ = [
    "StoreError",
    "ConnectionError",
    "NotFoundError",
    "ConflictError",
    "InvalidTransitionError",
]
