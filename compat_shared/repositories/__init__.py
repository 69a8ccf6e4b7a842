"""Repository layer for the compatibility document."""

from .compatibility import (
    CompatibilityRepository,
    ConcurrencyConflictError,
    ContentsAPI,
    DocumentStoreError,
    Snapshot,
    serialize_games,
)

__all__ = [
    "CompatibilityRepository",
    "ConcurrencyConflictError",
    "ContentsAPI",
    "DocumentStoreError",
    "Snapshot",
    "serialize_games",
]
