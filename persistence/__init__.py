from __future__ import annotations

from .collection_accessor import CollectionAccessor
from .document_store import JsonDocumentStore
from .goals_sync import GoalsSync
from .repositories import AsyncDygoRepository, DygoRepository
from .reset_tokens import ResetTokenLedger

__all__ = [
    "CollectionAccessor",
    "JsonDocumentStore",
    "GoalsSync",
    "ResetTokenLedger",
    "DygoRepository",
    "AsyncDygoRepository",
]
