from __future__ import annotations

from mailer import Mailer
from persistence.document_store import JsonDocumentStore
from persistence.paths import db_path
from persistence.repositories import AsyncDygoRepository, DygoRepository
from settings import get_settings


def get_repo() -> AsyncDygoRepository:
    # Built per request: the store keeps no state between requests, and the
    # per-path lock registry is process-wide.
    settings = get_settings()
    store = JsonDocumentStore(db_path(), strict_writes=settings.strict_writes)
    return AsyncDygoRepository(DygoRepository(store))


def get_mailer() -> Mailer:
    return Mailer(get_settings())
