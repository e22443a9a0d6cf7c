from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Any, Protocol


class DocumentStore(Protocol):
    """
    A single JSON-like document persisted as a whole.
    """

    def load(self) -> dict[str, Any]:
        """Load and return the full document (never None, never raises on bad content)."""
        ...

    def save(self, doc: dict[str, Any]) -> None:
        """Persist the full document, replacing prior content."""
        ...

    def transaction(self) -> AbstractContextManager[dict[str, Any]]:
        """Serialized load -> mutate -> save cycle."""
        ...
