from __future__ import annotations

import uuid
from typing import Any, Callable, Iterable, Mapping

from .errors import NotFound

Record = dict[str, Any]
Predicate = Callable[[Record], bool]


def new_id() -> str:
    return str(uuid.uuid4())


def owned_by(user_id: Any) -> Predicate | None:
    """
    Predicate matching records whose userId equals user_id, compared as strings
    so "1" and 1 name the same owner. A falsy user_id means no filter.
    """
    if not user_id:
        return None
    owner = str(user_id)
    return lambda r: r.get("userId") is not None and str(r.get("userId")) == owner


class CollectionAccessor:
    """
    Find/insert/update/delete over one named list inside a loaded document.

    A missing (or non-list) collection reads as empty; the first mutation
    installs a fresh list. The accessor never persists anything itself.
    """

    def __init__(self, doc: dict[str, Any], name: str, *, label: str | None = None):
        self._doc = doc
        self._name = name
        self._label = label or name

    @property
    def name(self) -> str:
        return self._name

    def _items(self) -> list[Record]:
        items = self._doc.get(self._name)
        return items if isinstance(items, list) else []

    def _writable_items(self) -> list[Record]:
        items = self._doc.get(self._name)
        if not isinstance(items, list):
            items = []
            self._doc[self._name] = items
        return items

    def _index_of(self, record_id: str) -> int:
        for i, rec in enumerate(self._items()):
            if isinstance(rec, dict) and rec.get("id") == record_id:
                return i
        raise NotFound(f"{self._label} not found")

    def list(self, predicate: Predicate | None = None) -> list[Record]:
        records = [r for r in self._items() if isinstance(r, dict)]
        if predicate is None:
            return records
        return [r for r in records if predicate(r)]

    def get_by_id(self, record_id: str) -> Record:
        return self._items()[self._index_of(record_id)]

    def append(self, record: Mapping[str, Any]) -> Record:
        """Append a copy of the record verbatim, without touching its id."""
        rec = dict(record)
        self._writable_items().append(rec)
        return rec

    def insert(self, record: Mapping[str, Any]) -> Record:
        rec = dict(record)
        if not rec.get("id"):
            rec["id"] = new_id()
        return self.append(rec)

    def update_by_id(self, record_id: str, partial: Mapping[str, Any]) -> Record:
        idx = self._index_of(record_id)
        items = self._writable_items()
        merged = {**items[idx], **partial, "id": items[idx].get("id")}
        items[idx] = merged
        return merged

    def delete_by_id(self, record_id: str) -> None:
        idx = self._index_of(record_id)
        del self._writable_items()[idx]

    def replace_where(self, predicate: Predicate, records: Iterable[Mapping[str, Any]]) -> None:
        items = self._writable_items()
        kept = [r for r in items if not (isinstance(r, dict) and predicate(r))]
        kept.extend(dict(r) for r in records)
        items[:] = kept
