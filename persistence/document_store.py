from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from json_store import UnreadableJsonError, atomic_write_json, backup_path_for, read_json

from .errors import StorageCorrupt, StorageWriteFailed
from .interfaces import DocumentStore
from .locks import GLOBAL_PATH_LOCKS
from .records import empty_document

logger = logging.getLogger(__name__)


class JsonDocumentStore(DocumentStore):
    """
    Stores the whole application document in one JSON file.

    - load() always returns a dict. A missing file is created empty; an empty,
      unparseable or non-object file is renamed aside and replaced.
    - save() writes atomically. With strict_writes a failure raises
      StorageWriteFailed, otherwise it is only logged.
    - transaction() holds the per-path lock for a full load -> mutate -> save.
    """

    def __init__(self, path: Path, *, strict_writes: bool = True):
        self._path = path
        self._strict_writes = strict_writes

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[str, Any]:
        return self._load()[0]

    def _load(self) -> tuple[dict[str, Any], bool]:
        """Return (document, writable); writable is False when an unreadable file is still in place."""
        with GLOBAL_PATH_LOCKS.lock_for(self._path):
            try:
                raw = self._read()
            except StorageCorrupt as e:
                logger.warning("DB LOAD: %s", e.message)
                if not self._backup_corrupt():
                    return empty_document(), False
                raw = None
            if raw is None:
                doc = empty_document()
                self._write(doc, strict=False)
                return doc, True
            return raw, True

    def save(self, doc: dict[str, Any]) -> None:
        with GLOBAL_PATH_LOCKS.lock_for(self._path):
            self._write(doc, strict=self._strict_writes)

    @contextmanager
    def transaction(self) -> Iterator[dict[str, Any]]:
        # Nothing is written if the block raises, or if the file on disk could
        # not be read nor moved aside.
        with GLOBAL_PATH_LOCKS.lock_for(self._path):
            doc, writable = self._load()
            yield doc
            if not writable:
                logger.error("DB SAVE: refusing to overwrite unreadable %s", self._path)
                if self._strict_writes:
                    raise StorageWriteFailed()
                return
            self.save(doc)

    def _read(self) -> dict[str, Any] | None:
        try:
            raw = read_json(self._path)
        except UnreadableJsonError as e:
            raise StorageCorrupt(str(e)) from e
        except OSError as e:
            raise StorageCorrupt(f"failed to read {self._path}: {e!r}") from e
        if raw is None:
            logger.info("DB LOAD: %s not found, creating empty document", self._path)
            return None
        if not isinstance(raw, dict):
            raise StorageCorrupt(f"{self._path} root is {type(raw).__name__}, expected object")
        return raw

    def _backup_corrupt(self) -> bool:
        backup = backup_path_for(self._path)
        try:
            self._path.replace(backup)
        except OSError:
            logger.exception("DB LOAD: failed to back up corrupt %s", self._path)
            return False
        logger.warning("DB LOAD: corrupt file moved to %s", backup)
        return True

    def _write(self, doc: dict[str, Any], *, strict: bool) -> None:
        try:
            atomic_write_json(self._path, doc)
        except (OSError, TypeError, ValueError) as e:
            logger.error("DB SAVE: failed to write %s: %r", self._path, e)
            if strict:
                raise StorageWriteFailed() from e
