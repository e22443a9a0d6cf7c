from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any


class UnreadableJsonError(ValueError):
    """Raised when a file exists but holds no parseable JSON."""


def read_json(path: Path) -> Any | None:
    """
    Read JSON from disk.

    Returns None for missing files. Raises UnreadableJsonError for empty files
    or invalid JSON so callers can tell the two apart.
    """
    if not path.exists():
        return None
    try:
        raw = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise UnreadableJsonError(f"{path} is not UTF-8 text") from e
    if not raw.strip():
        raise UnreadableJsonError(f"{path} is empty")
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise UnreadableJsonError(f"{path} is not valid JSON: {e}") from e


def atomic_write_json(path: Path, payload: Any, *, indent: int = 2, sort_keys: bool = False) -> None:
    """
    Atomically write JSON to disk by writing to a temp file then replacing.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=indent, sort_keys=sort_keys, ensure_ascii=False)
        f.write("\n")
    tmp_path.replace(path)


def backup_path_for(path: Path, *, now_ms: int | None = None) -> Path:
    """
    Sibling path for a corrupt file, e.g. db.json -> db.corrupt.1700000000000.json.

    Never returns an existing path.
    """
    ts = int(time.time() * 1000) if now_ms is None else int(now_ms)
    candidate = path.with_name(f"{path.stem}.corrupt.{ts}{path.suffix}")
    n = 1
    while candidate.exists():
        candidate = path.with_name(f"{path.stem}.corrupt.{ts}-{n}{path.suffix}")
        n += 1
    return candidate
