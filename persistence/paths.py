from __future__ import annotations

import os
from pathlib import Path


def project_root() -> Path:
    # persistence/paths.py -> persistence -> project root
    return Path(__file__).resolve().parents[1]


def data_dir() -> Path:
    return ensure_dir(project_root() / "data")


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def db_path() -> Path:
    """Location of the single JSON document; DB_FILE overrides the default."""
    override = os.getenv("DB_FILE", "").strip()
    if override:
        path = Path(override).expanduser()
        ensure_dir(path.parent)
        return path
    return data_dir() / "db.json"
