from __future__ import annotations

from pathlib import Path
import sys


import pytest


# Ensure the repository root (parent of ./tests) is importable during pytest collection.
# This avoids ModuleNotFoundError for imports like `import persistence...` under pytest import modes
# that don't automatically prepend the cwd/rootdir to sys.path.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def sandbox_project(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """
    Redirect persistence paths to a temp project directory so tests never touch real ./data.
    """
    import persistence.paths as paths

    def _project_root() -> Path:
        return tmp_path

    monkeypatch.setattr(paths, "project_root", _project_root)
    monkeypatch.setenv("DB_FILE", str(tmp_path / "data" / "db.json"))
    for name in ("APP_ENV", "SMTP_HOST", "STRICT_WRITES", "PUBLIC_APP_URL", "RESET_TOKEN_TTL_SECONDS"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


@pytest.fixture
def db_file(sandbox_project: Path) -> Path:
    return sandbox_project / "data" / "db.json"


@pytest.fixture
def store(db_file: Path):
    from persistence.document_store import JsonDocumentStore

    return JsonDocumentStore(db_file)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def repo(store, clock: FakeClock):
    from persistence.repositories import DygoRepository

    return DygoRepository(store, clock=clock)


@pytest.fixture
def client(sandbox_project: Path):
    from fastapi.testclient import TestClient

    import app as app_module

    with TestClient(app_module.create_app()) as c:
        yield c
