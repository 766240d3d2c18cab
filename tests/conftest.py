"""
Shared fixtures for finddup tests.
Creates isolated temporary directory trees with controlled file contents.
"""
import logging
import pytest
from pathlib import Path
from typing import Dict

from finddup.core.catalog import SQLiteCatalogStore
from finddup.core.hasher import HasherImpl
from finddup.core.models import CatalogParams


CONTENT_A = b"A" * 1024
CONTENT_B = b"B" * 2048


@pytest.fixture
def data_dir(tmp_path) -> Path:
    """Empty directory to be indexed (kept apart from the catalog file)."""
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def db_path(tmp_path) -> Path:
    return tmp_path / "catalog.db"


@pytest.fixture
def test_files(data_dir) -> Dict[str, Path]:
    """
    Creates controlled files:
    - a.txt, b.txt, sub/c.txt: identical 1KB (one duplicate group)
    - d.txt, e.txt: identical 2KB (second group)
    - unique.txt: different content
    - empty.txt: zero bytes (never indexed)
    """
    files = {}

    files["a"] = data_dir / "a.txt"
    files["b"] = data_dir / "b.txt"
    files["a"].write_bytes(CONTENT_A)
    files["b"].write_bytes(CONTENT_A)

    subdir = data_dir / "sub"
    subdir.mkdir()
    files["c"] = subdir / "c.txt"
    files["c"].write_bytes(CONTENT_A)

    files["d"] = data_dir / "d.txt"
    files["e"] = data_dir / "e.txt"
    files["d"].write_bytes(CONTENT_B)
    files["e"].write_bytes(CONTENT_B)

    files["unique"] = data_dir / "unique.txt"
    files["unique"].write_bytes(b"C" * 1500)

    files["empty"] = data_dir / "empty.txt"
    files["empty"].write_bytes(b"")

    return files


@pytest.fixture
def make_params(db_path, data_dir):
    """Factory for CatalogParams pointing at the test catalog and data directory."""
    def _make(**overrides) -> CatalogParams:
        values = dict(
            database=str(db_path),
            data_path=str(data_dir),
            lower_priority=False,
            concurrent_hashing=False,
        )
        values.update(overrides)
        return CatalogParams(**values)
    return _make


@pytest.fixture
def hasher() -> HasherImpl:
    return HasherImpl(concurrent=False)


@pytest.fixture
def store(db_path):
    """Freshly created, writable catalog."""
    with SQLiteCatalogStore(db_path, create=True) as s:
        yield s


@pytest.fixture(autouse=True)
def reset_log_level():
    """The CLI sets the package logger level; keep it from leaking between tests."""
    yield
    logging.getLogger("finddup").setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """No test may pick up the user's own configuration file."""
    monkeypatch.delenv("FINDDUP_CONFIG", raising=False)
    monkeypatch.setattr("finddup.config.DEFAULT_CONFIG_PATH", tmp_path / "no-such-config.toml")
