"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/catalog.py
SQLite-backed catalog of file records.

The catalog is a single table, `hashes`, keyed by absolute filename. All
statements are parameterized, and every database failure surfaces as a
CatalogError: once a statement has failed the catalog is not trusted further.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import List, Optional, Tuple

from finddup.core.exceptions import CatalogError, CatalogExistsError
from finddup.core.interfaces import CatalogStore
from finddup.core.models import FileRecord, FileDigests

logger = logging.getLogger(__name__)

TABLE_NAME = "hashes"
MAX_PATH_LENGTH = 500

SCHEMA = f"""
CREATE TABLE {TABLE_NAME} (
    filename VARCHAR({MAX_PATH_LENGTH}) NOT NULL UNIQUE,
    inode INTEGER,
    size INTEGER,
    mtime INTEGER,
    dev INTEGER,
    md5 CHAR(32),
    sha256 CHAR(64)
);
CREATE INDEX {TABLE_NAME}_digests ON {TABLE_NAME} (md5, sha256);
CREATE INDEX {TABLE_NAME}_mtime ON {TABLE_NAME} (mtime);
"""

_COLUMNS = "filename, inode, size, mtime, dev, md5, sha256"


class SQLiteCatalogStore(CatalogStore):
    """
    Opens an existing catalog, or creates a new one.

    Args:
        db_path:
          Location of the SQLite catalog file.
        create:
          Create the catalog table, dropping any existing one. Refuses to touch
          an existing file unless `force` is set.
        force:
          Allow `create` to reuse an existing catalog file.
        readonly:
          Open an existing catalog without write access (report modes).

    Raises:
        CatalogExistsError: `create` on an existing file without `force`.
        CatalogError: the catalog is missing, not a catalog, or unusable.
    """

    def __init__(self, db_path, create: bool = False, force: bool = False, readonly: bool = False):
        if create and readonly:
            raise ValueError("Can't create a catalog in read-only mode.")

        self._db_path = Path(db_path)
        self._readonly = readonly
        self._closed = False

        if create:
            if self._db_path.exists() and not force:
                raise CatalogExistsError(
                    f"Catalog {self._db_path} already exists. "
                    f"Use --force to rebuild it from scratch."
                )
            self._conn = self._connect(str(self._db_path))
            self.recreate()
        else:
            if not self._db_path.is_file():
                raise CatalogError(
                    f"Catalog not found: {self._db_path}. Run with --initialize first."
                )
            uri = self._db_path.resolve().as_uri()
            if readonly:
                uri += "?mode=ro"
            self._conn = self._connect(uri, uri=True)
            self._check_schema()

    @staticmethod
    def _connect(database: str, uri: bool = False) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(database, uri=uri)
        except sqlite3.Error as e:
            raise CatalogError(f"Cannot open catalog {database}: {e}") from e
        conn.row_factory = sqlite3.Row
        return conn

    def __enter__(self) -> "SQLiteCatalogStore":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    @contextmanager
    def _statement(self, action: str):
        """Translates database failures into CatalogError."""
        try:
            yield
        except (sqlite3.Error, UnicodeError) as e:
            raise CatalogError(f"Catalog {action} failed: {e}") from e

    def _check_schema(self) -> None:
        with self._statement("schema check"):
            row = self._conn.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?",
                (TABLE_NAME,),
            ).fetchone()
        if row is None:
            raise CatalogError(f"{self._db_path} does not contain a '{TABLE_NAME}' table.")

    # ======================
    #  Writes
    # ======================

    def recreate(self) -> None:
        """Drop and recreate the catalog table (full rebuild)."""
        self._assert_writable()
        with self._statement("table creation"):
            self._conn.execute(f"DROP TABLE IF EXISTS {TABLE_NAME}")
            self._conn.executescript(SCHEMA)
            self._conn.commit()
        logger.debug(f"Catalog table recreated in {self._db_path}")

    def insert(self, record: FileRecord) -> None:
        """Adds a new record. Fails if the path is already cataloged."""
        self._write(f"INSERT INTO {TABLE_NAME} ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                    record, "insert")

    def upsert(self, record: FileRecord) -> None:
        """Adds a record, replacing any existing row for the same path."""
        self._write(f"INSERT OR REPLACE INTO {TABLE_NAME} ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                    record, "replace")

    def _write(self, sql: str, record: FileRecord, action: str) -> None:
        self._assert_writable()
        with self._statement(f"{action} of {record.path}"):
            self._conn.execute(sql, (
                record.path, record.inode, record.size, record.mtime,
                record.device, record.digest_fast, record.digest_strong,
            ))

    def delete(self, path: str) -> bool:
        """Removes the record for `path`. Returns False if there was none."""
        self._assert_writable()
        with self._statement(f"delete of {path}"):
            cur = self._conn.execute(f"DELETE FROM {TABLE_NAME} WHERE filename = ?", (path,))
        return cur.rowcount > 0

    def update_identity(self, path: str, device: int, inode: int, size: int, mtime: int) -> None:
        """Points an existing record at another physical file (after hardlinking)."""
        self._assert_writable()
        with self._statement(f"update of {path}"):
            cur = self._conn.execute(
                f"UPDATE {TABLE_NAME} SET dev = ?, inode = ?, size = ?, mtime = ? WHERE filename = ?",
                (device, inode, size, mtime, path),
            )
        if cur.rowcount < 1:
            raise CatalogError(f"Updating {path} failed because it isn't in the catalog.")

    def commit(self) -> None:
        """Commits all pending changes."""
        with self._statement("commit"):
            self._conn.commit()

    # ======================
    #  Reads
    # ======================

    def find_by_path(self, path: str) -> Optional[FileRecord]:
        with self._statement(f"lookup of {path}"):
            row = self._conn.execute(
                f"SELECT {_COLUMNS} FROM {TABLE_NAME} WHERE filename = ?", (path,)
            ).fetchone()
        return self._to_record(row) if row else None

    def find_by_identity(self, path: str, device: int, inode: int) -> Optional[FileRecord]:
        """Finds the record for `path` only if it still refers to the same physical file."""
        with self._statement(f"lookup of {path}"):
            row = self._conn.execute(
                f"SELECT {_COLUMNS} FROM {TABLE_NAME} "
                f"WHERE filename = ? AND dev = ? AND inode = ?",
                (path, device, inode),
            ).fetchone()
        return self._to_record(row) if row else None

    def all_paths(self) -> List[str]:
        """Every cataloged path, in path order."""
        with self._statement("path listing"):
            rows = self._conn.execute(
                f"SELECT filename FROM {TABLE_NAME} ORDER BY filename"
            ).fetchall()
        return [row["filename"] for row in rows]

    def count(self) -> int:
        with self._statement("count"):
            return self._conn.execute(f"SELECT COUNT(*) FROM {TABLE_NAME}").fetchone()[0]

    def find_duplicate_digests(
        self,
        path_prefix: Optional[str] = None,
        min_size: Optional[int] = None,
        max_size: Optional[int] = None,
    ) -> List[Tuple[str, str]]:
        """Digest pairs shared by more than one record, ordered by their lowest path."""
        where, params = self._filters(path_prefix, min_size, max_size)
        sql = (
            f"SELECT md5, sha256 FROM {TABLE_NAME}{where} "
            f"GROUP BY md5, sha256 HAVING COUNT(*) > 1 ORDER BY MIN(filename)"
        )
        with self._statement("duplicate query"):
            rows = self._conn.execute(sql, params).fetchall()
        return [(row["md5"] or "", row["sha256"] or "") for row in rows]

    def find_by_digests(
        self,
        digests: FileDigests,
        path_prefix: Optional[str] = None,
        min_size: Optional[int] = None,
        max_size: Optional[int] = None,
    ) -> List[FileRecord]:
        """Records sharing `digests`, within the same filters, ordered by path."""
        where, params = self._filters(path_prefix, min_size, max_size)
        where = (where + " AND" if where else " WHERE") + " md5 = ? AND sha256 = ?"
        params.extend([digests.fast, digests.strong])
        sql = f"SELECT {_COLUMNS} FROM {TABLE_NAME}{where} ORDER BY filename"
        with self._statement("group query"):
            rows = self._conn.execute(sql, params).fetchall()
        return [self._to_record(row) for row in rows]

    @staticmethod
    def _filters(path_prefix: Optional[str], min_size: Optional[int],
                 max_size: Optional[int]) -> Tuple[str, list]:
        clauses = []
        params: list = []
        if path_prefix:
            prefix = path_prefix.rstrip(os.sep) or os.sep
            below = prefix if prefix.endswith(os.sep) else prefix + os.sep
            clauses.append("(filename = ? OR substr(filename, 1, ?) = ?)")
            params.extend([prefix, len(below), below])
        if min_size is not None:
            clauses.append("size >= ?")
            params.append(min_size)
        if max_size is not None:
            clauses.append("size < ?")
            params.append(max_size)
        if not clauses:
            return "", params
        return " WHERE " + " AND ".join(clauses), params

    @staticmethod
    def _to_record(row: sqlite3.Row) -> FileRecord:
        return FileRecord(
            path=row["filename"],
            device=row["dev"],
            inode=row["inode"],
            size=row["size"],
            mtime=row["mtime"],
            digest_fast=row["md5"] or "",
            digest_strong=row["sha256"] or "",
        )

    # ======================
    #  Lifecycle
    # ======================

    def close(self) -> None:
        """Closes the catalog."""
        if self._closed:
            return
        if self._conn.in_transaction:
            logger.warning("Closing catalog with uncommitted changes; they are discarded.")
        self._conn.close()
        self._closed = True

    def _assert_writable(self) -> None:
        if self._readonly:
            raise CatalogError("Catalog is open in read-only mode.")

    @property
    def db_path(self) -> str:
        return str(self._db_path)

    @property
    def readonly(self) -> bool:
        return self._readonly

    @property
    def in_transaction(self) -> bool:
        return self._conn.in_transaction
