"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/scanner.py
Traversal engine: walks a directory tree and indexes it into the catalog.
Features:
- Depth-first walk with entries visited in sorted order (reproducible runs)
- Exclusion patterns tested against directory paths
- Optional symlink following with directory cycle protection
- Full rebuild or incremental update keyed on modification time
"""

import os
import stat
import time
import logging
from typing import Callable, Iterator, List, Optional, Set, Tuple

# Local imports
from finddup.core.catalog import MAX_PATH_LENGTH
from finddup.core.exceptions import ConfigError, DigestError
from finddup.core.interfaces import FileScanner, CatalogStore, Hasher
from finddup.core.models import CatalogParams, FileRecord, ScanResult, EMPTY_DIGESTS
from finddup.utils.priority import lower_priority

logger = logging.getLogger(__name__)

PROGRESS_INTERVAL = 1000  # Report progress every N files
COMMIT_INTERVAL = 1000    # Commit catalog writes every N records


class FileScannerImpl(FileScanner):
    """
    Walks `params.data_path` and writes one record per qualifying regular file.

    Attributes:
        params: Immutable run configuration
        store: Catalog the records are written to
        hasher: Digest engine used for new and changed files
    """

    def __init__(self, params: CatalogParams, store: CatalogStore, hasher: Hasher):
        self.params = params
        self.store = store
        self.hasher = hasher
        self._pending_writes = 0

    def scan(self,
             full: bool,
             stopped_flag: Optional[Callable[[], bool]] = None,
             progress_callback: Optional[Callable[[str, int, object], None]] = None) -> ScanResult:
        """
        Index the data path into the catalog.

        In full mode the catalog table is dropped and recreated first and every
        file is hashed. In incremental mode files whose stored mtime matches the
        on-disk mtime are left untouched.
        """
        root = self.params.data_path
        if not root:
            raise ConfigError("A data path is required to scan")
        if not os.path.isdir(root):
            raise ConfigError(f"Not a directory: {root}")

        logger.debug(f"Starting {'full' if full else 'incremental'} scan of {root}")
        result = ScanResult()
        start_time = time.time()

        if self.params.lower_priority:
            lower_priority()

        if full:
            self.store.recreate()

        processed = 0
        for path, st in self._walk(root, result, stopped_flag):
            self._process_file(path, st, full, result)
            processed += 1
            if progress_callback and processed % PROGRESS_INTERVAL == 0:
                progress_callback("scanning", processed, None)

        if progress_callback and processed % PROGRESS_INTERVAL:
            progress_callback("scanning", processed, None)

        if stopped_flag and stopped_flag():
            logger.debug("Scan interrupted")
            result.cancelled = True

        result.total_time = time.time() - start_time
        logger.debug(f"Scan completed in {result.total_time:.2f} seconds")
        return result

    def _walk(self,
              root: str,
              result: ScanResult,
              stopped_flag: Optional[Callable[[], bool]]) -> Iterator[Tuple[str, os.stat_result]]:
        """
        Yields (path, stat) for every regular, non-empty file in depth-first,
        name-sorted order. Everything else is counted and logged here.
        """
        if self.params.is_excluded(root):
            logger.info(f"Skipping excluded directory: {root}")
            return

        visited: Set[Tuple[int, int]] = set()
        root_stat = os.stat(root)
        visited.add((root_stat.st_dev, root_stat.st_ino))

        stack: List[Iterator[os.DirEntry]] = []
        entries = self._list_dir(root, result)
        if entries is not None:
            stack.append(iter(entries))

        while stack:
            if stopped_flag and stopped_flag():
                return

            entry = next(stack[-1], None)
            if entry is None:
                stack.pop()
                continue

            path = entry.path
            try:
                if entry.is_symlink() and not self.params.follow_symlinks:
                    logger.info(f"Skipping symbolic link: {path}")
                    result.skipped += 1
                    continue
                st = entry.stat(follow_symlinks=True)
            except OSError as e:
                logger.warning(f"Cannot stat {path}: {e}")
                result.errors += 1
                continue

            if stat.S_ISDIR(st.st_mode):
                if self.params.is_excluded(path):
                    logger.info(f"Skipping excluded directory: {path}")
                    continue
                identity = (st.st_dev, st.st_ino)
                if identity in visited:
                    logger.info(f"Skipping already visited directory: {path}")
                    continue
                visited.add(identity)
                children = self._list_dir(path, result)
                if children is not None:
                    stack.append(iter(children))

            elif stat.S_ISREG(st.st_mode):
                if st.st_size == 0:
                    logger.debug(f"Skipping zero-byte file: {path}")
                    result.skipped += 1
                    continue
                yield path, st

            else:
                logger.debug(f"Skipping special file: {path}")
                result.skipped += 1

    @staticmethod
    def _list_dir(path: str, result: ScanResult) -> Optional[List[os.DirEntry]]:
        """Returns the directory entries sorted by name, or None if unreadable."""
        try:
            with os.scandir(path) as it:
                return sorted(it, key=lambda e: e.name)
        except OSError as e:
            logger.warning(f"Cannot read directory {path}: {e}")
            result.errors += 1
            return None

    def _process_file(self, path: str, st: os.stat_result, full: bool, result: ScanResult) -> None:
        """
        Apply size and length policy, then insert (full) or upsert (incremental) the record.
        Hash failures are logged and the file is left out of the catalog.
        """
        if not self.params.size_passes(st.st_size):
            if st.st_size < self.params.min_size_bytes:
                logger.debug(f"Skipping {path} (size {st.st_size} below minimum)")
            else:
                logger.info(f"Skipping {path} (size {st.st_size} above maximum)")
            result.skipped += 1
            return

        if len(path) > MAX_PATH_LENGTH:
            logger.warning(f"Skipping {path} (path longer than {MAX_PATH_LENGTH} characters)")
            result.skipped += 1
            return

        if not _is_storable(path):
            logger.warning(f"Skipping {path!r} (name is not valid UTF-8)")
            result.errors += 1
            return

        existed = False
        if not full:
            existing = self.store.find_by_identity(path, st.st_dev, st.st_ino)
            if existing is not None and existing.mtime == int(st.st_mtime):
                logger.debug(f"Unchanged: {path}")
                result.unchanged += 1
                return
            existed = existing is not None or self.store.find_by_path(path) is not None

        try:
            digests = self._hash(path, st.st_size, result)
        except DigestError as e:
            logger.warning(str(e))
            result.errors += 1
            return

        record = FileRecord.from_stat(path, st, digests)
        if full:
            self.store.insert(record)
        else:
            self.store.upsert(record)

        if existed:
            logger.info(f"Updated: {path}")
            result.updated += 1
        else:
            logger.info(f"Added: {path}")
            result.added += 1

        self._pending_writes += 1
        if self._pending_writes >= COMMIT_INTERVAL:
            self.store.commit()
            self._pending_writes = 0

    def _hash(self, path: str, size: int, result: ScanResult):
        if not self.params.hashing_enabled:
            return EMPTY_DIGESTS

        start = time.perf_counter()
        digests = self.hasher.compute_digests(path, size)
        result.hash_time += time.perf_counter() - start
        result.files_hashed += 1
        result.bytes_hashed += size
        return digests


def _is_storable(path: str) -> bool:
    """Catalog paths are UTF-8 text; undecodable names carry surrogate escapes."""
    try:
        path.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True
