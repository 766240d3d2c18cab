"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

interfaces.py

Defines core interfaces (Protocols) used throughout the catalog system.
These protocols enforce structural typing using Python's `typing.Protocol` to ensure
consistency across modules while keeping the engine testable with fakes.

Key Components:
---------------
- HashAlgorithm: Standardized interface for streaming hash functions (MD5, SHA-256, xxHash).
- Hasher: Interface for computing a file's digest pair.
- CatalogStore: Typed repository over the persisted file catalog.
- FileScanner: Interface for the traversal/indexing engine.
- DuplicateResolver: Interface for grouping catalog records into duplicate groups.
"""

from typing import Protocol, List, Optional, Callable, Tuple
from finddup.core.models import (
    FileRecord,
    FileDigests,
    DuplicateReport,
    ScanResult,
)


# ===== Interfaces =====

class HashAlgorithm(Protocol):
    """
    Interface for a streaming hash algorithm.

    `new()` returns a hashlib-compatible object exposing `update()` and `hexdigest()`.
    """
    name: str
    digest_bits: int

    def new(self):
        """Creates a fresh hash state."""
        ...


class Hasher(Protocol):
    """Interface for hashing a file's full content."""
    def digest(self, path: str, algorithm: str) -> str: ...
    def compute_digests(self, path: str, size: int) -> FileDigests: ...


class CatalogStore(Protocol):
    """
    Repository over the persisted catalog. Every method either succeeds or
    raises CatalogError; callers never see raw database exceptions.
    """
    def recreate(self) -> None:
        """Drop and recreate the catalog table."""
        ...

    def insert(self, record: FileRecord) -> None: ...

    def upsert(self, record: FileRecord) -> None: ...

    def find_by_path(self, path: str) -> Optional[FileRecord]: ...

    def find_by_identity(self, path: str, device: int, inode: int) -> Optional[FileRecord]: ...

    def delete(self, path: str) -> bool: ...

    def update_identity(self, path: str, device: int, inode: int, size: int, mtime: int) -> None: ...

    def all_paths(self) -> List[str]: ...

    def find_duplicate_digests(
        self,
        path_prefix: Optional[str] = None,
        min_size: Optional[int] = None,
        max_size: Optional[int] = None,
    ) -> List[Tuple[str, str]]:
        """Digest pairs occurring more than once, ordered by their lowest path."""
        ...

    def find_by_digests(
        self,
        digests: FileDigests,
        path_prefix: Optional[str] = None,
        min_size: Optional[int] = None,
        max_size: Optional[int] = None,
    ) -> List[FileRecord]:
        """Records sharing a digest pair, ordered by path."""
        ...

    def commit(self) -> None: ...


class FileScanner(Protocol):
    """
    Interface for walking a directory tree and indexing it into the catalog.
    """
    def scan(
        self,
        full: bool,
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> ScanResult:
        """
        Walk the configured data path and write records to the catalog.

        Args:
            full: Rebuild the catalog from scratch instead of updating it.
            stopped_flag: Function that returns True if operation should be canceled.
            progress_callback: Optional callback for reporting progress (stage, current, total).

        Returns:
            ScanResult with per-outcome counters.
        """
        ...


class DuplicateResolver(Protocol):
    """
    Interface for grouping catalog records by content and physical identity.
    """
    def find_duplicate_groups(
        self,
        path_prefix: Optional[str] = None,
        min_size: Optional[int] = None,
        max_size: Optional[int] = None,
        stopped_flag: Optional[Callable[[], bool]] = None,
    ) -> DuplicateReport:
        """
        Build duplicate groups from the catalog.

        Args:
            path_prefix: Only consider records below this path.
            min_size: Inclusive lower size bound in bytes.
            max_size: Exclusive upper size bound in bytes.
            stopped_flag: Optional function to check for cancellation between groups.

        Returns:
            DuplicateReport (partial and flagged cancelled if stopped early).
        """
        ...
