"""
Core catalog engine: digest engine, catalog store, traversal and duplicate resolution.

This package contains the performance-critical foundation of finddup:
- HasherImpl: full-content fast (MD5/xxh128) + strong (SHA-256) digests, optionally concurrent
- SQLiteCatalogStore: the persisted `hashes` table behind a typed repository
- FileScannerImpl: sorted depth-first traversal with full and incremental indexing
- DuplicateResolverImpl: digest-pair grouping collapsed by physical identity
- Models: FileRecord, DuplicateGroup, result objects and run configuration

Nothing here prints or parses arguments, suitable for CLI and library usage.
"""

from .exceptions import (
    FinddupError, DigestError, UnsupportedAlgorithmError,
    ConfigError, CatalogError, CatalogExistsError,
)
from .models import (
    OperatingMode, FileDigests, FileRecord, PhysicalCluster, DuplicateGroup,
    DuplicateReport, ScanResult, CleanupResult, MergeResult, CatalogParams,
    EMPTY_DIGESTS,
)
from .hasher import HasherImpl, get_algorithm, concurrency_supported
from .catalog import SQLiteCatalogStore
from .scanner import FileScannerImpl
from .resolver import DuplicateResolverImpl

__all__ = [
    "FinddupError",
    "DigestError",
    "UnsupportedAlgorithmError",
    "ConfigError",
    "CatalogError",
    "CatalogExistsError",
    "OperatingMode",
    "FileDigests",
    "FileRecord",
    "PhysicalCluster",
    "DuplicateGroup",
    "DuplicateReport",
    "ScanResult",
    "CleanupResult",
    "MergeResult",
    "CatalogParams",
    "EMPTY_DIGESTS",
    "HasherImpl",
    "get_algorithm",
    "concurrency_supported",
    "SQLiteCatalogStore",
    "FileScannerImpl",
    "DuplicateResolverImpl",
]
