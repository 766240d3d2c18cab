"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models for the file catalog, duplicate detection and run configuration.
"""

import os
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from finddup.core.exceptions import ConfigError
from finddup.utils.convert_utils import ConvertUtils


# =============================
# Enums and constants
# =============================

class OperatingMode(Enum):
    """
    Operating mode of a finddup run. Exactly one is selected per invocation.
    """
    INITIALIZE = "initialize"
    UPDATE = "update"
    CLEANUP = "cleanup"
    SHOW_DUPLICATES = "show-duplicates"
    CSV = "csv"
    HARDLINK_DUPLICATES = "hardlink-duplicates"

    @property
    def display_name(self) -> str:
        """Human-readable name for console output."""
        mapping = {
            OperatingMode.INITIALIZE: "Initialize",
            OperatingMode.UPDATE: "Update",
            OperatingMode.CLEANUP: "Cleanup",
            OperatingMode.SHOW_DUPLICATES: "Show duplicates",
            OperatingMode.CSV: "CSV report",
            OperatingMode.HARDLINK_DUPLICATES: "Hardlink duplicates",
        }
        return mapping.get(self, self.value)

    @property
    def writes_catalog(self) -> bool:
        return self in (
            OperatingMode.INITIALIZE,
            OperatingMode.UPDATE,
            OperatingMode.CLEANUP,
            OperatingMode.HARDLINK_DUPLICATES,
        )

    @property
    def is_experimental(self) -> bool:
        return self == OperatingMode.HARDLINK_DUPLICATES

    def __repr__(self) -> str:
        return self.value


FAST_ALGORITHMS = ("md5", "xxh128")     # 128-bit
STRONG_ALGORITHMS = ("sha256",)         # 256-bit

DEFAULT_CONCURRENCY_THRESHOLD = 1024 * 1024  # 1 MiB


# ======================
#  Core Data Models
# ======================

@dataclass(frozen=True)
class FileDigests:
    """
    Digest pair identifying a file's content.
    Both digests are hex strings; both empty means hashing was disabled.
    """
    fast: str = ""
    strong: str = ""

    def __post_init__(self):
        if not isinstance(self.fast, str) or not isinstance(self.strong, str):
            raise ValueError("Digests must be strings")
        if bool(self.fast) != bool(self.strong):
            raise ValueError("Digests must be both present or both empty")

    @property
    def is_empty(self) -> bool:
        """True for the sentinel pair stored when hashing is disabled."""
        return not self.fast

    def as_tuple(self) -> Tuple[str, str]:
        return self.fast, self.strong


EMPTY_DIGESTS = FileDigests()


@dataclass(frozen=True)
class FileRecord:
    """
    One catalog row: a path and the identity of the file behind it at index time.
    """
    path: str
    device: int
    inode: int
    size: int
    mtime: int
    digest_fast: str = ""
    digest_strong: str = ""

    def __post_init__(self):
        if not self.path:
            raise ValueError("Record path cannot be empty")
        # Reuses the pair validation
        FileDigests(self.digest_fast, self.digest_strong)

    @property
    def digests(self) -> FileDigests:
        return FileDigests(self.digest_fast, self.digest_strong)

    @property
    def physical_id(self) -> Tuple[int, int]:
        """(device, inode): equal for every path of one underlying file."""
        return self.device, self.inode

    def same_physical_file(self, other: "FileRecord") -> bool:
        return self.physical_id == other.physical_id

    @classmethod
    def from_stat(cls, path: str, stat_result: os.stat_result,
                  digests: FileDigests = EMPTY_DIGESTS) -> "FileRecord":
        return cls(
            path=path,
            device=stat_result.st_dev,
            inode=stat_result.st_ino,
            size=stat_result.st_size,
            mtime=int(stat_result.st_mtime),
            digest_fast=digests.fast,
            digest_strong=digests.strong,
        )

    def matches_stat(self, stat_result: os.stat_result) -> bool:
        """True if `stat_result` still describes the file this record was indexed from."""
        return (
            (stat_result.st_dev, stat_result.st_ino, stat_result.st_size, int(stat_result.st_mtime))
            == (self.device, self.inode, self.size, self.mtime)
        )

    def __repr__(self):
        return f"<FileRecord path={self.path}, size={self.size}, inode={self.inode}>"


@dataclass
class PhysicalCluster:
    """
    All catalog paths of one physical file (same device and inode).
    Records are kept in path order, so the first one names the cluster.
    """
    records: List[FileRecord] = field(default_factory=list)

    @property
    def path(self) -> str:
        return self.records[0].path

    @property
    def size(self) -> int:
        return self.records[0].size

    @property
    def device(self) -> int:
        return self.records[0].device

    @property
    def inode(self) -> int:
        return self.records[0].inode

    @property
    def physical_id(self) -> Tuple[int, int]:
        return self.records[0].physical_id

    @property
    def paths(self) -> List[str]:
        return [r.path for r in self.records]

    def __repr__(self):
        return f"<PhysicalCluster path={self.path}, links={len(self.records)}>"


@dataclass
class DuplicateGroup:
    """
    Records sharing one digest pair, collapsed into physical clusters.
    The first cluster holds the representative; the others are waste.
    """
    digests: FileDigests
    clusters: List[PhysicalCluster]

    @property
    def representative(self) -> FileRecord:
        return self.clusters[0].records[0]

    @property
    def wasted_clusters(self) -> List[PhysicalCluster]:
        return self.clusters[1:]

    @property
    def waste(self) -> int:
        """Bytes occupied by the non-representative clusters."""
        return sum(c.size for c in self.wasted_clusters)

    @property
    def size(self) -> int:
        return self.clusters[0].size

    def is_duplicate(self) -> bool:
        """True if at least two distinct physical files share the digest pair."""
        return len(self.clusters) >= 2

    @property
    def is_degraded(self) -> bool:
        """Group built from sentinel digests (hashing disabled)."""
        return self.digests.is_empty

    def __repr__(self):
        return f"<DuplicateGroup size={self.size}, clusters={len(self.clusters)}>"


# ======================
#  Operation results
# ======================

@dataclass
class DuplicateReport:
    """Duplicate groups found so far, plus their accumulated waste."""
    groups: List[DuplicateGroup] = field(default_factory=list)
    total_waste: int = 0
    cancelled: bool = False

    def add_group(self, group: DuplicateGroup) -> None:
        self.groups.append(group)
        self.total_waste += group.waste

    @property
    def wasted_files(self) -> int:
        return sum(len(g.wasted_clusters) for g in self.groups)


@dataclass
class ScanResult:
    """
    Counters collected during a full or incremental scan.
    """
    added: int = 0
    updated: int = 0
    unchanged: int = 0
    skipped: int = 0
    errors: int = 0
    files_hashed: int = 0
    bytes_hashed: int = 0
    hash_time: float = 0.0
    total_time: float = 0.0
    cancelled: bool = False

    def print_summary(self) -> str:
        lines = [
            "Scan Statistics:",
            f"Total Execution Time: {self.total_time:.3f}s",
            f"Added: {self.added}",
            f"Updated: {self.updated}",
            f"Unchanged: {self.unchanged}",
            f"Skipped: {self.skipped}",
            f"Errors: {self.errors}",
            f"Hashed: {self.files_hashed} files / "
            f"{ConvertUtils.bytes_to_human(self.bytes_hashed)} in {self.hash_time:.3f}s",
        ]
        if self.cancelled:
            lines.append("Scan was cancelled before completion.")
        return "\n".join(lines)


@dataclass
class CleanupResult:
    checked: int = 0
    removed: int = 0


@dataclass
class MergeResult:
    """Outcome of a hardlink merge run."""
    linked: int = 0
    skipped: int = 0
    failed: int = 0
    bytes_reclaimed: int = 0
    cancelled: bool = False
    failures: List[Tuple[str, str]] = field(default_factory=list)


# ======================
#  Run configuration
# ======================

@dataclass(frozen=True)
class CatalogParams:
    """
    Immutable run configuration, validated on creation.
    Shared by every operating mode; fields a mode does not use are ignored.
    """
    database: str
    data_path: Optional[str] = None
    min_size_bytes: int = 0
    max_size_bytes: Optional[int] = None
    exclude_patterns: Tuple[str, ...] = ()
    follow_symlinks: bool = False
    force: bool = False
    hashing_enabled: bool = True
    cleanup_before_update: bool = True
    use_trash: bool = False
    concurrent_hashing: Optional[bool] = None
    concurrency_threshold: int = DEFAULT_CONCURRENCY_THRESHOLD
    fast_algorithm: str = "md5"
    strong_algorithm: str = "sha256"
    lower_priority: bool = True
    allow_experimental: bool = False
    compiled_excludes: Tuple[re.Pattern, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        """Validate and normalize parameters immediately after creation."""
        if not self.database:
            raise ConfigError("Database path cannot be empty")

        if self.min_size_bytes < 0:
            raise ConfigError("Minimum size cannot be negative")

        if self.max_size_bytes is not None and self.max_size_bytes <= self.min_size_bytes:
            raise ConfigError("Maximum size must be greater than minimum size")

        if self.concurrency_threshold < 0:
            raise ConfigError("Concurrency threshold cannot be negative")

        if self.fast_algorithm not in FAST_ALGORITHMS:
            raise ConfigError(
                f"Unsupported fast digest '{self.fast_algorithm}'. "
                f"Valid options: {', '.join(FAST_ALGORITHMS)}"
            )
        if self.strong_algorithm not in STRONG_ALGORITHMS:
            raise ConfigError(
                f"Unsupported strong digest '{self.strong_algorithm}'. "
                f"Valid options: {', '.join(STRONG_ALGORITHMS)}"
            )

        if self.data_path:
            object.__setattr__(self, "data_path", os.path.abspath(self.data_path))

        patterns = tuple(p for p in self.exclude_patterns if p)
        compiled = []
        for pattern in patterns:
            try:
                compiled.append(re.compile(pattern))
            except re.error as e:
                raise ConfigError(f"Invalid exclude pattern '{pattern}': {e}") from e
        object.__setattr__(self, "exclude_patterns", patterns)
        object.__setattr__(self, "compiled_excludes", tuple(compiled))

    def size_passes(self, size: int) -> bool:
        """Minimum is inclusive, maximum is exclusive."""
        if size < self.min_size_bytes:
            return False
        if self.max_size_bytes is not None and size >= self.max_size_bytes:
            return False
        return True

    def is_excluded(self, directory: str) -> bool:
        """True if any exclude pattern matches the directory path."""
        return any(p.search(directory) for p in self.compiled_excludes)

    @staticmethod
    def from_human_readable(
            database: str,
            data_path: Optional[str] = None,
            min_size_str: str = "0",
            max_size_str: Optional[str] = None,
            exclude_patterns: Optional[List[str]] = None,
            **options,
    ) -> "CatalogParams":
        """
        Factory method to create params from human-readable sizes.
        Useful for CLI argument parsing and config files.
        """
        try:
            min_size = ConvertUtils.human_to_bytes(min_size_str) if min_size_str else 0
            max_size = ConvertUtils.human_to_bytes(max_size_str) if max_size_str else None
        except ValueError as e:
            raise ConfigError(f"Invalid size format: {e}") from e

        return CatalogParams(
            database=database,
            data_path=data_path,
            min_size_bytes=min_size,
            max_size_bytes=max_size,
            exclude_patterns=tuple(exclude_patterns or ()),
            **options,
        )
