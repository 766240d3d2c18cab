"""
finddup: persisted catalog of file digests for finding duplicate files.

Core features:
- Full and incremental indexing of a directory tree into an SQLite catalog
- Two independent full-content digests per file (MD5 or xxh128, plus SHA-256)
- Duplicate reports and CSV export, hardlinked copies counted once
- Experimental hardlink merge of duplicates (optionally via the system trash)
"""

# Get version
try:
    from importlib.metadata import version as _version
    __version__ = _version("finddup")
except Exception:
    __version__ = "0.0.0"

# Public API: only what users should import directly
from finddup.commands import CatalogCommand
from finddup.core import (
    CatalogParams, DuplicateGroup, DuplicateReport, FileRecord, OperatingMode,
    FinddupError, CatalogError,
)
from finddup.utils.convert_utils import ConvertUtils
from finddup.services import DuplicateService, FileService

__all__ = [
    "CatalogCommand",
    "CatalogParams",
    "DuplicateGroup",
    "DuplicateReport",
    "FileRecord",
    "OperatingMode",
    "FinddupError",
    "CatalogError",
    "ConvertUtils",
    "DuplicateService",
    "FileService",
    "__version__",
]
