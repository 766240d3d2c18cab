"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

commands.py
Unified command orchestrator for the catalog.
This is the single entry point to the engine used by the CLI and by library callers.
"""
import logging
import os
from typing import Callable, Optional

from finddup.core.catalog import SQLiteCatalogStore
from finddup.core.exceptions import ConfigError
from finddup.core.hasher import HasherImpl
from finddup.core.models import (
    CatalogParams, CleanupResult, DuplicateReport, MergeResult, ScanResult,
)
from finddup.core.resolver import DuplicateResolverImpl
from finddup.core.scanner import FileScannerImpl
from finddup.services.duplicate_service import DuplicateService

logger = logging.getLogger(__name__)


class CatalogCommand:
    """
    Runs one operating mode against the catalog described by `params`.

    Usage:
        params = CatalogParams.from_human_readable("finddup.db", "/data", min_size_str="1K")
        command = CatalogCommand(params)
        result = command.initialize(stopped_flag=lambda: False)
        report = command.find_duplicates()

    Every method opens the catalog, does its work, commits, and closes it again.
    """

    def __init__(self, params: CatalogParams):
        self.params = params

    def create_hasher(self) -> HasherImpl:
        return HasherImpl(
            fast_algorithm=self.params.fast_algorithm,
            strong_algorithm=self.params.strong_algorithm,
            concurrent=self.params.concurrent_hashing,
            concurrency_threshold=self.params.concurrency_threshold,
        )

    def initialize(
            self,
            stopped_flag: Optional[Callable[[], bool]] = None,
            progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None,
    ) -> ScanResult:
        """
        Builds a new catalog from scratch.

        Raises:
            CatalogExistsError: the catalog file exists and `force` is not set.
        """
        self._require_data_path()
        with SQLiteCatalogStore(self.params.database, create=True, force=self.params.force) as store:
            scanner = FileScannerImpl(self.params, store, self.create_hasher())
            result = scanner.scan(full=True, stopped_flag=stopped_flag, progress_callback=progress_callback)
            store.commit()
        return result

    def update(
            self,
            stopped_flag: Optional[Callable[[], bool]] = None,
            progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None,
    ) -> ScanResult:
        """
        Re-indexes new and modified files, optionally removing stale records first.

        Raises:
            CatalogError: the catalog does not exist yet.
        """
        self._require_data_path()
        with SQLiteCatalogStore(self.params.database) as store:
            if self.params.cleanup_before_update:
                cleanup = self._cleanup(store)
                logger.info(f"Removed {cleanup.removed} of {cleanup.checked} stale records")
            scanner = FileScannerImpl(self.params, store, self.create_hasher())
            result = scanner.scan(full=False, stopped_flag=stopped_flag, progress_callback=progress_callback)
            store.commit()
        return result

    def cleanup(self) -> CleanupResult:
        """Deletes every record whose path is no longer an existing file."""
        with SQLiteCatalogStore(self.params.database) as store:
            result = self._cleanup(store)
        return result

    def find_duplicates(self, stopped_flag: Optional[Callable[[], bool]] = None) -> DuplicateReport:
        """Reads duplicate groups, restricted to `data_path` and the size bounds when set."""
        with SQLiteCatalogStore(self.params.database, readonly=True) as store:
            return self._find_groups(store, stopped_flag)

    def merge_duplicates(self, stopped_flag: Optional[Callable[[], bool]] = None) -> MergeResult:
        """
        Replaces redundant copies with hardlinks to each group's representative.

        Raises:
            ConfigError: experimental features are not enabled.
        """
        if not self.params.allow_experimental:
            raise ConfigError("Hardlinking duplicates is experimental, add --experimental to enable it")

        with SQLiteCatalogStore(self.params.database) as store:
            report = self._find_groups(store, stopped_flag)
            result = DuplicateService.merge_groups(
                report.groups,
                store,
                force=self.params.force,
                use_trash=self.params.use_trash,
                stopped_flag=stopped_flag,
            )
            result.cancelled = result.cancelled or report.cancelled
            store.commit()
        return result

    def _find_groups(self, store: SQLiteCatalogStore,
                     stopped_flag: Optional[Callable[[], bool]]) -> DuplicateReport:
        resolver = DuplicateResolverImpl(store)
        min_size = self.params.min_size_bytes or None
        return resolver.find_duplicate_groups(
            path_prefix=self.params.data_path,
            min_size=min_size,
            max_size=self.params.max_size_bytes,
            stopped_flag=stopped_flag,
        )

    @staticmethod
    def _cleanup(store: SQLiteCatalogStore) -> CleanupResult:
        result = CleanupResult()
        for path in store.all_paths():
            result.checked += 1
            if not os.path.isfile(path):
                store.delete(path)
                logger.info(f"Removed from catalog: {path}")
                result.removed += 1
        store.commit()
        return result

    def _require_data_path(self) -> None:
        if not self.params.data_path:
            raise ConfigError("--data-path is required to initialize or update the catalog")
