"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/resolver.py
Builds duplicate groups from the catalog.

Records are grouped by digest pair, then collapsed by physical identity
(device, inode) so that hardlinked paths count as one file. The cluster holding
the lowest path is the representative; every other cluster is waste.
"""

import logging
from typing import Callable, Dict, List, Optional, Tuple

from finddup.core.interfaces import CatalogStore, DuplicateResolver
from finddup.core.models import (
    DuplicateGroup, DuplicateReport, FileDigests, FileRecord, PhysicalCluster,
)

logger = logging.getLogger(__name__)


class DuplicateResolverImpl(DuplicateResolver):
    """
    A DuplicateResolver reading straight from a CatalogStore.
    Holds no state between calls: every run re-queries the catalog.
    """

    def __init__(self, store: CatalogStore):
        self.store = store

    def find_duplicate_groups(
        self,
        path_prefix: Optional[str] = None,
        min_size: Optional[int] = None,
        max_size: Optional[int] = None,
        stopped_flag: Optional[Callable[[], bool]] = None,
    ) -> DuplicateReport:
        report = DuplicateReport()

        pairs = self.store.find_duplicate_digests(path_prefix, min_size, max_size)
        logger.debug(f"{len(pairs)} digest pairs occur more than once")

        for fast, strong in pairs:
            if stopped_flag and stopped_flag():
                logger.debug("Duplicate search interrupted")
                report.cancelled = True
                break

            digests = FileDigests(fast, strong)
            records = self.store.find_by_digests(digests, path_prefix, min_size, max_size)
            group = self.build_group(digests, records)
            if group is None:
                logger.debug(f"Only hardlinks share {fast}: {records[0].path if records else '-'}")
                continue

            if group.is_degraded:
                logger.warning(
                    f"Group of {len(group.clusters)} files has no digests (hashing was disabled); "
                    f"its members were never compared"
                )
            report.add_group(group)

        return report

    @staticmethod
    def build_group(digests: FileDigests, records: List[FileRecord]) -> Optional[DuplicateGroup]:
        """
        Collapse path-ordered records into physical clusters.
        Returns None when all records are one physical file.
        """
        clusters: Dict[Tuple[int, int], PhysicalCluster] = {}
        for record in sorted(records, key=lambda r: r.path):
            cluster = clusters.setdefault(record.physical_id, PhysicalCluster())
            cluster.records.append(record)

        # dicts keep insertion order, so clusters stay ordered by their first path
        group = DuplicateGroup(digests=digests, clusters=list(clusters.values()))
        if not group.is_duplicate():
            return None
        return group
