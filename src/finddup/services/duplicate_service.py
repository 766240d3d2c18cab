"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/duplicate_service.py
Turns duplicate groups into human reports, CSV rows, or hardlink merges.
"""
import csv
import logging
import os
from typing import Callable, Iterator, List, Optional, TextIO

from finddup.core.interfaces import CatalogStore
from finddup.core.models import DuplicateGroup, DuplicateReport, FileRecord, MergeResult
from finddup.services.file_service import FileService
from finddup.utils.convert_utils import ConvertUtils

logger = logging.getLogger(__name__)

CSV_HEADER = ["group", "size", "path"]


class DuplicateService:
    @staticmethod
    def report_lines(report: DuplicateReport, show_totals: bool = True) -> Iterator[str]:
        """
        Yields the human-readable report: each group's representative followed
        by the other physical copies, then per-group and running waste.
        """
        running_total = 0
        for group in report.groups:
            yield group.representative.path
            for cluster in group.wasted_clusters:
                yield f"    {cluster.path}"
            running_total += group.waste
            if show_totals:
                yield (
                    f"  wasted: {ConvertUtils.bytes_to_human(group.waste)} "
                    f"(total {ConvertUtils.bytes_to_human(running_total)})"
                )
            yield ""

    @staticmethod
    def summary_line(report: DuplicateReport) -> str:
        """One-line summary of the waste accumulated so far."""
        status = " (interrupted, partial result)" if report.cancelled else ""
        return (
            f"{len(report.groups)} duplicate groups, {report.wasted_files} redundant files, "
            f"{ConvertUtils.bytes_to_human(report.total_waste)} wasted{status}"
        )

    @staticmethod
    def write_csv(report: DuplicateReport, stream: TextIO, include_total: bool = True) -> None:
        """
        Writes one row per physical cluster: (group number, size, path).
        Group numbers start at 1; the representative's cluster comes first.
        """
        writer = csv.writer(stream)
        writer.writerow(CSV_HEADER)
        for number, group in enumerate(report.groups, 1):
            for cluster in group.clusters:
                writer.writerow([number, cluster.size, cluster.path])
        if include_total:
            writer.writerow(["total", report.total_waste, ""])

    @staticmethod
    def merge_groups(
        groups: List[DuplicateGroup],
        store: CatalogStore,
        force: bool = False,
        use_trash: bool = False,
        stopped_flag: Optional[Callable[[], bool]] = None,
    ) -> MergeResult:
        """
        Replaces every non-representative path with a hardlink to the representative.

        Without `force`, existing entries are never removed or overwritten: only
        paths that have disappeared since indexing are recreated as links.
        Per-path failures are recorded and skipped. Catalog failures propagate.
        """
        result = MergeResult()

        for group in groups:
            if stopped_flag and stopped_flag():
                result.cancelled = True
                break

            representative = group.representative
            if not DuplicateService._representative_intact(group):
                result.skipped += sum(len(c.records) for c in group.wasted_clusters)
                continue

            for cluster in group.wasted_clusters:
                if cluster.device != representative.device:
                    logger.warning(
                        f"Not linking {cluster.path}: on another device than {representative.path}"
                    )
                    result.skipped += len(cluster.records)
                    continue

                linked_paths = 0
                for record in cluster.records:
                    if DuplicateService._merge_path(representative, record, force, use_trash, result):
                        store.update_identity(
                            record.path, representative.device, representative.inode,
                            representative.size, representative.mtime,
                        )
                        linked_paths += 1

                if linked_paths == len(cluster.records):
                    result.bytes_reclaimed += cluster.size

            store.commit()

        return result

    @staticmethod
    def _representative_intact(group: DuplicateGroup) -> bool:
        """The representative must still be the file the catalog describes."""
        representative = group.representative
        try:
            st = os.stat(representative.path)
        except OSError as e:
            logger.warning(f"Skipping group: representative {representative.path} unavailable: {e}")
            return False
        if not representative.matches_stat(st):
            logger.warning(
                f"Skipping group: {representative.path} changed since it was indexed, run --update first"
            )
            return False
        return True

    @staticmethod
    def _merge_path(source: FileRecord, target: FileRecord, force: bool, use_trash: bool,
                    result: MergeResult) -> bool:
        """Links one path. Returns True if the catalog should now point at `source`."""
        path = target.path
        if os.path.lexists(path):
            if FileService.is_same_file(source.path, path):
                logger.info(f"Already linked: {path}")
                result.skipped += 1
                return True
            try:
                st = os.stat(path)
            except OSError as e:
                logger.warning(f"Not linking {path}: {e}")
                result.skipped += 1
                return False
            if not target.matches_stat(st):
                logger.warning(f"Not linking {path}: changed since it was indexed, run --update first")
                result.skipped += 1
                return False
            if not force:
                logger.info(f"Exists, leaving untouched (use --force to replace): {path}")
                result.skipped += 1
                return False

        try:
            FileService.replace_with_hardlink(source.path, path, use_trash=use_trash)
        except RuntimeError as e:
            logger.warning(str(e))
            result.failed += 1
            result.failures.append((path, str(e)))
            return False

        logger.info(f"Linked: {path} -> {source.path}")
        result.linked += 1
        return True
