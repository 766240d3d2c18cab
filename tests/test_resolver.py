"""
Tests for DuplicateResolverImpl: grouping by digest pair, physical identity
collapsing, representative choice and waste accounting.
"""
import logging
import os
import pytest

from finddup.core.catalog import SQLiteCatalogStore
from finddup.core.models import FileDigests, FileRecord
from finddup.core.resolver import DuplicateResolverImpl
from finddup.core.scanner import FileScannerImpl

DIGESTS = FileDigests("a" * 32, "a" * 64)


def rec(path, device, inode, size=10):
    return FileRecord(path, device, inode, size, 0, DIGESTS.fast, DIGESTS.strong)


def index(params, hasher, full=True):
    with SQLiteCatalogStore(params.database, create=full, force=True) as store:
        FileScannerImpl(params, store, hasher).scan(full=full)
        store.commit()


def resolve(params, **filters):
    with SQLiteCatalogStore(params.database, readonly=True) as store:
        return DuplicateResolverImpl(store).find_duplicate_groups(**filters)


class TestBuildGroup:
    def test_collapses_hardlinks_into_one_cluster(self):
        group = DuplicateResolverImpl.build_group(DIGESTS, [
            rec("/d/b", 1, 2), rec("/d/a", 1, 1), rec("/d/c", 1, 1),
        ])

        assert [c.paths for c in group.clusters] == [["/d/a", "/d/c"], ["/d/b"]]
        assert group.representative.path == "/d/a"
        assert group.waste == 10

    def test_only_hardlinks_is_not_a_group(self):
        assert DuplicateResolverImpl.build_group(DIGESTS, [rec("/d/a", 1, 1), rec("/d/b", 1, 1)]) is None

    def test_same_inode_on_other_device_is_a_different_file(self):
        group = DuplicateResolverImpl.build_group(DIGESTS, [rec("/d/a", 1, 1), rec("/e/a", 2, 1)])
        assert len(group.clusters) == 2

    def test_waste_counts_every_non_representative_cluster(self):
        group = DuplicateResolverImpl.build_group(DIGESTS, [
            rec("/d/a", 1, 1), rec("/d/b", 1, 2), rec("/d/c", 1, 3),
        ])
        assert group.waste == 20
        assert [c.path for c in group.wasted_clusters] == ["/d/b", "/d/c"]


class TestScenarios:
    @pytest.fixture
    def abc(self, data_dir):
        files = {name: data_dir / name for name in ("A", "B", "C")}
        files["A"].write_bytes(b"x")
        files["B"].write_bytes(b"x")
        files["C"].write_bytes(b"y")
        return files

    def test_identical_pair_forms_one_group(self, abc, make_params, hasher):
        params = make_params()
        index(params, hasher)

        report = resolve(params)

        assert len(report.groups) == 1
        group = report.groups[0]
        assert group.representative.path == str(abc["A"])
        assert [c.path for c in group.wasted_clusters] == [str(abc["B"])]
        assert report.total_waste == 1
        assert not report.cancelled

    def test_hardlink_is_not_reported_as_waste(self, abc, make_params, hasher, data_dir):
        params = make_params()
        index(params, hasher)
        os.link(abc["A"], data_dir / "D")

        index(params, hasher, full=False)
        report = resolve(params)

        group = report.groups[0]
        assert group.clusters[0].paths == [str(abc["A"]), str(data_dir / "D")]
        assert [c.path for c in group.wasted_clusters] == [str(abc["B"])]
        assert report.total_waste == 1

    def test_prefix_filter(self, test_files, make_params, hasher, data_dir):
        params = make_params()
        index(params, hasher)

        report = resolve(params, path_prefix=str(data_dir / "sub"))
        assert report.groups == []

        report = resolve(params, path_prefix=str(data_dir))
        assert len(report.groups) == 2

    def test_size_filters(self, test_files, make_params, hasher):
        params = make_params()
        index(params, hasher)

        report = resolve(params, min_size=2048)
        assert [g.size for g in report.groups] == [2048]

        report = resolve(params, max_size=2048)
        assert [g.size for g in report.groups] == [1024]

    def test_groups_ordered_by_lowest_path(self, test_files, make_params, hasher):
        params = make_params()
        index(params, hasher)

        report = resolve(params)
        assert [g.representative.path for g in report.groups] == [
            str(test_files["a"]), str(test_files["d"])
        ]
        assert report.total_waste == 2 * 1024 + 2048
        assert report.wasted_files == 3

    def test_stopped_flag_returns_partial_report(self, test_files, make_params, hasher):
        params = make_params()
        index(params, hasher)

        report = resolve(params, stopped_flag=lambda: True)
        assert report.cancelled
        assert report.groups == []

    def test_disabled_hashing_makes_one_degraded_group(self, abc, make_params, hasher, caplog):
        caplog.set_level(logging.WARNING, logger="finddup")
        params = make_params(hashing_enabled=False)
        index(params, hasher)

        report = resolve(params)

        assert len(report.groups) == 1
        assert report.groups[0].is_degraded
        assert len(report.groups[0].clusters) == 3
        assert "hashing was disabled" in caplog.text
