"""
Tests for CatalogCommand: the orchestration of every operating mode.
"""
import os
import pytest

from finddup.commands import CatalogCommand
from finddup.core.catalog import SQLiteCatalogStore
from finddup.core.exceptions import CatalogError, CatalogExistsError, ConfigError


def paths_in(params):
    with SQLiteCatalogStore(params.database, readonly=True) as store:
        return store.all_paths()


class TestInitialize:
    def test_builds_catalog(self, test_files, make_params):
        params = make_params()
        result = CatalogCommand(params).initialize()

        assert result.added == 6
        assert len(paths_in(params)) == 6

    def test_refuses_existing_catalog(self, test_files, make_params):
        params = make_params()
        CatalogCommand(params).initialize()

        with pytest.raises(CatalogExistsError):
            CatalogCommand(params).initialize()

    def test_force_rebuilds(self, test_files, make_params):
        CatalogCommand(make_params()).initialize()
        test_files["unique"].unlink()

        result = CatalogCommand(make_params(force=True)).initialize()

        assert result.added == 5
        assert str(test_files["unique"]) not in paths_in(make_params())

    def test_requires_data_path(self, make_params):
        with pytest.raises(ConfigError, match="--data-path"):
            CatalogCommand(make_params(data_path=None)).initialize()


class TestUpdate:
    def test_missing_catalog_raises(self, test_files, make_params):
        with pytest.raises(CatalogError, match="--initialize"):
            CatalogCommand(make_params()).update()

    def test_update_removes_stale_records_first(self, test_files, make_params):
        params = make_params()
        CatalogCommand(params).initialize()
        test_files["unique"].unlink()

        result = CatalogCommand(params).update()

        assert result.unchanged == 5
        assert str(test_files["unique"]) not in paths_in(params)

    def test_no_cleanup_keeps_stale_records(self, test_files, make_params):
        params = make_params(cleanup_before_update=False)
        CatalogCommand(params).initialize()
        test_files["unique"].unlink()

        CatalogCommand(params).update()

        assert str(test_files["unique"]) in paths_in(params)

    def test_update_without_changes_hashes_nothing(self, test_files, make_params):
        params = make_params()
        CatalogCommand(params).initialize()

        result = CatalogCommand(params).update()

        assert result.files_hashed == 0
        assert result.unchanged == 6


class TestCleanup:
    def test_removes_exactly_missing_paths(self, test_files, make_params):
        params = make_params()
        CatalogCommand(params).initialize()
        test_files["a"].unlink()
        test_files["d"].unlink()

        result = CatalogCommand(params).cleanup()

        assert result.checked == 6
        assert result.removed == 2
        remaining = paths_in(params)
        assert str(test_files["a"]) not in remaining
        assert str(test_files["d"]) not in remaining
        assert len(remaining) == 4

    def test_directory_at_cataloged_path_is_removed(self, test_files, make_params):
        params = make_params()
        CatalogCommand(params).initialize()
        test_files["unique"].unlink()
        test_files["unique"].mkdir()

        assert CatalogCommand(params).cleanup().removed == 1

    def test_cleanup_does_not_touch_files(self, test_files, make_params):
        params = make_params()
        CatalogCommand(params).initialize()
        before = sorted(os.listdir(test_files["a"].parent))

        CatalogCommand(params).cleanup()

        assert sorted(os.listdir(test_files["a"].parent)) == before


class TestFindDuplicates:
    def test_reports_groups_under_data_path(self, test_files, make_params, data_dir):
        CatalogCommand(make_params()).initialize()

        report = CatalogCommand(make_params()).find_duplicates()
        assert len(report.groups) == 2

        report = CatalogCommand(make_params(data_path=str(data_dir / "sub"))).find_duplicates()
        assert report.groups == []

    def test_size_filters_apply(self, test_files, make_params):
        CatalogCommand(make_params()).initialize()

        report = CatalogCommand(make_params(min_size_bytes=2000)).find_duplicates()
        assert [g.size for g in report.groups] == [2048]

    def test_without_data_path_reports_whole_catalog(self, test_files, make_params):
        CatalogCommand(make_params()).initialize()

        report = CatalogCommand(make_params(data_path=None)).find_duplicates()
        assert len(report.groups) == 2


class TestMergeDuplicates:
    def test_requires_experimental(self, test_files, make_params):
        CatalogCommand(make_params()).initialize()

        with pytest.raises(ConfigError, match="experimental"):
            CatalogCommand(make_params()).merge_duplicates()

    def test_merges_and_updates_catalog(self, test_files, make_params):
        CatalogCommand(make_params()).initialize()
        params = make_params(allow_experimental=True, force=True)

        result = CatalogCommand(params).merge_duplicates()

        assert result.linked == 3
        assert os.path.samefile(test_files["a"], test_files["b"])
        assert os.path.samefile(test_files["a"], test_files["c"])
        assert os.path.samefile(test_files["d"], test_files["e"])
        assert CatalogCommand(params).find_duplicates().groups == []
