"""
Tests for TOML configuration loading and CatalogParams validation.
"""
import pytest

from finddup import config
from finddup.core.exceptions import ConfigError
from finddup.core.models import CatalogParams


def write_config(path, body):
    path.write_text(body, encoding="utf-8")
    return path


class TestLoadConfig:
    def test_no_file_gives_empty_config(self):
        assert config.load_config() == {}

    def test_explicit_file(self, tmp_path):
        path = write_config(tmp_path / "finddup.toml", """
[finddup]
database = "/tmp/catalog.db"
min-size = "4K"
max_size = 1048576
exclude = ["/\\\\.git$"]
follow_symlinks = true
verbose = 2
""")
        values = config.load_config(str(path))

        assert values == {
            "database": "/tmp/catalog.db",
            "min_size": "4K",
            "max_size": 1048576,
            "exclude": ["/\\.git$"],
            "follow_symlinks": True,
            "verbose": 2,
        }

    def test_explicit_missing_file_raises(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            config.load_config(str(tmp_path / "missing.toml"))

    def test_environment_variable(self, tmp_path, monkeypatch):
        path = write_config(tmp_path / "env.toml", '[finddup]\ndatabase = "env.db"\n')
        monkeypatch.setenv(config.CONFIG_ENV, str(path))

        assert config.load_config() == {"database": "env.db"}

    def test_user_config_file(self, tmp_path, monkeypatch):
        path = write_config(tmp_path / "user.toml", '[finddup]\nno_nice = true\n')
        monkeypatch.setattr(config, "DEFAULT_CONFIG_PATH", path)

        assert config.load_config() == {"no_nice": True}

    def test_missing_section_is_empty(self, tmp_path):
        path = write_config(tmp_path / "other.toml", '[other]\nx = 1\n')
        assert config.load_config(str(path)) == {}

    def test_invalid_toml_raises(self, tmp_path):
        path = write_config(tmp_path / "bad.toml", "[finddup\n")
        with pytest.raises(ConfigError, match="Invalid TOML"):
            config.load_config(str(path))

    def test_unknown_key_raises(self, tmp_path):
        path = write_config(tmp_path / "c.toml", '[finddup]\ncolour = "red"\n')
        with pytest.raises(ConfigError, match="Unknown option 'colour'"):
            config.load_config(str(path))

    def test_wrong_type_raises(self, tmp_path):
        path = write_config(tmp_path / "c.toml", '[finddup]\nforce = "yes"\n')
        with pytest.raises(ConfigError, match="must be bool"):
            config.load_config(str(path))

    def test_boolean_is_not_a_count(self, tmp_path):
        path = write_config(tmp_path / "c.toml", '[finddup]\nverbose = true\n')
        with pytest.raises(ConfigError):
            config.load_config(str(path))

    def test_exclude_must_hold_strings(self, tmp_path):
        path = write_config(tmp_path / "c.toml", '[finddup]\nexclude = [1, 2]\n')
        with pytest.raises(ConfigError, match="list of strings"):
            config.load_config(str(path))


class TestCatalogParams:
    def test_from_human_readable(self, tmp_path):
        params = CatalogParams.from_human_readable(
            "db", str(tmp_path), min_size_str="1K", max_size_str="1M", exclude_patterns=["x"],
        )
        assert params.min_size_bytes == 1024
        assert params.max_size_bytes == 1024 ** 2
        assert params.exclude_patterns == ("x",)

    def test_relative_data_path_made_absolute(self):
        params = CatalogParams(database="db", data_path="relative/dir")
        assert params.data_path.endswith("relative/dir")
        assert params.data_path != "relative/dir"

    def test_invalid_size_raises(self):
        with pytest.raises(ConfigError, match="Invalid size"):
            CatalogParams.from_human_readable("db", min_size_str="lots")

    def test_max_must_exceed_min(self):
        with pytest.raises(ConfigError, match="greater"):
            CatalogParams(database="db", min_size_bytes=10, max_size_bytes=10)

    def test_invalid_regex_raises(self):
        with pytest.raises(ConfigError, match="Invalid exclude pattern"):
            CatalogParams(database="db", exclude_patterns=("(",))

    def test_unknown_fast_digest_raises(self):
        with pytest.raises(ConfigError, match="Unsupported fast digest"):
            CatalogParams(database="db", fast_algorithm="crc32")

    def test_size_bounds(self):
        params = CatalogParams(database="db", min_size_bytes=10, max_size_bytes=20)
        assert not params.size_passes(9)
        assert params.size_passes(10)
        assert params.size_passes(19)
        assert not params.size_passes(20)

    def test_is_excluded_uses_search(self):
        params = CatalogParams(database="db", exclude_patterns=(r"/\.git$", "cache"))
        assert params.is_excluded("/repo/.git")
        assert params.is_excluded("/home/u/.cache/x")
        assert not params.is_excluded("/repo/.github")
