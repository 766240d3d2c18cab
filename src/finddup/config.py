"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

config.py
Optional TOML configuration file.

Keys live in a [finddup] table and mirror the long command-line options with
dashes replaced by underscores, for example:

    [finddup]
    database = "/var/lib/finddup/catalog.db"
    data_path = "/srv/data"
    min_size = "4K"
    exclude = ["/\\.git$", "/node_modules$"]
    fast_digest = "xxh128"
"""
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # Python < 3.11: pip install tomli

from finddup.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

CONFIG_ENV = "FINDDUP_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.config/finddup/config.toml")
SECTION = "finddup"

# key -> accepted value types
OPTION_TYPES: Dict[str, tuple] = {
    "database": (str,),
    "data_path": (str,),
    "min_size": (str, int),
    "max_size": (str, int),
    "exclude": (list,),
    "follow_symlinks": (bool,),
    "force": (bool,),
    "no_hash": (bool,),
    "no_cleanup": (bool,),
    "trash": (bool,),
    "no_concurrent_hashing": (bool,),
    "fast_digest": (str,),
    "no_nice": (bool,),
    "experimental": (bool,),
    "quiet": (bool,),
    "verbose": (int,),
}


def find_config_file(explicit: Optional[str] = None) -> Optional[Path]:
    """
    Returns the configuration file to read, or None.

    An explicit path must exist. Otherwise $FINDDUP_CONFIG and then the user
    configuration file are used if present.
    """
    if explicit:
        path = Path(explicit).expanduser()
        if not path.is_file():
            raise ConfigError(f"Config file not found: {explicit}")
        return path

    env_path = os.environ.get(CONFIG_ENV)
    if env_path:
        path = Path(env_path).expanduser()
        if path.is_file():
            return path
        logger.warning(f"{CONFIG_ENV} points to a missing file: {env_path}")

    path = DEFAULT_CONFIG_PATH.expanduser()
    return path if path.is_file() else None


def load_config(explicit: Optional[str] = None) -> Dict[str, Any]:
    """Reads and validates the [finddup] table. Returns {} when no file applies."""
    path = find_config_file(explicit)
    if path is None:
        return {}

    logger.debug(f"Loading configuration from {path}")
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    section = data.get(SECTION, {})
    if not isinstance(section, dict):
        raise ConfigError(f"[{SECTION}] in {path} must be a table")
    return validate_options(section, source=str(path))


def validate_options(options: Dict[str, Any], source: str = "config") -> Dict[str, Any]:
    values = {}
    for key, value in options.items():
        key = key.replace("-", "_")
        if key not in OPTION_TYPES:
            raise ConfigError(f"Unknown option '{key}' in {source}")

        expected = OPTION_TYPES[key]
        # bool is an int subclass
        if isinstance(value, bool) and bool not in expected:
            raise ConfigError(f"Option '{key}' in {source} must not be a boolean")
        if not isinstance(value, expected):
            names = " or ".join(t.__name__ for t in expected)
            raise ConfigError(f"Option '{key}' in {source} must be {names}")
        if key == "exclude" and not all(isinstance(p, str) for p in value):
            raise ConfigError(f"Option 'exclude' in {source} must be a list of strings")

        values[key] = value
    return values
