"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/exceptions.py
Exception hierarchy shared by the catalog, scanner and CLI.

Per-file problems (DigestError) are caught by the scanner and never unwind past
the file being processed. Everything else is fatal and propagates to the CLI.
"""


class FinddupError(Exception):
    """Base class for all finddup errors."""


class DigestError(FinddupError):
    """A file could not be read or hashed. Recoverable: the file is skipped."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot hash {path}: {reason}")
        self.path = path
        self.reason = reason


class UnsupportedAlgorithmError(FinddupError, ValueError):
    """A digest algorithm outside the allow-list was requested."""


class ConfigError(FinddupError, ValueError):
    """Invalid, conflicting or unreadable configuration."""


class CatalogError(FinddupError):
    """A catalog statement failed. The catalog can no longer be trusted."""


class CatalogExistsError(CatalogError, FileExistsError):
    """Refusing to initialize over an existing catalog without force."""
