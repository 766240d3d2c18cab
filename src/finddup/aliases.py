from finddup.core.models import FAST_ALGORITHMS, OperatingMode

MODE_ALIASES = {mode.value: mode for mode in OperatingMode}

FAST_DIGEST_CHOICES = list(FAST_ALGORITHMS)

FAST_DIGEST_HELP_TEXT = (
    "Fast 128-bit digest stored next to SHA-256:\n"
    "  md5    : compatible with catalogs built by other tools (default)\n"
    "  xxh128 : much faster on large files\n"
    "Catalogs built with different fast digests do not match each other."
)

SIZE_HELP_TEXT = "Suffixes K, M, G, T are powers of 1024 (e.g. 500K, 10M)."

EPILOG_TEXT = """
Examples:
  Build a new catalog of /srv/data
  %(prog)s --initialize -d ~/data.db -p /srv/data

  Re-index new and modified files later (drops records of deleted files first)
  %(prog)s --update -d ~/data.db -p /srv/data -v

  Ignore VCS metadata and files below 4KB
  %(prog)s --initialize -d ~/data.db -p /srv/data -x '/\\.git$' -m 4K --force

  List duplicates under /srv/data/photos only
  %(prog)s --show-duplicates -d ~/data.db -p /srv/data/photos

  Export duplicates for a spreadsheet
  %(prog)s --csv -d ~/data.db > duplicates.csv

  Replace redundant copies with hardlinks (existing files need --force)
  %(prog)s --hardlink-duplicates --experimental --force -d ~/data.db

Options can also be set in a TOML file ([finddup] table), see --config.
"""
