"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

utils/convert_utils.py
Size conversions between bytes and human-readable strings (powers of 1024).
"""
import re

_SIZE_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)\s*([KMGT]?)B?$")

_UNIT_FACTORS = {
    "": 1,
    "K": 1024,
    "M": 1024 ** 2,
    "G": 1024 ** 3,
    "T": 1024 ** 4,
}


class ConvertUtils:
    @staticmethod
    def bytes_to_human(size_bytes: int) -> str:
        """
        Convert bytes to human-readable string (e.g., 1.50KB, 3.20MB).
        """
        if size_bytes < 0:
            return "0B"
        if size_bytes < 1024:
            return f"{size_bytes}B"

        size = float(size_bytes)
        for unit in ["KB", "MB", "GB", "TB"]:
            size /= 1024
            if size < 1024:
                return f"{size:.2f}{unit}"
        return f"{size / 1024:.2f}PB"

    @staticmethod
    def human_to_bytes(size_str: str) -> int:
        """
        Convert a size string with an optional k/m/g/t suffix to bytes.
        Accepts '1000', '1k', '1.5M', '2GB', '1 t'. Case-insensitive.
        Raises ValueError for negative sizes or invalid formats.
        """
        if isinstance(size_str, int):
            if size_str < 0:
                raise ValueError(f"Negative size not allowed: '{size_str}'")
            return size_str

        normalized = str(size_str).strip().upper()
        if normalized.startswith("-"):
            raise ValueError(f"Negative size not allowed: '{size_str}'")

        match = _SIZE_PATTERN.match(normalized)
        if not match:
            raise ValueError(
                f"Invalid size format: '{size_str}'. "
                f"Supported formats: 1000, 1k, 1.5M, 2G, 1T"
            )

        value, unit = match.groups()
        return int(float(value) * _UNIT_FACTORS[unit])

    @staticmethod
    def is_valid_size_format(size_str: str) -> bool:
        """
        Check if the input string has a valid size format.
        """
        try:
            ConvertUtils.human_to_bytes(size_str)
            return True
        except ValueError:
            return False
