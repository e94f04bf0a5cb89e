"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

utils/convert_utils.py
Size conversions for CLI input and report output.
"""
import re

_SIZE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d*)?|\.\d+)\s*([KMGTP]?B?)\s*$", re.IGNORECASE)

_UNITS = {
    "": 1, "B": 1,
    "K": 1024, "KB": 1024,
    "M": 1024 ** 2, "MB": 1024 ** 2,
    "G": 1024 ** 3, "GB": 1024 ** 3,
    "T": 1024 ** 4, "TB": 1024 ** 4,
    "P": 1024 ** 5, "PB": 1024 ** 5,
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

        value = float(size_bytes)
        for unit in ["KB", "MB", "GB", "TB", "PB"]:
            value /= 1024
            if value < 1024:
                return f"{value:.2f}{unit}"
        return f"{value / 1024:.2f}EB"

    @staticmethod
    def human_to_bytes(size_str: str) -> int:
        """
        Convert human-readable size string to bytes (binary units).
        Supports formats: '1.5GB', '2048KB', '1000', '1K', '1M', '10b', etc.
        Raises ValueError for negative sizes or invalid formats.
        """
        if size_str is None:
            raise ValueError("Size cannot be empty")

        text = str(size_str).strip()
        if text.startswith("-"):
            raise ValueError(f"Negative size not allowed: '{size_str}'")

        match = _SIZE_PATTERN.match(text)
        if not match:
            raise ValueError(
                f"Invalid size format: '{size_str}'. "
                f"Supported formats: 1.5GB, 2048KB, 1000, 1K, 1M, etc."
            )

        number, unit = match.groups()
        return int(float(number) * _UNITS[unit.upper()])

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
