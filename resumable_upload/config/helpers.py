"""Parsing of human readable sizes such as ``16mb`` or ``256 KiB``."""

import re

_SIZE_PATTERN = re.compile(r"(\d+)\s*([a-z]*)")

# Every unit is binary: "mb" and "mib" both mean 1024**2 bytes.
_UNIT_MULTIPLIERS = {
    "": 1,
    "b": 1,
    "k": 1024,
    "kb": 1024,
    "kib": 1024,
    "m": 1024**2,
    "mb": 1024**2,
    "mib": 1024**2,
    "g": 1024**3,
    "gb": 1024**3,
    "gib": 1024**3,
}


def parse_bytes(value: int | str) -> int:
    """Convert a chunk size given on the command line or in the environment.

    Integers are returned unchanged. Strings are a whole number followed by
    an optional unit, matched case-insensitively: ``b``, ``k``/``kb``/``kib``,
    ``m``/``mb``/``mib`` or ``g``/``gb``/``gib``.

    Raises:
        ValueError: If ``value`` is not a whole number of bytes with a known
            unit.
    """
    if isinstance(value, int):
        return value

    match = _SIZE_PATTERN.fullmatch(str(value).strip().lower())
    if match is None:
        raise ValueError(f"Expected a size like '16mb' or '256KiB', got {value!r}")

    number, unit = match.groups()
    if unit not in _UNIT_MULTIPLIERS:
        raise ValueError(f"Unknown size unit {unit!r} in {value!r}")
    return int(number) * _UNIT_MULTIPLIERS[unit]
