#!/usr/bin/env python3
"""Human-readable byte counts for the size report.

Decimal (SI) units, three significant digits, trailing zeros dropped:
1500 -> '1.5 kB', 100 -> '100 B', 1234567 -> '1.23 MB'.
"""

from __future__ import annotations

import math

UNITS = ["B", "kB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB"]


def _format_number(value: float) -> str:
    # Round to three significant digits first, then print without exponent
    rounded = float(f"{value:.3g}")
    if rounded.is_integer():
        return str(int(rounded))
    return f"{rounded:g}"


def pretty_bytes(number: int, signed: bool = False) -> str:
    """Format a byte count.

    Args:
        number: Byte count, may be negative for deltas
        signed: Prefix positive values with '+'. A signed zero is rendered
            as ' 0 B' so columns of deltas stay aligned.

    Returns:
        The formatted string, e.g. '+1.5 kB' or '-200 B'
    """
    if signed and number == 0:
        return f" 0 {UNITS[0]}"

    negative = number < 0
    prefix = "-" if negative else ("+" if signed else "")
    value = abs(number)

    if value < 1:
        return f"{prefix}{_format_number(value)} {UNITS[0]}"

    exponent = min(int(math.floor(math.log10(value) / 3)), len(UNITS) - 1)
    scaled = value / (1000 ** exponent)
    return f"{prefix}{_format_number(scaled)} {UNITS[exponent]}"


def signed_delta(current: int, previous: int) -> str:
    """Signed, formatted difference `current - previous`."""
    return pretty_bytes(current - previous, signed=True)
