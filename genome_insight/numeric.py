"""
numeric.py
==========
Small rounding / formatting helpers shared by the metric modules.

Scores are rounded half-up (2.5 → 3) rather than with Python's banker's
rounding so that a score sitting exactly on a grade boundary always lands on
the higher grade.
"""

from __future__ import annotations

import math
import re
from typing import Optional, Sequence

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def round_half_up(value: float, digits: int = 0) -> float:
    """Round ``value`` to ``digits`` decimals, halves away from -inf."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def round_int(value: float) -> int:
    return int(math.floor(value + 0.5))


def fmt_num(value: float) -> str:
    """Render a number compactly: 2.0 → '2', 2.10 → '2.1'."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def leading_int(text: str) -> Optional[int]:
    """Parse the integer prefix of ``text`` ('12abc' → 12); None if absent."""
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else None


def index_quantile(sorted_values: Sequence[float], fraction: float) -> float:
    """Order statistic at ``floor(n * fraction)``, without interpolation."""
    if not sorted_values:
        return 0.0
    return sorted_values[int(math.floor(len(sorted_values) * fraction))]


def gaussian_score(deviation: float, sigma: float) -> float:
    """exp(-0.5 * (deviation / sigma)^2) * 100."""
    return math.exp(-0.5 * (deviation / sigma) ** 2) * 100
