"""Numeric coercion for user-supplied cell values.

Cells arrive as text (``"1,234"``, ``"2.5k"``, ``"-1.2M"``) or as numbers
already typed by the table reader. Everything funnels through ``to_number``,
which never raises and returns ``None`` for anything that is not a number.
"""

import math
import re
from typing import Any, Optional

import numpy as np
import pandas as pd

# Sentinel for cells that are not numeric. Kept distinct from 0.0.
NOT_NUMERIC = None

SUFFIX_MULTIPLIERS = {'': 1.0, 'k': 1e3, 'm': 1e6, 'b': 1e9}

_STRICT_NUMBER = re.compile(r'^(-?\d+(?:\.\d+)?)([kmb])?$', re.IGNORECASE)


def _clean_text(value: str) -> str:
    return value.strip().replace(',', '')


def _finite_or_none(number: float) -> Optional[float]:
    return number if math.isfinite(number) else NOT_NUMERIC


def to_number(value: Any) -> Optional[float]:
    """
    Convert a cell value to a finite float.

    Args:
        value: Text or numeric cell value

    Returns:
        float, or None when the value is empty, missing or unparseable
    """
    if value is None or isinstance(value, bool):
        return NOT_NUMERIC

    if isinstance(value, (int, float, np.integer, np.floating)):
        return _finite_or_none(float(value))

    if not isinstance(value, str):
        return NOT_NUMERIC

    text = _clean_text(value)
    if not text:
        return NOT_NUMERIC

    match = _STRICT_NUMBER.match(text)
    if match:
        multiplier = SUFFIX_MULTIPLIERS[(match.group(2) or '').lower()]
        return _finite_or_none(float(match.group(1)) * multiplier)

    # Permissive fallback for plain numbers the pattern does not cover
    # (leading '+', '.5', exponent notation). Python-only digit
    # separators such as "1_000" are not numbers in a spreadsheet.
    if '_' in text:
        return NOT_NUMERIC
    try:
        return _finite_or_none(float(text))
    except ValueError:
        return NOT_NUMERIC


def is_strict_numeric(value: Any) -> bool:
    """True for typed finite numbers and text that matches the suffix pattern exactly."""
    if value is None or isinstance(value, bool):
        return False
    if isinstance(value, (int, float, np.integer, np.floating)):
        return math.isfinite(float(value))
    if not isinstance(value, str):
        return False
    return bool(_STRICT_NUMBER.match(_clean_text(value)))


def is_numeric(value: Any) -> bool:
    """Heuristic check: anything ``to_number`` can convert."""
    return to_number(value) is not NOT_NUMERIC


def is_blank(value: Any) -> bool:
    if value is None or value is pd.NA:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def coerce_series(series: pd.Series) -> pd.Series:
    """Coerce a column of cells to float, with NaN for non-numeric cells."""
    def _cell(value):
        number = to_number(value)
        return np.nan if number is NOT_NUMERIC else number

    return series.map(_cell).astype(float)
