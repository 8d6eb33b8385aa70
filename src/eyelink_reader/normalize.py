"""
Missing-value handling.

Two separate passes exist: `float_or_missing` runs while sample rows are
built, `convert_missing` is an optional clean-up over finished tables.
"""

import math

import numpy as np
import pandas as pd

from .models import MISSING_DATA

MISSING = math.nan
UPPER_BOUND = 1e8  # anything at or above this is a corrupt payload

# threshold used by the table pass (smallest INT16 + 1)
TABLE_MISSING_THRESHOLD = -32767


def float_or_missing(value: float) -> float:
    """Map decoder "no data" and out-of-range values to NaN."""
    if value <= MISSING_DATA or value >= UPPER_BOUND:
        return MISSING
    return value


def pair_or_missing(values) -> tuple:
    """Apply float_or_missing to a (left, right) pair."""
    left, right = values
    return float_or_missing(left), float_or_missing(right)


def convert_missing(frame: pd.DataFrame) -> pd.DataFrame:
    """
    Replace sentinel values in every numeric column of a table.

    Float columns get NaN; integer columns are converted to the nullable
    Int64 dtype and get pd.NA. Other columns are left alone.

    Args:
        frame: Table to process (not modified)

    Returns:
        New DataFrame with sentinels replaced
    """
    result = frame.copy()
    for column in result.columns:
        series = result[column]
        if pd.api.types.is_bool_dtype(series):
            continue
        if not (pd.api.types.is_float_dtype(series) or pd.api.types.is_integer_dtype(series)):
            continue
        # nullable columns from an earlier pass compare to <NA>
        mask = ((series <= TABLE_MISSING_THRESHOLD) | (series >= UPPER_BOUND)).fillna(False).astype(bool)
        if pd.api.types.is_float_dtype(series):
            result[column] = series.where(~mask, np.nan)
        else:
            result[column] = series.astype("Int64").mask(mask, pd.NA)
    return result
