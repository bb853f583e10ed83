"""
Min-max normalization for RadViz.

Every numeric column is rescaled independently to the unit interval using
its own minimum and maximum. Constant columns cannot be rescaled and come
out as NaN so that batch computations over many columns keep going.
"""

import logging
import numpy as np
import pandas as pd
from typing import List, Optional

from radvizmath.errors import DegenerateVariableError

logger = logging.getLogger(__name__)


def numeric_columns(dataset: pd.DataFrame) -> List[str]:
    """
    List the numeric (non-boolean) columns of a dataset.

    Args:
        dataset: Input DataFrame

    Returns:
        Column names in dataset order
    """
    return [
        col for col in dataset.columns
        if pd.api.types.is_numeric_dtype(dataset[col])
        and not pd.api.types.is_bool_dtype(dataset[col])
    ]


def degenerate_columns(dataset: pd.DataFrame,
                       columns: Optional[List[str]] = None) -> List[str]:
    """
    Find numeric columns that have zero range or no finite values.

    Args:
        dataset: Input DataFrame
        columns: Columns to check (defaults to all numeric columns)

    Returns:
        Names of degenerate columns
    """
    if columns is None:
        columns = numeric_columns(dataset)

    result = []
    for col in columns:
        values = dataset[col].to_numpy(dtype=float)
        finite = values[np.isfinite(values)]
        if finite.size == 0 or finite.max() == finite.min():
            result.append(col)
    return result


def min_max(values: np.ndarray) -> np.ndarray:
    """
    Rescale a vector to [0, 1].

    NaN entries are ignored when computing the range and stay NaN. A vector
    with zero range comes back as all NaN.

    Args:
        values: Vector of numbers

    Returns:
        Rescaled vector
    """
    values = np.asarray(values, dtype=float)
    finite = values[np.isfinite(values)]
    if finite.size == 0:
        return np.full(values.shape, np.nan)

    lo = finite.min()
    hi = finite.max()
    if hi == lo:
        return np.full(values.shape, np.nan)

    result = (values - lo) / (hi - lo)
    # Pin the extremes so floating error cannot push them off 0 and 1
    result[values == lo] = 0.0
    result[values == hi] = 1.0
    return result


def normalize(dataset: pd.DataFrame,
              columns: Optional[List[str]] = None,
              strict: bool = False) -> pd.DataFrame:
    """
    Normalize the numeric columns of a dataset to the unit interval.

    Args:
        dataset: Input DataFrame (left untouched)
        columns: Numeric columns to normalize (defaults to all numeric
            columns); every other column passes through unchanged
        strict: Raise DegenerateVariableError instead of producing NaN
            columns for zero-range variables

    Returns:
        New DataFrame with the same index and column order
    """
    if columns is None:
        columns = numeric_columns(dataset)
    else:
        missing = [col for col in columns if col not in dataset.columns]
        if missing:
            raise KeyError(f"Columns not found in dataset: {missing}")

    degenerate = degenerate_columns(dataset, columns)
    if degenerate:
        if strict:
            raise DegenerateVariableError(degenerate, "zero range")
        logger.warning(f"Columns with zero range normalize to NaN: {degenerate}")

    result = dataset.copy()
    for col in columns:
        result[col] = min_max(dataset[col].to_numpy(dtype=float))

    return result
