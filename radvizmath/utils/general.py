"""
General utility functions for the radvizmath package.

Small helpers shared by the math modules: duplicate checks, JSON export
of numpy scalars and weighted means.
"""

import numpy as np
from typing import Any, Iterable, List, TypeVar

T = TypeVar('T')


def duplicates(coll: Iterable[T]) -> List[T]:
    """Return the items that occur more than once, in first-seen order."""
    seen = set()
    dupes = []
    for item in coll:
        if item in seen and item not in dupes:
            dupes.append(item)
        seen.add(item)
    return dupes


def nan_to_none(value: Any) -> Any:
    """
    Convert NaN floats to None for JSON export.

    Args:
        value: Scalar value

    Returns:
        None for NaN, a plain Python float for numeric values, otherwise
        the value unchanged
    """
    if isinstance(value, (float, np.floating)):
        return None if np.isnan(value) else float(value)
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, np.bool_):
        return bool(value)
    return value


def weighted_means(values_matrix: np.ndarray,
                   weights: np.ndarray) -> np.ndarray:
    """
    Calculate one weighted mean of the rows of a matrix per weight column.

    Args:
        values_matrix: Matrix of values (rows are observations)
        weights: Weight matrix with one row per observation and one
            column per requested mean

    Returns:
        Array of shape (n_weight_columns, n_value_columns); rows whose
        weights sum to zero are NaN
    """
    values_array = np.asarray(values_matrix, dtype=float)
    weights_array = np.asarray(weights, dtype=float)

    # Calculate weighted sum and sum of weights for each weight column
    weighted_sum = weights_array.T @ values_array
    sum_weights = np.sum(weights_array, axis=0).reshape(-1, 1)

    with np.errstate(invalid='ignore', divide='ignore'):
        means = weighted_sum / sum_weights
    means[np.ravel(sum_weights) == 0] = np.nan
    return means
