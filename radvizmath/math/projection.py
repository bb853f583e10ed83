"""
RadViz projection.

Each observation is pulled towards every anchor in proportion to its value
for that anchor's variable; its point is the weighted mean of the anchor
positions. Observations whose anchor values sum to zero (or contain a
non-finite value) have no defined point and are kept as invalid NaN points.
"""

import logging
import numpy as np
import pandas as pd
from typing import Any, Iterator, List, Optional, Sequence

from radvizmath.math.anchors import Anchor

logger = logging.getLogger(__name__)


class ProjectedPoint:
    """
    A projected observation.
    """

    def __init__(self, x: float, y: float, valid: bool = True):
        self.x = float(x)
        self.y = float(y)
        self.valid = bool(valid)

    @property
    def position(self) -> np.ndarray:
        return np.array([self.x, self.y])

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ProjectedPoint):
            return NotImplemented
        if self.valid != other.valid:
            return False
        if not self.valid:
            return True
        return self.x == other.x and self.y == other.y

    def __repr__(self) -> str:
        return f"ProjectedPoint(x={self.x:.4f}, y={self.y:.4f}, valid={self.valid})"


class Projection:
    """
    Projected points for a whole dataset, aligned with its row index.
    """

    def __init__(self, coords: np.ndarray, valid: np.ndarray, index: Optional[Sequence[Any]] = None):
        """
        Initialize a projection.

        Args:
            coords: Array of shape (n, 2); invalid rows are NaN
            valid: Boolean validity mask of length n
            index: Row labels (defaults to 0..n-1)
        """
        self.coords = np.asarray(coords, dtype=float).reshape(-1, 2)
        self.valid = np.asarray(valid, dtype=bool)
        self.index = list(range(len(self.valid))) if index is None else list(index)

    @property
    def points(self) -> List[ProjectedPoint]:
        return [ProjectedPoint(x, y, v) for (x, y), v in zip(self.coords, self.valid)]

    @property
    def n_valid(self) -> int:
        return int(np.sum(self.valid))

    def valid_coords(self) -> np.ndarray:
        """Coordinates of the valid points only."""
        return self.coords[self.valid]

    def to_frame(self,
                 source: Optional[pd.DataFrame] = None,
                 passthrough: Optional[List[str]] = None) -> pd.DataFrame:
        """
        Tabulate the projection.

        Args:
            source: Dataset the projection was computed from
            passthrough: Columns of source to copy through untouched

        Returns:
            DataFrame with columns x, y, valid and the pass-through columns
        """
        frame = pd.DataFrame({
            'x': self.coords[:, 0],
            'y': self.coords[:, 1],
            'valid': self.valid
        }, index=self.index)

        if source is not None and passthrough:
            if len(source) != len(self):
                raise ValueError(
                    f"Source has {len(source)} rows but the projection has {len(self)} points"
                )
            # Rows are aligned by position; index labels may repeat
            for col in passthrough:
                frame[col] = source[col].to_numpy()

        return frame

    def __len__(self) -> int:
        return len(self.valid)

    def __iter__(self) -> Iterator[ProjectedPoint]:
        return iter(self.points)

    def __repr__(self) -> str:
        return f"Projection(points={len(self)}, valid={self.n_valid})"


def project_values(values: np.ndarray, positions: np.ndarray) -> Projection:
    """
    Project a matrix of non-negative values onto anchor positions.

    Args:
        values: Array of shape (n_rows, n_anchors)
        positions: Anchor positions, shape (n_anchors, 2)

    Returns:
        Projection over the rows of values
    """
    values = np.asarray(values, dtype=float)
    positions = np.asarray(positions, dtype=float)

    if values.ndim != 2 or values.shape[1] != positions.shape[0]:
        raise ValueError(
            f"Values of shape {values.shape} do not match {positions.shape[0]} anchors"
        )

    row_sums = values.sum(axis=1)
    valid = np.all(np.isfinite(values), axis=1) & np.isfinite(row_sums) & (row_sums != 0)

    coords = np.full((values.shape[0], 2), np.nan)
    if np.any(valid):
        weights = values[valid] / row_sums[valid][:, np.newaxis]
        coords[valid] = weights @ positions

    return Projection(coords, valid)


def project_row(values: Sequence[float], positions: np.ndarray) -> ProjectedPoint:
    """
    Project a single observation.

    Args:
        values: One value per anchor
        positions: Anchor positions, shape (n_anchors, 2)

    Returns:
        Projected point (invalid with NaN coordinates when undefined)
    """
    result = project_values(np.asarray(values, dtype=float).reshape(1, -1), positions)
    return result.points[0]


def project(normalized: pd.DataFrame, anchors: List[Anchor]) -> Projection:
    """
    Project a normalized dataset onto a set of anchors.

    Only the columns named by the anchors are used.

    Args:
        normalized: Normalized dataset
        anchors: Anchors from layout()

    Returns:
        Projection aligned with the dataset's rows
    """
    labels = [anchor.label for anchor in anchors]
    missing = [label for label in labels if label not in normalized.columns]
    if missing:
        raise KeyError(f"Anchor variables not found in dataset: {missing}")

    positions = np.vstack([anchor.position for anchor in anchors])
    values = normalized[labels].to_numpy(dtype=float)

    result = project_values(values, positions)
    result.index = list(normalized.index)

    if len(result) > 0 and result.n_valid == 0:
        logger.warning(
            f"All {len(result)} observations have a zero or undefined sum over "
            f"anchor variables {labels}; check the selected columns"
        )
    elif result.n_valid < len(result):
        logger.info(f"{len(result) - result.n_valid} of {len(result)} observations could not be projected")

    return result
