"""
Variable similarity matrices for anchor placement.

This module provides a labeled, symmetric matrix of pairwise variable
similarities and the two metrics used to fill it: cosine similarity and
absolute Pearson correlation. Variables are compared as column vectors
across all observations.
"""

import logging
import numpy as np
import pandas as pd
from scipy.spatial.distance import pdist, squareform
from typing import Any, Callable, Dict, List, Optional, Union

from radvizmath.errors import OrderingMismatchError
from radvizmath.math.normalize import numeric_columns

logger = logging.getLogger(__name__)


class LabelIndex:
    """
    Maintains an ordered index of variable labels with fast lookup.
    """

    def __init__(self, names: Optional[List[Any]] = None):
        """
        Initialize a LabelIndex with optional initial names.

        Args:
            names: Optional list of initial names
        """
        self._names = [] if names is None else list(names)
        self._index_hash = {name: idx for idx, name in enumerate(self._names)}
        if len(self._index_hash) != len(self._names):
            raise ValueError("Labels must be unique")

    def get_names(self) -> List[Any]:
        """Return the ordered list of names."""
        return self._names.copy()

    def index(self, name: Any) -> Optional[int]:
        """
        Get the index for a given name, or None if not found.

        Args:
            name: The name to look up

        Returns:
            The index if found, None otherwise
        """
        return self._index_hash.get(name)

    def indices(self, names: List[Any]) -> List[int]:
        """
        Get the indices for several names.

        Args:
            names: Names to look up

        Returns:
            List of indices

        Raises:
            OrderingMismatchError: If any name is unknown
        """
        unknown = [name for name in names if name not in self._index_hash]
        if unknown:
            raise OrderingMismatchError(f"Unknown labels: {unknown}")
        return [self._index_hash[name] for name in names]

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, name: Any) -> bool:
        return name in self._index_hash


class SimilarityMatrix:
    """
    A square, symmetric matrix of variable similarities.

    Values are stored in a pandas DataFrame indexed by label on both axes.
    Degenerate variables have NaN rows and columns.
    """

    def __init__(self,
                 matrix: Union[np.ndarray, List[List[float]]],
                 labels: List[Any],
                 metric: str = 'custom'):
        """
        Initialize a SimilarityMatrix.

        Args:
            matrix: Square matrix of similarities
            labels: Variable labels, one per row/column
            metric: Name of the metric that produced the values
        """
        values = np.array(matrix, dtype=float)
        if values.ndim != 2 or values.shape[0] != values.shape[1]:
            raise ValueError(f"Similarity matrix must be square, got shape {values.shape}")
        if values.shape[0] != len(labels):
            raise ValueError(
                f"Got {len(labels)} labels for a {values.shape[0]}x{values.shape[0]} matrix"
            )

        self._index = LabelIndex(labels)
        self._matrix = pd.DataFrame(values, index=list(labels), columns=list(labels))
        self.metric = metric

    @classmethod
    def from_frame(cls, frame: pd.DataFrame, metric: str = 'custom') -> 'SimilarityMatrix':
        """
        Build a SimilarityMatrix from a square labeled DataFrame.

        Args:
            frame: DataFrame with identical row and column labels
            metric: Name of the metric

        Returns:
            A new SimilarityMatrix
        """
        if list(frame.index) != list(frame.columns):
            raise ValueError("Row and column labels must match")
        return cls(frame.to_numpy(dtype=float), list(frame.columns), metric)

    @property
    def frame(self) -> pd.DataFrame:
        """Get a copy of the underlying DataFrame."""
        return self._matrix.copy()

    @property
    def values(self) -> np.ndarray:
        """Get the matrix as a numpy array."""
        return self._matrix.to_numpy(copy=True)

    def labels(self) -> List[Any]:
        """Get the list of variable labels."""
        return self._index.get_names()

    def get_index(self) -> LabelIndex:
        """Get the label index object."""
        return self._index

    def get(self, a: Any, b: Any) -> float:
        """
        Look up the similarity of two variables.

        Args:
            a: First label
            b: Second label

        Returns:
            Similarity value (NaN for degenerate variables)
        """
        i, j = self._index.indices([a, b])
        return float(self._matrix.iat[i, j])

    def subset(self, labels: List[Any]) -> 'SimilarityMatrix':
        """
        Restrict the matrix to some variables, in the given order.

        Args:
            labels: Labels to keep

        Returns:
            A new SimilarityMatrix
        """
        idx = self._index.indices(list(labels))
        values = self._matrix.to_numpy()[np.ix_(idx, idx)]
        return SimilarityMatrix(values, list(labels), self.metric)

    def reorder(self, labels: List[Any]) -> 'SimilarityMatrix':
        """
        Permute rows and columns into a new label order.

        Args:
            labels: A permutation of all labels

        Returns:
            A new SimilarityMatrix
        """
        labels = list(labels)
        if len(labels) != len(self) or set(labels) != set(self.labels()):
            raise OrderingMismatchError("Reorder requires a permutation of all labels")
        return self.subset(labels)

    def to_distance(self, transform: Optional[Callable[[np.ndarray], np.ndarray]] = None) -> pd.DataFrame:
        """
        Convert similarities to distances.

        Args:
            transform: Elementwise transform from similarity to distance
                (defaults to 1 - |s|)

        Returns:
            Labeled distance DataFrame with a zero diagonal
        """
        values = self._matrix.to_numpy(copy=True)
        if transform is None:
            distances = 1.0 - np.abs(values)
        else:
            distances = np.asarray(transform(values), dtype=float)
        np.fill_diagonal(distances, 0.0)
        labels = self.labels()
        return pd.DataFrame(distances, index=labels, columns=labels)

    def degenerate_labels(self) -> List[Any]:
        """
        Labels whose self-similarity is undefined.

        Returns:
            Labels with a NaN diagonal entry
        """
        diag = np.diag(self._matrix.to_numpy())
        return [label for label, value in zip(self.labels(), diag) if np.isnan(value)]

    def is_symmetric(self) -> bool:
        """Check exact symmetry (NaN entries compare equal to NaN)."""
        values = self._matrix.to_numpy()
        return bool(np.array_equal(values, values.T, equal_nan=True))

    def to_dict(self) -> Dict[str, Any]:
        """
        Export the matrix for JSON serialization.

        Returns:
            Dictionary with labels, metric and nested lists (NaN as None)
        """
        values = self._matrix.to_numpy()
        return {
            'metric': self.metric,
            'labels': self.labels(),
            'matrix': [[None if np.isnan(v) else float(v) for v in row] for row in values]
        }

    def __len__(self) -> int:
        return len(self._index)

    def __repr__(self) -> str:
        return f"SimilarityMatrix(metric={self.metric!r}, variables={len(self)})"

    def __str__(self) -> str:
        return f"SimilarityMatrix ({self.metric}) over {len(self)} variables\n{self._matrix}"


def _defined_block(values: np.ndarray,
                   defined: np.ndarray,
                   block: Callable[[np.ndarray], np.ndarray]) -> np.ndarray:
    """
    Fill the similarities of the defined columns and leave the rest NaN.

    Args:
        values: Array of shape (n_rows, n_columns)
        defined: Boolean mask of columns whose similarity is defined
        block: Square similarity matrix of an all-defined array

    Returns:
        Square array of shape (n_columns, n_columns) with a unit diagonal
        for defined columns
    """
    n = values.shape[1]
    result = np.full((n, n), np.nan)
    idx = np.flatnonzero(defined)
    if idx.size == 0:
        return result

    if idx.size == 1:
        sims = np.ones((1, 1))
    else:
        with np.errstate(invalid='ignore', divide='ignore'):
            sims = block(values[:, idx])
        # Keep the upper triangle and mirror it
        sims = squareform(squareform(sims, checks=False))
        np.fill_diagonal(sims, 1.0)

    result[np.ix_(idx, idx)] = sims
    return result


def cosine_matrix(values: np.ndarray) -> np.ndarray:
    """
    Cosine similarity between every pair of columns.

    Args:
        values: Array of shape (n_rows, n_columns)

    Returns:
        Symmetric array of shape (n_columns, n_columns); rows and columns of
        zero-norm or non-finite variables are NaN
    """
    values = np.asarray(values, dtype=float)
    defined = np.all(np.isfinite(values), axis=0) & np.any(values != 0, axis=0)
    return _defined_block(
        values, defined,
        lambda block: np.clip(1.0 - squareform(pdist(block.T, 'cosine')), -1.0, 1.0)
    )


def abs_pearson_matrix(values: np.ndarray) -> np.ndarray:
    """
    Absolute Pearson correlation between every pair of columns.

    Args:
        values: Array of shape (n_rows, n_columns)

    Returns:
        Symmetric array of shape (n_columns, n_columns) in [0, 1]; rows and
        columns of zero-variance or non-finite variables are NaN
    """
    values = np.asarray(values, dtype=float)
    defined = np.all(np.isfinite(values), axis=0)
    if values.shape[0] < 2:
        defined[:] = False
    else:
        defined &= np.ptp(np.where(np.isfinite(values), values, 0.0), axis=0) > 0
    return _defined_block(
        values, defined,
        lambda block: np.clip(np.abs(np.corrcoef(block, rowvar=False)), 0.0, 1.0)
    )


def cosine_similarity(x: np.ndarray, y: np.ndarray) -> float:
    """Cosine similarity of two vectors; NaN if either has zero norm."""
    return float(cosine_matrix(np.column_stack([x, y]))[0, 1])


def abs_pearson(x: np.ndarray, y: np.ndarray) -> float:
    """|corr(x, y)| in [0, 1]; NaN if either vector has zero variance."""
    return float(abs_pearson_matrix(np.column_stack([x, y]))[0, 1])


METRICS: Dict[str, Callable[[np.ndarray], np.ndarray]] = {
    'cosine': cosine_matrix,
    'abs-pearson': abs_pearson_matrix,
}

METRIC_ALIASES = {
    'cos': 'cosine',
    'pearson': 'abs-pearson',
    'abs_pearson': 'abs-pearson',
    'correlation': 'abs-pearson',
}


def resolve_metric(metric: str) -> str:
    """
    Map a metric name or alias to its canonical name.

    Args:
        metric: Metric name

    Returns:
        'cosine' or 'abs-pearson'
    """
    name = METRIC_ALIASES.get(metric.lower(), metric.lower())
    if name not in METRICS:
        raise ValueError(f"Unknown similarity metric: {metric}")
    return name


def similarity(data: pd.DataFrame,
               metric: str = 'cosine',
               columns: Optional[List[Any]] = None) -> SimilarityMatrix:
    """
    Compute the variable-by-variable similarity matrix of a dataset.

    Args:
        data: Dataset (usually normalized)
        metric: 'cosine' or 'abs-pearson' (or an alias)
        columns: Variables to compare (defaults to all numeric columns)

    Returns:
        SimilarityMatrix over the selected columns
    """
    name = resolve_metric(metric)

    if columns is None:
        columns = numeric_columns(data)

    values = data[list(columns)].to_numpy(dtype=float)
    result = SimilarityMatrix(METRICS[name](values), list(columns), name)

    degenerate = result.degenerate_labels()
    if degenerate:
        logger.warning(f"Similarity ({name}) undefined for degenerate variables: {degenerate}")

    return result
