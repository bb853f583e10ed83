"""
Anchor ordering from average-linkage hierarchical clustering.

Variables are merged bottom-up with scipy's average linkage over a cleaned
distance matrix, and the leaf order of the resulting dendrogram becomes the
anchor ordering. scipy resolves ties between equally close cluster pairs
the same way on every call, so the result depends only on the distance
matrix.
"""

import logging
import numpy as np
import pandas as pd
import scipy.cluster.hierarchy as hcluster
from scipy.spatial.distance import squareform
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from radvizmath.errors import DegenerateOrderingError
from radvizmath.math.similarity import SimilarityMatrix

logger = logging.getLogger(__name__)


def check_distance_matrix(distances: np.ndarray) -> np.ndarray:
    """
    Validate a square distance matrix and fill undefined entries.

    NaN distances (from degenerate variables) become the largest distance
    in the matrix, or 1.0 if that is larger.

    Args:
        distances: Square array of pairwise distances

    Returns:
        Cleaned copy with a zero diagonal
    """
    distances = np.array(distances, dtype=float)
    if distances.ndim != 2 or distances.shape[0] != distances.shape[1]:
        raise ValueError(f"Distance matrix must be square, got shape {distances.shape}")

    undefined = np.isnan(distances)
    if np.any(undefined):
        finite = distances[~undefined]
        fill = max(1.0, float(finite.max())) if finite.size else 1.0
        logger.warning(f"{int(np.sum(undefined))} undefined distances treated as {fill}")
        distances[undefined] = fill

    np.fill_diagonal(distances, 0.0)

    if not np.allclose(distances, distances.T):
        raise ValueError("Distance matrix must be symmetric")
    if np.any(distances < 0):
        raise ValueError("Distances must be non-negative")

    # Mirror the upper triangle so tiny asymmetries cannot leak into the merges
    upper = np.triu(distances, k=1)
    return upper + upper.T


def average_linkage(distances: np.ndarray) -> np.ndarray:
    """
    Agglomerative clustering with average linkage.

    Args:
        distances: Square distance matrix over n >= 2 items

    Returns:
        Linkage matrix in scipy format: n-1 rows of
        [cluster_a, cluster_b, distance, size]
    """
    distances = check_distance_matrix(distances)
    n = distances.shape[0]
    if n < 2:
        raise DegenerateOrderingError(f"At least 2 variables are needed, got {n}")

    return hcluster.linkage(squareform(distances, checks=False), method='average')


def leaf_order(linkage: np.ndarray,
               distances: Optional[np.ndarray] = None,
               optimal: bool = False) -> List[int]:
    """
    Left-to-right leaf order of a dendrogram.

    Args:
        linkage: Linkage matrix
        distances: Square distance matrix (needed when optimal is True)
        optimal: Flip subtrees to minimize the distance between adjacent
            leaves (scipy optimal leaf ordering)

    Returns:
        Leaf indices
    """
    if optimal:
        if distances is None:
            raise ValueError("Optimal leaf ordering needs the distance matrix")
        linkage = hcluster.optimal_leaf_ordering(
            linkage, squareform(check_distance_matrix(distances), checks=False)
        )
    return hcluster.leaves_list(linkage).tolist()


def _as_labeled_distances(distance_matrix: Union[SimilarityMatrix, pd.DataFrame, np.ndarray],
                          labels: Optional[List[Any]]) -> Tuple[np.ndarray, List[Any]]:
    if isinstance(distance_matrix, SimilarityMatrix):
        frame = distance_matrix.to_distance()
        return frame.to_numpy(), list(frame.columns)

    if isinstance(distance_matrix, pd.DataFrame):
        if list(distance_matrix.index) != list(distance_matrix.columns):
            raise ValueError("Row and column labels of the distance matrix must match")
        return distance_matrix.to_numpy(dtype=float), list(distance_matrix.columns)

    values = np.asarray(distance_matrix, dtype=float)
    if labels is None:
        labels = list(range(values.shape[0]))
    if len(labels) != values.shape[0]:
        raise ValueError(f"Got {len(labels)} labels for a matrix of size {values.shape[0]}")
    return values, list(labels)


def cluster(distance_matrix: Union[SimilarityMatrix, pd.DataFrame, np.ndarray],
            labels: Optional[List[Any]] = None,
            optimal: bool = False) -> Dict[str, Any]:
    """
    Cluster variables and report the dendrogram.

    Args:
        distance_matrix: SimilarityMatrix (converted with 1 - |s|), labeled
            distance DataFrame, or square array
        labels: Labels for an array input
        optimal: Use optimal leaf ordering

    Returns:
        Dictionary with 'linkage', 'labels', 'leaves' and 'ordering'
    """
    distances, labels = _as_labeled_distances(distance_matrix, labels)
    linkage = average_linkage(distances)
    leaves = leaf_order(linkage, distances, optimal)

    return {
        'linkage': linkage.tolist(),
        'labels': labels,
        'leaves': leaves,
        'ordering': [labels[i] for i in leaves]
    }


def order(distance_matrix: Union[SimilarityMatrix, pd.DataFrame, np.ndarray],
          labels: Optional[List[Any]] = None,
          optimal: bool = False) -> Tuple[Any, ...]:
    """
    Anchor ordering from the average-linkage dendrogram leaf order.

    Args:
        distance_matrix: SimilarityMatrix (converted with 1 - |s|), labeled
            distance DataFrame, or square array
        labels: Labels for an array input
        optimal: Use optimal leaf ordering

    Returns:
        Ordering of the labels
    """
    return tuple(cluster(distance_matrix, labels, optimal)['ordering'])


def hierarchical_order(similarity: SimilarityMatrix,
                       transform: Optional[Callable[[np.ndarray], np.ndarray]] = None,
                       optimal: bool = False) -> Tuple[Any, ...]:
    """
    Anchor ordering from a similarity matrix.

    Args:
        similarity: Variable similarity matrix
        transform: Similarity-to-distance transform (defaults to 1 - |s|)
        optimal: Use optimal leaf ordering

    Returns:
        Ordering of the similarity labels
    """
    return order(similarity.to_distance(transform), optimal=optimal)


class HierarchicalOrderer:
    """
    Deterministic ordering strategy based on average-linkage clustering.
    """

    def __init__(self,
                 transform: Optional[Callable[[np.ndarray], np.ndarray]] = None,
                 optimal: bool = False):
        self.transform = transform
        self.optimal = optimal

    def order(self, similarity: SimilarityMatrix) -> Tuple[Any, ...]:
        return hierarchical_order(similarity, self.transform, self.optimal)

    def __repr__(self) -> str:
        return f"HierarchicalOrderer(optimal={self.optimal})"
