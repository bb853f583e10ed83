"""
Quality measures for anchor orderings.

Two measures are provided, both higher-is-better:

- The RadViz-independent measure looks only at the anchor circle: every
  pair of variables contributes its similarity times a proximity factor
  that is 1 for co-located anchors and falls to 0 for opposite anchors.

- The RadViz-dependent measure projects the data under the candidate
  ordering and rewards layouts where similar variables pull their
  observations to nearby regions of the plane, scaled by how far the
  points spread out from the centre.
"""

import numpy as np
import pandas as pd
from typing import Any, Optional, Sequence

from radvizmath.math.anchors import anchor_positions, validate_ordering
from radvizmath.math.projection import project_values
from radvizmath.math.similarity import SimilarityMatrix
from radvizmath.utils.general import weighted_means


MEASURES = ('independent', 'dependent')


def angular_separation(n: int) -> np.ndarray:
    """
    Angular distance between every pair of anchor slots.

    Args:
        n: Number of anchors

    Returns:
        Array of shape (n, n) with values in [0, π]
    """
    slots = np.arange(n)
    steps = np.abs(slots[:, np.newaxis] - slots[np.newaxis, :])
    steps = np.minimum(steps, n - steps)
    return 2 * np.pi * steps / n


def proximity(theta: np.ndarray) -> np.ndarray:
    """
    Proximity of two anchors separated by an angle.

    This is one minus the chord length over the diameter, so it is 1 when
    the anchors coincide and 0 when they are opposite.

    Args:
        theta: Angular separation(s) in [0, π]

    Returns:
        Proximity value(s) in [0, 1]
    """
    return 1.0 - np.sin(np.asarray(theta, dtype=float) / 2.0)


def _ordered_similarities(ordering: Sequence[Any], similarity: SimilarityMatrix) -> np.ndarray:
    ordering = validate_ordering(ordering, similarity.labels())
    idx = similarity.get_index().indices(list(ordering))
    return similarity.values[np.ix_(idx, idx)]


def independent_measure(ordering: Sequence[Any], similarity: SimilarityMatrix) -> float:
    """
    RadViz-independent efficiency of an ordering.

    Args:
        ordering: Permutation of the similarity matrix labels
        similarity: Variable similarity matrix

    Returns:
        Sum over variable pairs of similarity times anchor proximity;
        pairs with undefined similarity are skipped
    """
    sims = _ordered_similarities(ordering, similarity)
    n = sims.shape[0]
    upper = np.triu_indices(n, k=1)
    weights = proximity(angular_separation(n))
    return float(np.nansum(sims[upper] * weights[upper]))


def variable_centroids(coords: np.ndarray, values: np.ndarray) -> np.ndarray:
    """
    Where each variable's mass lands in the projection.

    Args:
        coords: Projected coordinates of valid observations, shape (m, 2)
        values: Normalized values of the same observations, shape (m, n)

    Returns:
        Array of shape (n, 2): the mean point of the observations weighted
        by each variable's values (NaN when a variable has no weight)
    """
    return weighted_means(coords, values)


def dependent_measure(ordering: Sequence[Any],
                      similarity: SimilarityMatrix,
                      normalized: pd.DataFrame) -> float:
    """
    RadViz-dependent efficiency of an ordering.

    Args:
        ordering: Permutation of the similarity matrix labels
        similarity: Variable similarity matrix
        normalized: Normalized dataset containing every ordering label

    Returns:
        spread * (similarity-weighted mean centroid proximity), where spread
        is the mean distance of the valid projected points from the origin.
        0.0 when no observation can be projected.
    """
    sims = _ordered_similarities(ordering, similarity)
    labels = list(ordering)

    values = normalized[labels].to_numpy(dtype=float)
    projection = project_values(values, anchor_positions(labels))
    if projection.n_valid == 0:
        return 0.0

    coords = projection.valid_coords()
    spread = float(np.mean(np.linalg.norm(coords, axis=1)))

    centroids = variable_centroids(coords, values[projection.valid])
    diffs = centroids[:, np.newaxis, :] - centroids[np.newaxis, :, :]
    closeness = 1.0 - np.linalg.norm(diffs, axis=2) / 2.0

    upper = np.triu_indices(len(labels), k=1)
    pair_sims = sims[upper]
    pair_closeness = closeness[upper]
    defined = np.isfinite(pair_sims) & np.isfinite(pair_closeness)

    total = np.sum(np.abs(pair_sims[defined]))
    if total == 0:
        return 0.0

    return float(spread * np.sum(pair_sims[defined] * pair_closeness[defined]) / total)


class EfficiencyScorer:
    """
    Callable scoring an anchor ordering with one of the efficiency measures.
    """

    def __init__(self,
                 similarity: SimilarityMatrix,
                 measure: str = 'independent',
                 data: Optional[pd.DataFrame] = None):
        """
        Initialize a scorer.

        Args:
            similarity: Variable similarity matrix
            measure: 'independent' or 'dependent'
            data: Normalized dataset, required by the dependent measure
        """
        if measure not in MEASURES:
            raise ValueError(f"Unknown efficiency measure: {measure}")
        if measure == 'dependent':
            if data is None:
                raise ValueError("The dependent measure needs the normalized dataset")
            missing = [label for label in similarity.labels() if label not in data.columns]
            if missing:
                raise KeyError(f"Variables missing from dataset: {missing}")

        self.similarity = similarity
        self.measure = measure
        self.data = data

    def score(self, ordering: Sequence[Any]) -> float:
        """
        Score an ordering.

        Args:
            ordering: Permutation of the similarity matrix labels

        Returns:
            Efficiency score (higher is better)
        """
        if self.measure == 'independent':
            return independent_measure(ordering, self.similarity)
        return dependent_measure(ordering, self.similarity, self.data)

    def __call__(self, ordering: Sequence[Any]) -> float:
        return self.score(ordering)

    def __repr__(self) -> str:
        return f"EfficiencyScorer(measure={self.measure!r}, variables={len(self.similarity)})"
