"""
End-to-end RadViz pipeline.

This module ties the numerical pieces together: it normalizes a dataset,
computes variable similarities, derives an anchor ordering with one of the
ordering strategies, lays out the anchors and projects the observations into
chart coordinates ready for a renderer.
"""

import logging
import time
import numpy as np
import pandas as pd
from typing import Any, Dict, List, Optional, Sequence, Tuple

from radvizmath.components.config import Config, ConfigManager
from radvizmath.errors import DegenerateOrderingError
from radvizmath.math.anchors import Anchor, canonical_ordering, layout, validate_ordering
from radvizmath.math.efficiency import EfficiencyScorer
from radvizmath.math.hierarchy import HierarchicalOrderer
from radvizmath.math.normalize import degenerate_columns, normalize, numeric_columns
from radvizmath.math.optimizer import AnchorOptimizer, OptimizationTrace
from radvizmath.math.projection import Projection, project
from radvizmath.math.ranking import ranked_ordering
from radvizmath.math.similarity import SimilarityMatrix, similarity
from radvizmath.utils.general import nan_to_none

logger = logging.getLogger(__name__)

METHODS = ('original', 'independent', 'dependent', 'hierarchical', 'ranked')


def chart_data(anchors: List[Anchor],
               projection: Projection,
               source: Optional[pd.DataFrame] = None,
               passthrough: Optional[List[str]] = None) -> Dict[str, Any]:
    """
    Prepare anchors and points for a renderer.

    Args:
        anchors: Laid out anchors
        projection: Projected observations
        source: Dataset the projection came from
        passthrough: Columns of source copied onto each point untouched

    Returns:
        JSON-ready dictionary with 'anchors' and 'points'; invalid points
        have a None position
    """
    passthrough = passthrough or []
    if source is not None and len(source) != len(projection):
        raise ValueError(
            f"Source has {len(source)} rows but the projection has {len(projection)} points"
        )

    points = []
    for pos, point in enumerate(projection.points):
        entry = {
            'position': [point.x, point.y] if point.valid else None,
            'valid': point.valid
        }
        if source is not None:
            for col in passthrough:
                entry[col] = nan_to_none(source[col].iloc[pos])
        points.append(entry)

    return {
        'anchors': [anchor.to_dict() for anchor in anchors],
        'points': points
    }


class RadvizResult:
    """
    Outcome of one pipeline run.
    """

    def __init__(self,
                 method: str,
                 ordering: Tuple[Any, ...],
                 anchors: List[Anchor],
                 projection: Projection,
                 score: Optional[float] = None,
                 trace: Optional[OptimizationTrace] = None):
        self.method = method
        self.ordering = ordering
        self.anchors = anchors
        self.projection = projection
        self.score = score
        self.trace = trace

    def to_dict(self,
                source: Optional[pd.DataFrame] = None,
                passthrough: Optional[List[str]] = None) -> Dict[str, Any]:
        """
        Export the result for JSON serialization.

        Args:
            source: Dataset for pass-through columns
            passthrough: Columns copied onto each point

        Returns:
            Dictionary with method, ordering, score, chart data and trace
        """
        result = {
            'method': self.method,
            'ordering': list(self.ordering),
            'score': nan_to_none(self.score) if self.score is not None else None,
            'chart': chart_data(self.anchors, self.projection, source, passthrough)
        }
        if self.trace is not None:
            result['trace'] = self.trace.to_dict()
        return result

    def __repr__(self) -> str:
        return f"RadvizResult(method={self.method!r}, ordering={self.ordering})"


class RadvizPipeline:
    """
    Computes RadViz layouts for one dataset.
    """

    def __init__(self,
                 data: pd.DataFrame,
                 columns: Optional[List[str]] = None,
                 label_column: Optional[str] = None,
                 config: Optional[Config] = None):
        """
        Initialize the pipeline.

        Args:
            data: Raw dataset (left untouched)
            columns: Variables to use as anchors (defaults to every numeric
                column except the label column)
            label_column: Grouping column passed through to the chart data
            config: Configuration (defaults to the shared instance)
        """
        self.config = config or ConfigManager.get_config()
        self.data = data
        self.label_column = label_column

        if label_column is not None and label_column not in data.columns:
            raise KeyError(f"Label column not found in dataset: {label_column}")

        if columns is None:
            columns = [col for col in numeric_columns(data) if col != label_column]

        self.normalized = normalize(data, columns=list(columns))

        # Constant columns cannot be placed meaningfully
        self.excluded = degenerate_columns(data, list(columns))
        if self.excluded:
            logger.warning(f"Excluding degenerate columns from anchors: {self.excluded}")
        self.columns = [col for col in columns if col not in self.excluded]

        if len(self.columns) < 2:
            raise DegenerateOrderingError(
                f"At least 2 usable variables are needed, got {self.columns}"
            )

        self._similarities: Dict[str, SimilarityMatrix] = {}

    @property
    def passthrough(self) -> List[str]:
        return [self.label_column] if self.label_column is not None else []

    def similarity_matrix(self, metric: Optional[str] = None) -> SimilarityMatrix:
        """
        Similarity matrix over the anchor variables (cached per metric).

        Args:
            metric: Similarity metric (defaults to config)

        Returns:
            SimilarityMatrix
        """
        metric = metric or self.config.get('similarity.metric', 'cosine')
        if metric not in self._similarities:
            self._similarities[metric] = similarity(self.normalized, metric, self.columns)
        return self._similarities[metric]

    def scorer(self, measure: Optional[str] = None, metric: Optional[str] = None) -> EfficiencyScorer:
        """
        Efficiency scorer over the anchor variables.

        Args:
            measure: 'independent' or 'dependent' (defaults to config)
            metric: Similarity metric (defaults to config)

        Returns:
            EfficiencyScorer
        """
        measure = measure or self.config.get('optimizer.measure', 'independent')
        return EfficiencyScorer(self.similarity_matrix(metric), measure, self.normalized)

    def order(self,
              method: str = 'original',
              metric: Optional[str] = None,
              scores: Optional[Dict[Any, float]] = None,
              initial: Optional[Sequence[Any]] = None,
              rng: Optional[np.random.Generator] = None) -> Tuple[Tuple[Any, ...], Optional[OptimizationTrace]]:
        """
        Derive an anchor ordering.

        Args:
            method: One of 'original', 'independent', 'dependent',
                'hierarchical', 'ranked'
            metric: Similarity metric (defaults to config)
            scores: Per-variable scores for the 'ranked' method
            initial: Starting ordering for the search methods (defaults to
                the column order)
            rng: Random source for the search methods

        Returns:
            (ordering, trace); trace is None for non-search methods
        """
        if method not in METHODS:
            raise ValueError(f"Unknown ordering method: {method}")

        trace = None
        if method == 'original':
            ordering = tuple(self.columns)
        elif method == 'ranked':
            if scores is None:
                raise ValueError("The ranked method needs per-variable scores")
            ordering = ranked_ordering({col: scores.get(col, np.nan) for col in self.columns})
        elif method == 'hierarchical':
            orderer = HierarchicalOrderer(optimal=bool(self.config.get('hierarchy.optimal-leaf-order', False)))
            ordering = orderer.order(self.similarity_matrix(metric))
        else:
            start = validate_ordering(initial if initial is not None else self.columns, self.columns)
            optimizer = AnchorOptimizer.from_config(self.config)
            trace = optimizer.optimize(
                start,
                self.similarity_matrix(metric),
                self.scorer(method, metric),
                rng=rng
            )
            ordering = trace.best.ordering

        if self.config.get('output.canonicalize', False):
            ordering = canonical_ordering(ordering)

        return ordering, trace

    def layout(self, ordering: Sequence[Any]) -> List[Anchor]:
        """Anchors for an ordering of the pipeline's variables."""
        ordering = validate_ordering(ordering, self.columns)
        return layout(ordering, self.config.get('layout.label-offset', 0.1))

    def project(self, ordering: Sequence[Any]) -> Projection:
        """Project the normalized data under an ordering."""
        return project(self.normalized, self.layout(ordering))

    def run(self,
            method: str = 'original',
            metric: Optional[str] = None,
            measure: Optional[str] = None,
            scores: Optional[Dict[Any, float]] = None,
            rng: Optional[np.random.Generator] = None) -> RadvizResult:
        """
        Order, lay out and project in one go.

        Args:
            method: Ordering method
            metric: Similarity metric (defaults to config)
            measure: Measure used to report the final score (defaults to the
                search measure, or config for non-search methods)
            scores: Per-variable scores for the 'ranked' method
            rng: Random source for the search methods

        Returns:
            RadvizResult
        """
        start_time = time.time()
        logger.info(f"Running RadViz pipeline with method={method} over {len(self.columns)} variables")

        ordering, trace = self.order(method, metric=metric, scores=scores, rng=rng)
        anchors = self.layout(ordering)
        projection = project(self.normalized, anchors)

        if measure is None and method in ('independent', 'dependent'):
            measure = method
        score = self.scorer(measure, metric)(ordering)

        logger.info(f"[{time.time() - start_time:.2f}s] Ordering {list(ordering)} scored {score:.6f}")
        return RadvizResult(method, ordering, anchors, projection, score, trace)

    def chart_data(self, ordering: Sequence[Any]) -> Dict[str, Any]:
        """Renderer payload for an ordering, with the label column passed through."""
        anchors = self.layout(ordering)
        return chart_data(anchors, project(self.normalized, anchors), self.data, self.passthrough)
