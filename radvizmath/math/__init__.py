"""
Numerical core for RadViz anchor placement.

This package provides normalization, anchor layout, projection, variable
similarity, ordering quality measures and the ordering strategies built on
them (local search, hierarchical clustering, score ranking).
"""

from radvizmath.math.normalize import normalize, degenerate_columns, numeric_columns
from radvizmath.math.anchors import (
    Anchor, layout, anchor_positions, canonical_ordering, same_cyclic_order
)
from radvizmath.math.projection import ProjectedPoint, Projection, project
from radvizmath.math.similarity import SimilarityMatrix, similarity
from radvizmath.math.efficiency import (
    EfficiencyScorer, independent_measure, dependent_measure
)
from radvizmath.math.optimizer import AnchorOptimizer, OptimizationTrace, TraceEntry, optimize
from radvizmath.math.hierarchy import HierarchicalOrderer, hierarchical_order, order
from radvizmath.math.ranking import ranked_ordering, interleaved_ordering
