"""
Tests for the optimizer module.
"""

import pytest
import numpy as np
import sys
import os

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from radvizmath.math.optimizer import (
    TraceEntry, OptimizationTrace, swap_positions, draw_candidates,
    score_candidates, select_best, optimize, AnchorOptimizer
)
from radvizmath.math.efficiency import EfficiencyScorer, independent_measure
from radvizmath.math.similarity import SimilarityMatrix
from radvizmath.components.config import Config
from radvizmath.errors import OrderingMismatchError


LABELS = ['a', 'b', 'c', 'd', 'e', 'f']


@pytest.fixture
def block_matrix():
    """Three pairs of similar variables: (a, d), (b, e), (c, f)."""
    values = np.full((6, 6), 0.05)
    for i, j in [(0, 3), (1, 4), (2, 5)]:
        values[i, j] = values[j, i] = 0.95
    np.fill_diagonal(values, 1.0)
    return SimilarityMatrix(values, LABELS)


@pytest.fixture
def flat_matrix():
    """Every pair equally similar."""
    values = np.full((4, 4), 0.8)
    np.fill_diagonal(values, 1.0)
    return SimilarityMatrix(values, ['w', 'x', 'y', 'z'])


class CountingScorer:
    """Wraps a scorer and counts calls."""

    def __init__(self, scorer):
        self.scorer = scorer
        self.calls = 0

    def __call__(self, ordering):
        self.calls += 1
        return self.scorer(ordering)


class TestTrace:
    """Tests for trace bookkeeping."""

    def test_trace_accessors(self):
        """The best entry is the last one."""
        trace = OptimizationTrace([TraceEntry(0, ['a', 'b'], 0.5)])
        trace.append(TraceEntry(3, ['b', 'a'], 0.7))

        assert len(trace) == 2
        assert trace.best.ordering == ('b', 'a')
        assert trace.scores() == [0.5, 0.7]
        assert trace.orderings() == [('a', 'b'), ('b', 'a')]
        assert trace.improved()
        assert trace[0].iteration == 0

    def test_empty_trace(self):
        """An empty trace has no best entry."""
        with pytest.raises(IndexError):
            OptimizationTrace().best

    def test_to_dict(self):
        """Traces export plain data."""
        trace = OptimizationTrace([TraceEntry(0, ('a', 'b'), 1.0)])
        assert trace.to_dict() == {
            'best': {'iteration': 0, 'ordering': ['a', 'b'], 'score': 1.0},
            'entries': [{'iteration': 0, 'ordering': ['a', 'b'], 'score': 1.0}]
        }


class TestCandidates:
    """Tests for candidate generation and selection."""

    def test_swap_positions(self):
        """One swap changes exactly two slots and keeps the label set."""
        rng = np.random.default_rng(0)
        original = tuple(LABELS)
        candidate = swap_positions(original, rng)

        assert original == tuple(LABELS)
        assert sorted(candidate) == sorted(original)
        assert sum(1 for a, b in zip(original, candidate) if a != b) == 2

    def test_draw_candidates_reproducible(self):
        """The same seed draws the same candidates."""
        first = draw_candidates(LABELS, np.random.default_rng(9), 10)
        second = draw_candidates(LABELS, np.random.default_rng(9), 10)
        assert first == second
        assert len(first) == 10

    def test_select_best_first_wins_ties(self):
        """The first of several equally good candidates is kept."""
        candidate, score = select_best([('x',), ('y',), ('z',)], [1.0, 3.0, 3.0])
        assert candidate == ('y',)
        assert score == 3.0

    def test_select_best_ignores_nan(self):
        """NaN scores are never selected."""
        candidate, score = select_best([('x',), ('y',)], [np.nan, np.nan])
        assert candidate is None
        assert score == -np.inf

    def test_score_candidates_order(self):
        """Scores line up with the candidates."""
        candidates = [('a', 'b'), ('b', 'a', 'c')]
        assert score_candidates(candidates, len) == [2, 3]


class TestOptimize:
    """Tests for the local search."""

    def test_trace_is_monotonic(self, block_matrix):
        """Scores never decrease along the trace."""
        trace = optimize(LABELS, block_matrix, EfficiencyScorer(block_matrix),
                         max_iterations=60, samples_per_iteration=10, seed=1)
        scores = trace.scores()
        assert all(b > a for a, b in zip(scores, scores[1:]))
        assert trace[0].iteration == 0
        assert trace[0].ordering == tuple(LABELS)

    def test_improves_bad_start(self, block_matrix):
        """Similar pairs end up adjacent."""
        trace = optimize(LABELS, block_matrix, EfficiencyScorer(block_matrix),
                         max_iterations=200, samples_per_iteration=20, seed=4)
        best = list(trace.best.ordering)
        assert trace.improved()
        assert trace.best.score > trace[0].score

        for x, y in [('a', 'd'), ('b', 'e'), ('c', 'f')]:
            gap = abs(best.index(x) - best.index(y))
            assert min(gap, len(best) - gap) == 1

    def test_reproducible_with_seed(self, block_matrix):
        """Two runs with the same seed give the same trace."""
        scorer = EfficiencyScorer(block_matrix)
        first = optimize(LABELS, block_matrix, scorer, max_iterations=30, samples_per_iteration=8, seed=42)
        second = optimize(LABELS, block_matrix, scorer, max_iterations=30, samples_per_iteration=8, seed=42)
        assert first.entries == second.entries

    def test_injected_rng_matches_seed(self, block_matrix):
        """An injected generator behaves like the equivalent seed."""
        scorer = EfficiencyScorer(block_matrix)
        seeded = optimize(LABELS, block_matrix, scorer, max_iterations=20, samples_per_iteration=5, seed=5)
        injected = optimize(LABELS, block_matrix, scorer, max_iterations=20, samples_per_iteration=5,
                            rng=np.random.default_rng(5))
        assert seeded.entries == injected.entries

    def test_threads_do_not_change_result(self, block_matrix):
        """Parallel scoring picks the same candidates as serial scoring."""
        scorer = EfficiencyScorer(block_matrix)
        serial = optimize(LABELS, block_matrix, scorer, max_iterations=25, samples_per_iteration=12, seed=8)
        threaded = optimize(LABELS, block_matrix, scorer, max_iterations=25, samples_per_iteration=12,
                            seed=8, n_workers=4)
        assert serial.entries == threaded.entries

    def test_no_improvement_gives_single_entry(self, flat_matrix):
        """An already optimal ordering yields a length-1 trace."""
        trace = optimize(['w', 'x', 'y', 'z'], flat_matrix, EfficiencyScorer(flat_matrix),
                         max_iterations=15, samples_per_iteration=5, seed=0)
        assert len(trace) == 1
        assert not trace.improved()
        assert trace.best.ordering == ('w', 'x', 'y', 'z')

    def test_patience_stops_early(self, flat_matrix):
        """The search stops after the configured number of stale rounds."""
        scorer = CountingScorer(EfficiencyScorer(flat_matrix))
        optimize(['w', 'x', 'y', 'z'], flat_matrix, scorer,
                 max_iterations=100, samples_per_iteration=5, patience=3, seed=0)
        assert scorer.calls == 1 + 3 * 5

    def test_runs_all_rounds_without_patience(self, flat_matrix):
        """Without patience every round is run."""
        scorer = CountingScorer(EfficiencyScorer(flat_matrix))
        optimize(['w', 'x', 'y', 'z'], flat_matrix, scorer,
                 max_iterations=7, samples_per_iteration=4, seed=0)
        assert scorer.calls == 1 + 7 * 4

    def test_zero_iterations(self, block_matrix):
        """Zero rounds only scores the initial ordering."""
        trace = optimize(LABELS, block_matrix, EfficiencyScorer(block_matrix), max_iterations=0)
        assert len(trace) == 1
        assert trace.best.score == independent_measure(LABELS, block_matrix)

    def test_invalid_arguments(self, block_matrix):
        """Nonsensical settings are rejected."""
        scorer = EfficiencyScorer(block_matrix)
        with pytest.raises(ValueError):
            optimize(LABELS, block_matrix, scorer, max_iterations=-1)
        with pytest.raises(ValueError):
            optimize(LABELS, block_matrix, scorer, samples_per_iteration=0)
        with pytest.raises(ValueError):
            optimize(LABELS, block_matrix, scorer, n_swaps=0)
        with pytest.raises(ValueError):
            optimize(LABELS, block_matrix, scorer, patience=0)

    def test_mismatched_initial_ordering(self, block_matrix):
        """The initial ordering must cover the matrix variables."""
        with pytest.raises(OrderingMismatchError):
            optimize(LABELS[:4], block_matrix, EfficiencyScorer(block_matrix))


class TestAnchorOptimizer:
    """Tests for the AnchorOptimizer wrapper."""

    def test_matches_function(self, block_matrix):
        """The class runs the same search as optimize()."""
        scorer = EfficiencyScorer(block_matrix)
        optimizer = AnchorOptimizer(max_iterations=20, samples_per_iteration=6, seed=3)
        direct = optimize(LABELS, block_matrix, scorer, max_iterations=20, samples_per_iteration=6, seed=3)
        assert optimizer.optimize(LABELS, block_matrix, scorer).entries == direct.entries

    def test_from_config(self):
        """Settings come from the optimizer section."""
        config = Config({'optimizer': {'max-iterations': 12, 'samples-per-iteration': 3,
                                       'patience': 4, 'seed': 99, 'n-workers': 2}})
        optimizer = AnchorOptimizer.from_config(config)
        assert optimizer.max_iterations == 12
        assert optimizer.samples_per_iteration == 3
        assert optimizer.patience == 4
        assert optimizer.seed == 99
        assert optimizer.n_workers == 2
        assert optimizer.n_swaps == 1
