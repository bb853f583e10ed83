"""
Randomized local search over anchor orderings.

Each round draws a batch of candidate orderings by swapping random pairs
of positions in the current best ordering, scores them, and keeps the best
candidate if it beats the current best. All randomness comes from a
numpy Generator that callers can seed or inject, so a run is reproducible.
"""

import logging
import time
import numpy as np
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from radvizmath.math.anchors import validate_ordering
from radvizmath.math.similarity import SimilarityMatrix

logger = logging.getLogger(__name__)


class TraceEntry:
    """
    A new best ordering and the round it was found in.
    """

    def __init__(self, iteration: int, ordering: Sequence[Any], score: float):
        self.iteration = int(iteration)
        self.ordering = tuple(ordering)
        self.score = float(score)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'iteration': self.iteration,
            'ordering': list(self.ordering),
            'score': self.score
        }

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, TraceEntry):
            return NotImplemented
        return (self.iteration, self.ordering, self.score) == \
            (other.iteration, other.ordering, other.score)

    def __repr__(self) -> str:
        return f"TraceEntry(iteration={self.iteration}, score={self.score:.6f}, ordering={self.ordering})"


class OptimizationTrace:
    """
    The sequence of improving orderings found by a search.

    The first entry is the initial ordering (iteration 0); each later entry
    is strictly better than the one before it.
    """

    def __init__(self, entries: Optional[List[TraceEntry]] = None):
        self._entries = [] if entries is None else list(entries)

    def append(self, entry: TraceEntry) -> None:
        self._entries.append(entry)

    @property
    def entries(self) -> List[TraceEntry]:
        return list(self._entries)

    @property
    def best(self) -> TraceEntry:
        """The final (best) entry."""
        if not self._entries:
            raise IndexError("Trace is empty")
        return self._entries[-1]

    def scores(self) -> List[float]:
        return [entry.score for entry in self._entries]

    def orderings(self) -> List[Tuple[Any, ...]]:
        return [entry.ordering for entry in self._entries]

    def improved(self) -> bool:
        """Whether the search found anything better than the start."""
        return len(self._entries) > 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            'best': self.best.to_dict() if self._entries else None,
            'entries': [entry.to_dict() for entry in self._entries]
        }

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TraceEntry]:
        return iter(self._entries)

    def __getitem__(self, i: int) -> TraceEntry:
        return self._entries[i]

    def __repr__(self) -> str:
        if not self._entries:
            return "OptimizationTrace(empty)"
        return f"OptimizationTrace(entries={len(self)}, best={self.best.score:.6f})"


def swap_positions(ordering: Sequence[Any],
                   rng: np.random.Generator,
                   n_swaps: int = 1) -> Tuple[Any, ...]:
    """
    Swap random pairs of positions in an ordering.

    Args:
        ordering: Ordering to perturb (not modified)
        rng: Random source
        n_swaps: Number of pair swaps to apply

    Returns:
        A new ordering
    """
    candidate = list(ordering)
    for _ in range(n_swaps):
        i, j = rng.choice(len(candidate), size=2, replace=False)
        candidate[i], candidate[j] = candidate[j], candidate[i]
    return tuple(candidate)


def draw_candidates(ordering: Sequence[Any],
                    rng: np.random.Generator,
                    n_candidates: int,
                    n_swaps: int = 1) -> List[Tuple[Any, ...]]:
    """
    Draw a batch of neighbouring orderings.

    Args:
        ordering: Current best ordering
        rng: Random source
        n_candidates: Batch size
        n_swaps: Pair swaps per candidate

    Returns:
        Candidates in generation order
    """
    return [swap_positions(ordering, rng, n_swaps) for _ in range(n_candidates)]


def score_candidates(candidates: List[Tuple[Any, ...]],
                     scorer: Callable[[Sequence[Any]], float],
                     executor: Optional[ThreadPoolExecutor] = None) -> List[float]:
    """
    Score a batch of candidates, keeping generation order.

    Args:
        candidates: Orderings to score
        scorer: Scoring function
        executor: Optional thread pool

    Returns:
        Scores aligned with candidates
    """
    if executor is None:
        return [scorer(candidate) for candidate in candidates]
    return list(executor.map(scorer, candidates))


def select_best(candidates: List[Tuple[Any, ...]],
                scores: List[float]) -> Tuple[Optional[Tuple[Any, ...]], float]:
    """
    Pick the highest-scoring candidate; the first one wins ties.

    NaN scores are never selected.

    Args:
        candidates: Orderings
        scores: Their scores

    Returns:
        (best candidate, its score), or (None, -inf) if nothing is scorable
    """
    best = None
    best_score = -np.inf
    for candidate, score in zip(candidates, scores):
        if score > best_score:
            best = candidate
            best_score = score
    return best, best_score


def optimize(initial_ordering: Sequence[Any],
             similarity: SimilarityMatrix,
             scorer: Callable[[Sequence[Any]], float],
             max_iterations: int = 100,
             samples_per_iteration: int = 50,
             patience: Optional[int] = None,
             seed: Optional[int] = None,
             rng: Optional[np.random.Generator] = None,
             n_swaps: int = 1,
             n_workers: int = 1) -> OptimizationTrace:
    """
    Search for a better anchor ordering.

    Args:
        initial_ordering: Starting permutation of the similarity labels
        similarity: Similarity matrix the ordering must match
        scorer: Function scoring an ordering (higher is better)
        max_iterations: Number of rounds
        samples_per_iteration: Candidates drawn per round
        patience: Stop after this many rounds without improvement
            (None runs all rounds)
        seed: Seed for a fresh random Generator (ignored if rng is given)
        rng: Injected random Generator
        n_swaps: Position swaps applied to each candidate
        n_workers: Threads used to score candidates within a round

    Returns:
        OptimizationTrace starting with the initial ordering
    """
    ordering = validate_ordering(initial_ordering, similarity.labels())
    if max_iterations < 0:
        raise ValueError("max_iterations must be non-negative")
    if samples_per_iteration < 1:
        raise ValueError("samples_per_iteration must be at least 1")
    if n_swaps < 1:
        raise ValueError("n_swaps must be at least 1")
    if patience is not None and patience < 1:
        raise ValueError("patience must be at least 1")

    if rng is None:
        rng = np.random.default_rng(seed)

    best_score = float(scorer(ordering))
    trace = OptimizationTrace([TraceEntry(0, ordering, best_score)])
    logger.info(f"Starting anchor search over {len(ordering)} variables, initial score {best_score:.6f}")

    start_time = time.time()
    stale_rounds = 0
    executor = ThreadPoolExecutor(max_workers=n_workers) if n_workers > 1 else None

    try:
        for iteration in range(1, max_iterations + 1):
            candidates = draw_candidates(ordering, rng, samples_per_iteration, n_swaps)
            scores = score_candidates(candidates, scorer, executor)
            candidate, score = select_best(candidates, scores)

            # NaN never compares greater, so an undefined initial score can only
            # be replaced once it is defined
            if candidate is not None and (score > best_score or np.isnan(best_score)):
                ordering = candidate
                best_score = float(score)
                trace.append(TraceEntry(iteration, ordering, best_score))
                stale_rounds = 0
                logger.debug(f"Round {iteration}: new best {best_score:.6f}")
            else:
                stale_rounds += 1

            if patience is not None and stale_rounds >= patience:
                logger.info(f"No improvement for {patience} rounds, stopping at round {iteration}")
                break
    finally:
        if executor is not None:
            executor.shutdown(wait=True)

    logger.info(
        f"Anchor search finished in {time.time() - start_time:.2f}s: "
        f"{len(trace) - 1} improvements, best score {best_score:.6f}"
    )
    return trace


class AnchorOptimizer:
    """
    Reusable local-search configuration.
    """

    def __init__(self,
                 max_iterations: int = 100,
                 samples_per_iteration: int = 50,
                 patience: Optional[int] = None,
                 n_swaps: int = 1,
                 n_workers: int = 1,
                 seed: Optional[int] = None):
        self.max_iterations = max_iterations
        self.samples_per_iteration = samples_per_iteration
        self.patience = patience
        self.n_swaps = n_swaps
        self.n_workers = n_workers
        self.seed = seed

    @classmethod
    def from_config(cls, config: Any) -> 'AnchorOptimizer':
        """
        Build an optimizer from the 'optimizer' section of a Config.

        Args:
            config: Config instance

        Returns:
            AnchorOptimizer
        """
        return cls(
            max_iterations=config.get('optimizer.max-iterations', 100),
            samples_per_iteration=config.get('optimizer.samples-per-iteration', 50),
            patience=config.get('optimizer.patience'),
            n_swaps=config.get('optimizer.n-swaps', 1),
            n_workers=config.get('optimizer.n-workers', 1),
            seed=config.get('optimizer.seed')
        )

    def optimize(self,
                 initial_ordering: Sequence[Any],
                 similarity: SimilarityMatrix,
                 scorer: Callable[[Sequence[Any]], float],
                 rng: Optional[np.random.Generator] = None) -> OptimizationTrace:
        return optimize(
            initial_ordering,
            similarity,
            scorer,
            max_iterations=self.max_iterations,
            samples_per_iteration=self.samples_per_iteration,
            patience=self.patience,
            seed=self.seed,
            rng=rng,
            n_swaps=self.n_swaps,
            n_workers=self.n_workers
        )

    def __repr__(self) -> str:
        return (f"AnchorOptimizer(max_iterations={self.max_iterations}, "
                f"samples_per_iteration={self.samples_per_iteration}, patience={self.patience})")
