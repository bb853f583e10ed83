"""
Anchor orderings from external per-variable scores.

Some ordering signals (scagnostic measures, for example) come from outside
this package as one number per variable. These helpers turn such a score
mapping into an anchor ordering.
"""

import numpy as np
from typing import Any, Dict, List, Tuple

from radvizmath.math.anchors import validate_ordering


def _sort_key(item: Tuple[Any, float], descending: bool) -> Tuple[bool, float, str]:
    label, score = item
    missing = score is None or np.isnan(score)
    value = 0.0 if missing else float(score)
    return (missing, -value if descending else value, str(label))


def ranked_ordering(scores: Dict[Any, float], descending: bool = True) -> Tuple[Any, ...]:
    """
    Order variables by score.

    Args:
        scores: Mapping from label to score
        descending: Highest score first

    Returns:
        Ordering with undefined (NaN/None) scores last and ties broken by
        label
    """
    ranked = sorted(scores.items(), key=lambda item: _sort_key(item, descending))
    return validate_ordering([label for label, _ in ranked])


def interleaved_ordering(scores: Dict[Any, float], descending: bool = True) -> Tuple[Any, ...]:
    """
    Order variables so that similar scores sit next to each other.

    The top-ranked variable takes the first slot and the following ones are
    placed alternately after it and before it around the circle, so the
    lowest-ranked variables meet opposite the first slot.

    Args:
        scores: Mapping from label to score
        descending: Rank highest score first

    Returns:
        Ordering starting with the top-ranked label
    """
    ranked = list(ranked_ordering(scores, descending))
    after: List[Any] = []
    before: List[Any] = []
    for i, label in enumerate(ranked[1:]):
        if i % 2 == 0:
            after.append(label)
        else:
            before.append(label)
    return validate_ordering([ranked[0]] + after + before[::-1])
