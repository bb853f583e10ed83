"""
Anchor placement for RadViz.

Anchors are spaced evenly on the unit circle in the order given, with the
first anchor at angle 0 and angles increasing counter-clockwise.
"""

import numpy as np
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from radvizmath.errors import DegenerateOrderingError, OrderingMismatchError
from radvizmath.utils.general import duplicates


class Anchor:
    """
    A variable pinned to a point on the unit circle.
    """

    def __init__(self, label: Any, position: np.ndarray, offset: Optional[np.ndarray] = None):
        """
        Initialize an anchor.

        Args:
            label: Variable label
            position: 2-D coordinate on the unit circle
            offset: Text offset hint for placing the label outside the circle
        """
        self.label = label
        self.position = np.asarray(position, dtype=float)
        self.offset = np.zeros(2) if offset is None else np.asarray(offset, dtype=float)

    @property
    def angle(self) -> float:
        """Angle of the anchor in [0, 2π)."""
        return float(np.arctan2(self.position[1], self.position[0]) % (2 * np.pi))

    def to_dict(self) -> dict:
        return {
            'label': self.label,
            'position': self.position.tolist(),
            'offset': self.offset.tolist()
        }

    def __repr__(self) -> str:
        return f"Anchor(label={self.label!r}, position=({self.position[0]:.3f}, {self.position[1]:.3f}))"


def validate_ordering(ordering: Sequence[Any],
                      labels: Optional[Iterable[Any]] = None) -> Tuple[Any, ...]:
    """
    Check that an ordering is a usable anchor permutation.

    Args:
        ordering: Sequence of labels
        labels: Full label set the ordering must be a permutation of

    Returns:
        The ordering as a tuple

    Raises:
        DegenerateOrderingError: Fewer than two labels
        OrderingMismatchError: Repeated labels, or labels that do not match
    """
    ordering = tuple(ordering)
    if len(ordering) < 2:
        raise DegenerateOrderingError(
            f"At least 2 anchors are needed, got {len(ordering)}"
        )

    repeated = duplicates(ordering)
    if repeated:
        raise OrderingMismatchError(f"Ordering repeats labels: {repeated}")

    if labels is not None:
        expected = list(labels)
        unknown = [label for label in ordering if label not in expected]
        missing = [label for label in expected if label not in ordering]
        if unknown or missing:
            raise OrderingMismatchError(
                f"Ordering does not match variables (unknown={unknown}, missing={missing})"
            )

    return ordering


def anchor_angles(n: int) -> np.ndarray:
    """
    Angles of n equally spaced anchors.

    Args:
        n: Number of anchors

    Returns:
        Array of angles 2πi/n for i = 0..n-1
    """
    return 2 * np.pi * np.arange(n) / n


def anchor_positions(ordering: Sequence[Any]) -> np.ndarray:
    """
    Unit circle positions for an ordering.

    Args:
        ordering: Sequence of labels

    Returns:
        Array of shape (n, 2)
    """
    angles = anchor_angles(len(ordering))
    return np.column_stack([np.cos(angles), np.sin(angles)])


def label_offset(position: np.ndarray, scale: float = 0.1, tol: float = 1e-9) -> np.ndarray:
    """
    Nudge for drawing an anchor label just outside the circle.

    Args:
        position: Anchor position
        scale: Size of the nudge
        tol: Components smaller than this are treated as zero

    Returns:
        Offset vector scale * sign(position)
    """
    position = np.asarray(position, dtype=float)
    signs = np.sign(position)
    signs[np.abs(position) < tol] = 0.0
    return scale * signs


def layout(ordering: Sequence[Any], offset_scale: float = 0.1) -> List[Anchor]:
    """
    Place anchors for an ordering on the unit circle.

    Args:
        ordering: Sequence of at least two distinct labels
        offset_scale: Size of the label offset hint

    Returns:
        List of anchors in ordering order
    """
    ordering = validate_ordering(ordering)
    positions = anchor_positions(ordering)
    return [
        Anchor(label, pos, label_offset(pos, offset_scale))
        for label, pos in zip(ordering, positions)
    ]


def rotate(ordering: Sequence[Any], k: int) -> Tuple[Any, ...]:
    """Return the ordering rotated left by k slots."""
    ordering = tuple(ordering)
    if not ordering:
        return ordering
    k = k % len(ordering)
    return ordering[k:] + ordering[:k]


def canonical_ordering(ordering: Sequence[Any]) -> Tuple[Any, ...]:
    """
    Rotate an ordering so it starts with its smallest label.

    Two orderings that differ only by rotation give the same anchor layout
    up to a turn of the circle and share a canonical form.

    Args:
        ordering: Sequence of labels

    Returns:
        Rotated ordering
    """
    ordering = tuple(ordering)
    if not ordering:
        return ordering
    keys = [str(label) for label in ordering]
    return rotate(ordering, keys.index(min(keys)))


def same_cyclic_order(a: Sequence[Any], b: Sequence[Any]) -> bool:
    """
    Check whether two orderings are rotations of each other.

    Args:
        a: First ordering
        b: Second ordering

    Returns:
        True if b equals a rotated by some number of slots
    """
    a = tuple(a)
    b = tuple(b)
    if len(a) != len(b):
        return False
    if not a:
        return True
    return any(rotate(a, k) == b for k in range(len(a)))
