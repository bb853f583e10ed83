"""
Tests for the anchors module.
"""

import pytest
import numpy as np
import sys
import os

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from radvizmath.math.anchors import (
    Anchor, validate_ordering, anchor_angles, anchor_positions, label_offset,
    layout, rotate, canonical_ordering, same_cyclic_order
)
from radvizmath.errors import DegenerateOrderingError, OrderingMismatchError


class TestLayout:
    """Tests for anchor placement."""

    def test_first_anchor_at_angle_zero(self):
        """The first anchor sits at (1, 0)."""
        anchors = layout(['a', 'b', 'c'])
        assert np.allclose(anchors[0].position, [1.0, 0.0])
        assert anchors[0].label == 'a'

    def test_equal_spacing(self):
        """Anchor i sits at angle 2πi/n."""
        anchors = layout(['a', 'b', 'c', 'd'])
        expected = [[1, 0], [0, 1], [-1, 0], [0, -1]]
        for anchor, pos in zip(anchors, expected):
            assert np.allclose(anchor.position, pos, atol=1e-12)

    @pytest.mark.parametrize('n', [2, 3, 4, 5, 7, 12])
    def test_positions_sum_to_zero(self, n):
        """Equally spaced anchors are balanced around the origin."""
        positions = anchor_positions([f'v{i}' for i in range(n)])
        assert np.allclose(positions.sum(axis=0), [0.0, 0.0], atol=1e-12)

    @pytest.mark.parametrize('n', [2, 3, 6])
    def test_positions_on_unit_circle(self, n):
        """Every anchor has unit norm."""
        positions = anchor_positions([f'v{i}' for i in range(n)])
        assert np.allclose(np.linalg.norm(positions, axis=1), 1.0)

    def test_angles(self):
        """Angles are evenly spaced starting at zero."""
        assert np.allclose(anchor_angles(4), [0, np.pi / 2, np.pi, 3 * np.pi / 2])

    def test_anchor_angle_property(self):
        """Anchor.angle recovers the slot angle."""
        anchors = layout(['a', 'b', 'c'])
        assert np.isclose(anchors[1].angle, 2 * np.pi / 3)

    def test_deterministic(self):
        """Layout is a pure function of the ordering."""
        first = layout(['x', 'y', 'z'])
        second = layout(['x', 'y', 'z'])
        for a, b in zip(first, second):
            assert a.label == b.label
            assert np.array_equal(a.position, b.position)

    def test_too_few_anchors(self):
        """One or zero anchors cannot be placed."""
        with pytest.raises(DegenerateOrderingError):
            layout(['only'])
        with pytest.raises(DegenerateOrderingError):
            layout([])

    def test_repeated_labels(self):
        """Repeated labels are rejected."""
        with pytest.raises(OrderingMismatchError):
            layout(['a', 'b', 'a'])

    def test_label_offsets(self):
        """Label offsets point away from the centre."""
        anchors = layout(['a', 'b', 'c', 'd'], offset_scale=0.2)
        assert np.allclose(anchors[0].offset, [0.2, 0.0])
        assert np.allclose(anchors[1].offset, [0.0, 0.2])
        assert np.allclose(anchors[2].offset, [-0.2, 0.0])
        assert np.allclose(anchors[3].offset, [0.0, -0.2])

    def test_label_offset_diagonal(self):
        """Both components are nudged for diagonal anchors."""
        assert np.allclose(label_offset(np.array([-0.5, 0.5])), [-0.1, 0.1])

    def test_to_dict(self):
        """Anchors export plain lists."""
        data = Anchor('a', np.array([1.0, 0.0])).to_dict()
        assert data == {'label': 'a', 'position': [1.0, 0.0], 'offset': [0.0, 0.0]}


class TestValidateOrdering:
    """Tests for ordering validation."""

    def test_valid(self):
        """A permutation of the labels is accepted and returned as a tuple."""
        assert validate_ordering(['b', 'a'], ['a', 'b']) == ('b', 'a')

    def test_missing_label(self):
        """Orderings must cover every variable."""
        with pytest.raises(OrderingMismatchError):
            validate_ordering(['a', 'b'], ['a', 'b', 'c'])

    def test_unknown_label(self):
        """Orderings may not name unknown variables."""
        with pytest.raises(OrderingMismatchError):
            validate_ordering(['a', 'z'], ['a', 'b'])


class TestRotation:
    """Tests for rotation helpers."""

    def test_rotate(self):
        """Rotating moves the first k labels to the end."""
        assert rotate(['a', 'b', 'c', 'd'], 1) == ('b', 'c', 'd', 'a')
        assert rotate(['a', 'b', 'c'], 3) == ('a', 'b', 'c')

    def test_canonical_ordering(self):
        """The canonical form starts at the smallest label."""
        assert canonical_ordering(['c', 'a', 'd', 'b']) == ('a', 'd', 'b', 'c')

    def test_canonical_rotations_agree(self):
        """All rotations share one canonical form."""
        ordering = ['d', 'b', 'a', 'c']
        canon = canonical_ordering(ordering)
        for k in range(len(ordering)):
            assert canonical_ordering(rotate(ordering, k)) == canon

    def test_same_cyclic_order(self):
        """Rotations are recognized; reversals and other permutations are not."""
        assert same_cyclic_order(['a', 'b', 'c', 'd'], ['c', 'd', 'a', 'b'])
        assert not same_cyclic_order(['a', 'b', 'c', 'd'], ['a', 'c', 'b', 'd'])
        assert not same_cyclic_order(['a', 'b', 'c'], ['a', 'b'])
