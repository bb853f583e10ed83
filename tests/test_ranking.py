"""
Tests for the ranking module.
"""

import pytest
import numpy as np
import sys
import os

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from radvizmath.math.ranking import ranked_ordering, interleaved_ordering
from radvizmath.errors import DegenerateOrderingError


class TestRankedOrdering:
    """Tests for score-ranked orderings."""

    def test_descending(self):
        """Highest score first, undefined scores last."""
        scores = {'a': 0.2, 'b': 0.9, 'c': np.nan, 'd': 0.5}
        assert ranked_ordering(scores) == ('b', 'd', 'a', 'c')

    def test_ascending(self):
        """Undefined scores stay last when ranking upwards."""
        scores = {'a': 0.2, 'b': 0.9, 'c': None, 'd': 0.5}
        assert ranked_ordering(scores, descending=False) == ('a', 'd', 'b', 'c')

    def test_ties_broken_by_label(self):
        scores = {'y': 1.0, 'x': 1.0, 'z': 2.0}
        assert ranked_ordering(scores) == ('z', 'x', 'y')

    def test_too_few_variables(self):
        with pytest.raises(DegenerateOrderingError):
            ranked_ordering({'a': 1.0})


class TestInterleavedOrdering:
    """Tests for interleaved orderings."""

    def test_alternates_around_top(self):
        """Runners-up sit on either side of the top variable."""
        scores = {'a': 5, 'b': 4, 'c': 3, 'd': 2, 'e': 1}
        result = interleaved_ordering(scores)

        assert result == ('a', 'b', 'd', 'e', 'c')
        assert result[1] == 'b'
        assert result[-1] == 'c'

    def test_two_variables(self):
        assert interleaved_ordering({'p': 0.1, 'q': 0.7}) == ('q', 'p')
