"""
Tests for the normalize module.
"""

import pytest
import numpy as np
import pandas as pd
import sys
import os

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from radvizmath.math.normalize import (
    numeric_columns, degenerate_columns, min_max, normalize
)
from radvizmath.errors import DegenerateVariableError


@pytest.fixture
def iris_like():
    """Small mixed-type dataset."""
    return pd.DataFrame({
        'sepal': [5.1, 4.9, 6.3, 5.8, 7.1],
        'petal': [1.4, 1.4, 6.0, 5.1, 5.9],
        'width': [0.2, 0.2, 2.5, 1.9, 2.1],
        'species': ['setosa', 'setosa', 'virginica', 'virginica', 'virginica']
    })


class TestColumnDetection:
    """Tests for column classification helpers."""

    def test_numeric_columns(self, iris_like):
        """Only numeric columns are reported."""
        assert numeric_columns(iris_like) == ['sepal', 'petal', 'width']

    def test_boolean_columns_are_not_numeric(self):
        """Boolean columns are treated as non-numeric."""
        df = pd.DataFrame({'a': [1.0, 2.0], 'flag': [True, False]})
        assert numeric_columns(df) == ['a']

    def test_degenerate_columns(self):
        """Constant and all-NaN columns are degenerate."""
        df = pd.DataFrame({
            'ok': [1.0, 2.0, 3.0],
            'const': [4.0, 4.0, 4.0],
            'empty': [np.nan, np.nan, np.nan]
        })
        assert degenerate_columns(df) == ['const', 'empty']


class TestMinMax:
    """Tests for single-vector rescaling."""

    def test_extremes(self):
        """Minimum maps to 0 and maximum to 1 exactly."""
        result = min_max(np.array([3.0, 7.0, 5.0, 0.1]))
        assert result[3] == 0.0
        assert result[1] == 1.0
        assert np.all((result >= 0) & (result <= 1))

    def test_nan_propagates(self):
        """NaN entries stay NaN and are ignored for the range."""
        result = min_max(np.array([1.0, np.nan, 3.0]))
        assert result[0] == 0.0
        assert np.isnan(result[1])
        assert result[2] == 1.0

    def test_constant_vector(self):
        """A constant vector has no range and becomes NaN."""
        result = min_max(np.array([2.0, 2.0, 2.0]))
        assert np.all(np.isnan(result))


class TestNormalize:
    """Tests for dataset normalization."""

    def test_bounds(self, iris_like):
        """Every normalized numeric value lies in [0, 1] with exact extremes."""
        result = normalize(iris_like)
        for col in ['sepal', 'petal', 'width']:
            values = result[col].to_numpy()
            assert values.min() == 0.0
            assert values.max() == 1.0
            assert np.all((values >= 0.0) & (values <= 1.0))

    def test_known_values(self):
        """Values are rescaled with the column's own range."""
        df = pd.DataFrame({'a': [10.0, 20.0, 15.0], 'b': [0.0, -4.0, -2.0]})
        result = normalize(df)
        assert np.allclose(result['a'], [0.0, 1.0, 0.5])
        assert np.allclose(result['b'], [1.0, 0.0, 0.5])

    def test_non_numeric_passthrough(self, iris_like):
        """Non-numeric columns are copied unchanged."""
        result = normalize(iris_like)
        assert list(result['species']) == list(iris_like['species'])
        assert list(result.columns) == list(iris_like.columns)

    def test_input_untouched(self, iris_like):
        """The input DataFrame is not modified."""
        original = iris_like.copy()
        normalize(iris_like)
        pd.testing.assert_frame_equal(iris_like, original)

    def test_column_subset(self, iris_like):
        """Only the requested columns are normalized."""
        result = normalize(iris_like, columns=['sepal'])
        assert result['sepal'].max() == 1.0
        assert list(result['petal']) == list(iris_like['petal'])

    def test_unknown_column(self, iris_like):
        """Asking for a missing column is an error."""
        with pytest.raises(KeyError):
            normalize(iris_like, columns=['nope'])

    def test_constant_column_is_nan(self, caplog):
        """A constant column yields NaN without raising."""
        df = pd.DataFrame({'a': [1.0, 2.0, 3.0], 'const': [5.0, 5.0, 5.0]})
        with caplog.at_level('WARNING'):
            result = normalize(df)
        assert np.all(np.isnan(result['const']))
        assert np.allclose(result['a'], [0.0, 0.5, 1.0])
        assert 'const' in caplog.text

    def test_strict_mode(self):
        """Strict mode raises on a constant column."""
        df = pd.DataFrame({'a': [1.0, 2.0], 'const': [5.0, 5.0]})
        with pytest.raises(DegenerateVariableError) as excinfo:
            normalize(df, strict=True)
        assert excinfo.value.labels == ['const']
