#!/usr/bin/env python3
"""
Unit tests for the shared statistics utilities.

Tests the functions in the compstats.statistics module.
"""

import numpy as np
import pytest
import torch

from compstats import statistics
from compstats.descriptive import Mean, Sum


class TestZeroVariance:
    """Test cases for zero_variance function."""

    def test_relative_to_mean(self):
        """Test the threshold scales with the mean."""
        assert statistics.zero_variance(1e10, 0.0)
        assert not statistics.zero_variance(1e10, 1.0)
        assert statistics.zero_variance(0.0, 0.0)
        assert not statistics.zero_variance(0.0, 1e-300)

    def test_threshold(self):
        """Test values at the threshold."""
        m1 = 1.0
        assert statistics.zero_variance(m1, 0.5e-30)
        assert not statistics.zero_variance(m1, 2e-30)

    def test_tensors(self):
        """Test the check is element-wise."""
        m1 = torch.tensor([1e10, 1e10, 0.0], dtype=torch.float64)
        m2 = torch.tensor([0.0, 1.0, 0.0], dtype=torch.float64)
        assert statistics.zero_variance(m1, m2).tolist() == [True, False, True]


class TestAdd:
    """Test cases for add function."""

    def test_returns_statistic(self, simple_data):
        """Test values are accepted in order and the statistic is returned."""
        s = Sum.create()
        assert statistics.add(s, simple_data) is s
        assert s.get_as_double() == 15.0

    def test_rows(self):
        """Test a shaped statistic accepts rows."""
        m = statistics.add(Mean.create(shape=(2,)), [[1.0, 4.0], [3.0, 8.0]])
        assert m.get().tolist() == [2.0, 6.0]


class TestCombine:
    """Test cases for combine function."""

    def test_arguments_unchanged(self):
        """Test neither argument is modified."""
        a = Sum.of([1.0, 2.0])
        b = Sum.of([10.0])
        result = statistics.combine(a, b)
        assert result.get_as_double() == 13.0
        assert a.get_as_double() == 3.0
        assert b.get_as_double() == 10.0
        assert result is not a and result is not b

    def test_empty(self):
        """Test combining with an empty statistic."""
        a = Mean.of([2.0, 4.0])
        assert statistics.combine(a, Mean.create()).get_as_double() == 3.0
        assert statistics.combine(Mean.create(), a).get_as_double() == 3.0


class TestToTensor:
    """Test cases for to_tensor function."""

    @pytest.mark.parametrize("values", [
        [1.0, 2.0],
        (1.0, 2.0),
        np.array([1.0, 2.0], dtype=np.float32),
        torch.tensor([1.0, 2.0]),
    ])
    def test_input_types(self, values):
        """Test the supported input types."""
        t = statistics.to_tensor(values)
        assert t.dtype == torch.float64
        assert t.tolist() == [1.0, 2.0]

    def test_scalar(self):
        """Test a scalar becomes one value."""
        assert statistics.to_tensor(3.5).shape == (1,)

    def test_empty(self):
        """Test an empty sequence."""
        assert statistics.to_tensor([]).shape == (0,)

    def test_dtype(self):
        """Test the requested data type."""
        assert statistics.to_tensor([1.0], dtype=torch.float32).dtype == torch.float32


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
