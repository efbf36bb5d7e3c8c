#!/usr/bin/env python3
"""
Pytest configuration and fixtures for compensated statistics tests.

This file contains shared test fixtures, configuration, and utilities
used across the test suite.
"""

import math
import os
import sys
from fractions import Fraction

import numpy as np
import pytest
import torch

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))


@pytest.fixture(scope="session")
def random_seed():
    """Set random seed for reproducible tests."""
    seed = 42
    np.random.seed(seed)
    torch.manual_seed(seed)
    return seed


@pytest.fixture
def rng():
    """Seeded numpy generator."""
    return np.random.default_rng(12345)


@pytest.fixture
def simple_data():
    """Simple test data for basic functionality tests."""
    return [1.0, 2.0, 3.0, 4.0, 5.0]


@pytest.fixture
def mixed_data():
    """Mixed magnitudes and signs for merge tests."""
    np.random.seed(42)
    n = 200
    large = np.random.normal(1e6, 1e5, n // 2)
    small = np.random.normal(0, 1, n - n // 2)
    data = np.concatenate([large, small])
    np.random.shuffle(data)
    return data.tolist()


@pytest.fixture
def large_mean_small_spread():
    """Values with a large magnitude and a small spread, hard for one-pass means."""
    def generate(seed: int, size: int = 1000):
        r = np.random.RandomState(seed)
        return (1e9 + r.uniform(-1, 1, size)).tolist()
    return generate


class AccuracyChecker:
    """Utility class for checking numerical accuracy."""

    @staticmethod
    def exact_mean(values) -> float:
        """Correctly rounded mean computed with exact rational arithmetic."""
        total = sum(Fraction(float(v)) for v in values)
        return float(total / len(values))

    @staticmethod
    def exact_sum(values) -> float:
        """Correctly rounded sum."""
        return math.fsum(values)

    @staticmethod
    def relative_error(computed: float, reference: float) -> float:
        """Calculate relative error."""
        if reference == 0:
            return abs(computed)
        return abs(computed - reference) / abs(reference)

    @staticmethod
    def ulp_error(computed: float, reference: float) -> float:
        """Error in units of the last place of the reference."""
        return abs(computed - reference) / math.ulp(reference)


@pytest.fixture
def accuracy_checker():
    """Fixture providing accuracy checking utilities."""
    return AccuracyChecker()


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers automatically."""
    for item in items:
        if "large" in item.name or "stress" in item.name:
            item.add_marker(pytest.mark.slow)


def assert_relative_error(computed, reference, max_relative_error):
    """Assert that relative error is within bounds."""
    if reference == 0:
        assert abs(computed) <= max_relative_error
    else:
        relative_error = abs(computed - reference) / abs(reference)
        assert relative_error <= max_relative_error, (
            f"Relative error {relative_error} exceeds threshold {max_relative_error}\n"
            f"Computed: {computed}, Reference: {reference}"
        )
