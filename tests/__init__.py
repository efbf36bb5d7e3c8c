"""
Test suite for the Compensated Statistics Library.

Test Structure:
- test_extended_precision.py: Error-free transformations and sqrt2xx
- test_core.py: Compensated sum and moment accumulators
- test_descriptive.py: Sum, Mean, Variance, StandardDeviation, Skewness
- test_statistics.py: Shared statistics utilities
- test_algorithms.py: Partitioning and fork-join aggregation
- test_distribution.py: Distribution contracts and the binomial distribution
- conftest.py: Shared fixtures and configuration

Usage:
    # Run all tests
    pytest

    # Run tests with coverage
    pytest --cov=compstats

    # Run only fast tests
    pytest -m "not slow"
"""
