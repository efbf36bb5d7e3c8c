"""
Compensated Statistics Library

Streaming descriptive statistics over floating-point values with controlled
numerical error, and the extended precision arithmetic they are built on.

This library provides:
- Error-free transformations and an accurate sqrt(2 x^2)
- Compensated summation
- Mergeable streaming sum, mean, variance, standard deviation and skewness
- Fork-join aggregation of partial statistics
- Probability distribution contracts and the binomial distribution
"""

import logging

from .extended_precision import two_sum, two_product, sqrt2xx
from .core import CompensatedSum, FirstMoment
from .descriptive import Sum, Mean, Variance, StandardDeviation, Skewness
from .statistics import zero_variance, combine
from .algorithms import parallel_of, tree_combine, partition
from .distribution import (
    DistributionException,
    ContinuousDistribution,
    DiscreteDistribution,
)
from .binomial import BinomialDistribution

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "1.0.0"
__author__ = "Compensated Statistics Contributors"

__all__ = [
    "two_sum",
    "two_product",
    "sqrt2xx",
    "CompensatedSum",
    "FirstMoment",
    "Sum",
    "Mean",
    "Variance",
    "StandardDeviation",
    "Skewness",
    "zero_variance",
    "combine",
    "parallel_of",
    "tree_combine",
    "partition",
    "DistributionException",
    "ContinuousDistribution",
    "DiscreteDistribution",
    "BinomialDistribution",
]
