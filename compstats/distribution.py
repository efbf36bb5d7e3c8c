"""
Probability distribution contracts.

Base classes for distributions on the reals and on the integers. Concrete
distributions implement the distribution functions and moments; the base
classes provide the derived functions (interval probability, survival
function, inverse survival function) and inversion sampling.

Random numbers are taken from an injected ``numpy.random.Generator``.
"""

import math
from abc import ABC, abstractmethod
from typing import Protocol

import numpy as np


class DistributionException(ValueError):
    """
    Invalid argument to a distribution function or constructor.

    Attributes:
        values: The offending values
    """

    INVALID_RANGE_LOW_GT_HIGH = "Lower bound {} > upper bound {}"
    INVALID_PROBABILITY = "Not a probability: {} is out of range [0, 1]"
    NEGATIVE = "Number {} is negative"

    def __init__(self, message: str, *values):
        super().__init__(message.format(*values))
        self.values = values


def check_probability(p: float):
    """Raise ``DistributionException`` if ``p`` is not in [0, 1]."""
    if not 0 <= p <= 1:
        raise DistributionException(DistributionException.INVALID_PROBABILITY, p)


class Sampler(Protocol):
    """Sampling functionality."""

    def sample(self):
        """Generate a random value sampled from the distribution."""
        ...


class InversionSampler:
    """Sampler using the inverse cumulative probability of a uniform deviate."""

    def __init__(self, distribution, rng: np.random.Generator):
        self.distribution = distribution
        self.rng = rng

    def sample(self):
        return self.distribution.inverse_cumulative_probability(self.rng.random())


class ContinuousDistribution(ABC):
    """Base class for distributions on the reals."""

    @abstractmethod
    def density(self, x: float) -> float:
        """
        Probability density function (PDF) evaluated at ``x``.

        Where the derivative of the CDF does not exist a replacement is
        returned, e.g. infinity, NaN or a one-sided limit.
        """

    def probability(self, x0: float, x1: float) -> float:
        """
        Returns ``P(x0 < X <= x1)``, computed as ``P(X <= x1) - P(X <= x0)``.

        Args:
            x0: Lower bound (exclusive)
            x1: Upper bound (inclusive)

        Returns:
            Probability of the interval

        Raises:
            DistributionException: if ``x0 > x1``
        """
        if x0 > x1:
            raise DistributionException(DistributionException.INVALID_RANGE_LOW_GT_HIGH, x0, x1)
        return self.cumulative_probability(x1) - self.cumulative_probability(x0)

    def log_density(self, x: float) -> float:
        """Natural logarithm of the PDF evaluated at ``x``."""
        d = self.density(x)
        return math.log(d) if d > 0 else -math.inf

    @abstractmethod
    def cumulative_probability(self, x: float) -> float:
        """Returns ``P(X <= x)``."""

    def survival_probability(self, x: float) -> float:
        """Returns ``P(X > x)``; by default ``1 - P(X <= x)``."""
        return 1.0 - self.cumulative_probability(x)

    @abstractmethod
    def inverse_cumulative_probability(self, p: float) -> float:
        """
        Quantile function: ``inf{x | P(X <= x) >= p}`` for ``0 < p <= 1``
        and ``inf{x | P(X <= x) > 0}`` for ``p = 0``.

        Raises:
            DistributionException: if ``p`` is not in [0, 1]
        """

    def inverse_survival_probability(self, p: float) -> float:
        """
        Inverse survival function; by default the ``1 - p`` quantile.

        Raises:
            DistributionException: if ``p`` is not in [0, 1]
        """
        check_probability(p)
        return self.inverse_cumulative_probability(1 - p)

    @abstractmethod
    def get_mean(self) -> float:
        """Mean, or NaN if it is not defined."""

    @abstractmethod
    def get_variance(self) -> float:
        """Variance, or NaN if it is not defined."""

    @abstractmethod
    def get_support_lower_bound(self) -> float:
        """Lower bound of the support, equal to ``inverse_cumulative_probability(0)``."""

    @abstractmethod
    def get_support_upper_bound(self) -> float:
        """Upper bound of the support, equal to ``inverse_cumulative_probability(1)``."""

    def create_sampler(self, rng: np.random.Generator) -> Sampler:
        """Create a sampler drawing uniform deviates from ``rng``."""
        return InversionSampler(self, rng)


class DiscreteDistribution(ABC):
    """Base class for distributions on the integers."""

    @abstractmethod
    def probability_mass(self, x: int) -> float:
        """Probability mass function, ``P(X = x)``."""

    def probability(self, x0: int, x1: int) -> float:
        """
        Returns ``P(x0 < X <= x1)``.

        Raises:
            DistributionException: if ``x0 > x1``
        """
        if x0 > x1:
            raise DistributionException(DistributionException.INVALID_RANGE_LOW_GT_HIGH, x0, x1)
        return self.cumulative_probability(x1) - self.cumulative_probability(x0)

    def log_probability_mass(self, x: int) -> float:
        """Natural logarithm of the probability mass function."""
        p = self.probability_mass(x)
        return math.log(p) if p > 0 else -math.inf

    @abstractmethod
    def cumulative_probability(self, x: int) -> float:
        """Returns ``P(X <= x)``."""

    def survival_probability(self, x: int) -> float:
        """Returns ``P(X > x)``; by default ``1 - P(X <= x)``."""
        return 1.0 - self.cumulative_probability(x)

    def inverse_cumulative_probability(self, p: float) -> int:
        """
        Smallest ``x`` such that ``P(X <= x) >= p``; the support lower bound
        for ``p = 0`` and the upper bound for ``p = 1``.

        The search bracket is narrowed with the one-sided Chebyshev
        inequality using the mean and variance, then bisected.

        Raises:
            DistributionException: if ``p`` is not in [0, 1]
        """
        check_probability(p)
        lower = self.get_support_lower_bound()
        if p == 0:
            return lower
        upper = self.get_support_upper_bound()
        if p == 1 or lower == upper:
            return upper
        # Invariant: cdf(lower) < p <= cdf(upper)
        lower -= 1
        support_lower = lower
        support_upper = upper

        mu = self.get_mean()
        sigma = math.sqrt(self.get_variance())
        if math.isfinite(mu) and math.isfinite(sigma) and sigma != 0:
            k = math.sqrt((1.0 - p) / p)
            tmp = mu - k * sigma
            if tmp > lower:
                lower = math.ceil(tmp) - 1
                # The bound is not strict when p equals a cdf value
                if self.cumulative_probability(lower) >= p:
                    lower = support_lower
            k = 1.0 / k
            tmp = mu + k * sigma
            if tmp < upper:
                upper = math.ceil(tmp) - 1
                if self.cumulative_probability(upper) < p:
                    upper = support_upper
        return self._solve_inverse_cumulative_probability(p, lower, upper)

    def _solve_inverse_cumulative_probability(self, p: float, lower: int, upper: int) -> int:
        while lower + 1 < upper:
            xm = (lower + upper) // 2
            if self.cumulative_probability(xm) >= p:
                upper = xm
            else:
                lower = xm
        return upper

    def inverse_survival_probability(self, p: float) -> int:
        """
        Inverse survival function; by default the ``1 - p`` quantile.

        Raises:
            DistributionException: if ``p`` is not in [0, 1]
        """
        check_probability(p)
        return self.inverse_cumulative_probability(1 - p)

    @abstractmethod
    def get_mean(self) -> float:
        """Mean, or NaN if it is not defined."""

    @abstractmethod
    def get_variance(self) -> float:
        """Variance, or NaN if it is not defined."""

    @abstractmethod
    def get_support_lower_bound(self) -> int:
        """Lower bound of the support, equal to ``inverse_cumulative_probability(0)``."""

    @abstractmethod
    def get_support_upper_bound(self) -> int:
        """Upper bound of the support, equal to ``inverse_cumulative_probability(1)``."""

    def create_sampler(self, rng: np.random.Generator) -> Sampler:
        """Create a sampler drawing uniform deviates from ``rng``."""
        return InversionSampler(self, rng)
