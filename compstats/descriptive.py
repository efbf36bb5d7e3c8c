"""
Descriptive statistics.

Each statistic consumes values one at a time with ``accept``, or in bulk with
``of``, and can be merged with a statistic of the same type using ``combine``.

Instances are not synchronized. If an instance is shared between threads and
any thread calls ``accept`` or ``combine``, access must be synchronized
externally. The supported parallel pattern is to feed one instance per data
partition and merge the partial results afterwards; see
:func:`compstats.algorithms.parallel_of`.
"""

import math
from abc import ABC, abstractmethod
from typing import List, Optional, Union

import numpy as np
import torch

from . import statistics
from .core import (
    CompensatedSum,
    FirstMoment,
    SumOfCubedDeviations,
    SumOfSquaredDeviations,
)

Values = Union[List[float], torch.Tensor, np.ndarray]


class DoubleStatistic(ABC):
    """Base class exposing the statistic value as a tensor or a float."""

    @abstractmethod
    def get(self) -> torch.Tensor:
        """Get the value of the statistic."""

    def get_as_double(self) -> float:
        """Get the value of a scalar statistic as a float."""
        return self.get().item()

    def __repr__(self):
        return f"{type(self).__name__}({self.get().tolist()})"


class Sum(DoubleStatistic):
    """
    Sum of the available values.

    - The result is zero if no values are added.
    - The result is NaN if any of the values is NaN, or the values include
      infinite values of opposite sign.

    Uses compensated summation; see :class:`compstats.core.CompensatedSum`.
    """

    def __init__(self, delegate: CompensatedSum):
        self._delegate = delegate

    @classmethod
    def create(cls, shape=(), dtype=torch.float64, device=None) -> 'Sum':
        """Create an empty instance. The initial result is zero."""
        return cls(CompensatedSum(shape, dtype, device))

    @classmethod
    def of(cls, values: Values, dtype=torch.float64,
           device: Optional[torch.device] = None) -> 'Sum':
        """
        Create an instance populated with the values, added in order.

        Args:
            values: Values to sum
            dtype: Data type for the accumulator
            device: Device to place the accumulator on

        Returns:
            ``Sum`` instance
        """
        values = statistics.to_tensor(values, dtype, device)
        return cls(CompensatedSum(values.shape[1:], dtype, values.device).add_all(values))

    def accept(self, value: Union[torch.Tensor, float]):
        self._delegate.add(value)

    def get(self) -> torch.Tensor:
        return self._delegate.get()

    def combine(self, other: 'Sum') -> 'Sum':
        self._delegate.add(other._delegate)
        return self

    def copy(self) -> 'Sum':
        return Sum(self._delegate.copy())


class Mean(DoubleStatistic):
    """
    Arithmetic mean of the available values.

    - The result is NaN if no values are added.
    - The result is NaN if any of the values is NaN, or the values include
      infinite values of opposite sign.
    - The result is +/-infinity if the values include infinite values of the
      same sign.
    - The result is finite if all input values are finite.

    ``accept`` uses the recursive update ``m = m + (x - m) / n``. ``of`` uses
    a two-pass corrected algorithm, starting with the recursive update and
    then adding the mean deviation of the values from the one-pass mean
    (Ling, 1974). The two can differ in the last bits; ``of`` is the more
    accurate.
    """

    def __init__(self, moment: FirstMoment):
        self._moment = moment

    @classmethod
    def create(cls, shape=(), dtype=torch.float64, device=None) -> 'Mean':
        """Create an empty instance. The initial result is NaN."""
        return cls(FirstMoment(shape, dtype, device))

    @classmethod
    def of(cls, values: Values, dtype=torch.float64,
           device: Optional[torch.device] = None) -> 'Mean':
        """
        Create an instance with the mean of the values, or NaN if there are
        none.

        Args:
            values: Values
            dtype: Data type for the accumulator
            device: Device to place the accumulator on

        Returns:
            ``Mean`` instance
        """
        return cls(FirstMoment.of(values, dtype, device))

    def accept(self, value: Union[torch.Tensor, float]):
        self._moment.accept(value)

    def get(self) -> torch.Tensor:
        return self._moment.get_first_moment()

    def combine(self, other: 'Mean') -> 'Mean':
        self._moment.combine(other._moment)
        return self

    def copy(self) -> 'Mean':
        return Mean(self._moment.copy())


class Variance(DoubleStatistic):
    """
    Variance of the available values.

    - The result is NaN if no values are added.
    - The result is NaN if any of the values is NaN or infinite.
    - The result is zero if there is one value.

    By default the unbiased estimator ``sum((x - m)^2) / (n - 1)`` is
    computed; with ``biased=True`` the population variance
    ``sum((x - m)^2) / n``.
    """

    def __init__(self, moment: SumOfSquaredDeviations, biased: bool = False):
        self._moment = moment
        self.biased = biased

    @classmethod
    def create(cls, shape=(), dtype=torch.float64, device=None,
               biased: bool = False) -> 'Variance':
        return cls(SumOfSquaredDeviations(shape, dtype, device), biased)

    @classmethod
    def of(cls, values: Values, dtype=torch.float64,
           device: Optional[torch.device] = None, biased: bool = False) -> 'Variance':
        """Create an instance using the corrected two-pass algorithm."""
        return cls(SumOfSquaredDeviations.of(values, dtype, device), biased)

    def accept(self, value: Union[torch.Tensor, float]):
        self._moment.accept(value)

    def get(self) -> torch.Tensor:
        return _variance(self._moment, self.biased)

    def combine(self, other: 'Variance') -> 'Variance':
        self._moment.combine(other._moment)
        return self

    def copy(self) -> 'Variance':
        return Variance(self._moment.copy(), self.biased)


class StandardDeviation(Variance):
    """Standard deviation of the available values; the square root of the variance."""

    def get(self) -> torch.Tensor:
        return torch.sqrt(super().get())

    def copy(self) -> 'StandardDeviation':
        return StandardDeviation(self._moment.copy(), self.biased)


class Skewness(DoubleStatistic):
    """
    Skewness of the available values.

    - The result is NaN if no values are added, or if any of the values is
      NaN or infinite.
    - The unbiased result is NaN if fewer than three values are added.
    - The result is zero if the variance is effectively zero relative to the
      magnitude of the mean.

    The biased estimator is ``g1 = m3 / m2^1.5`` with ``mk`` the k-th central
    moment; the default unbiased (adjusted Fisher-Pearson) estimator is
    ``g1 * sqrt(n (n - 1)) / (n - 2)``.
    """

    def __init__(self, moment: SumOfCubedDeviations, biased: bool = False):
        self._moment = moment
        self.biased = biased

    @classmethod
    def create(cls, shape=(), dtype=torch.float64, device=None,
               biased: bool = False) -> 'Skewness':
        return cls(SumOfCubedDeviations(shape, dtype, device), biased)

    @classmethod
    def of(cls, values: Values, dtype=torch.float64,
           device: Optional[torch.device] = None, biased: bool = False) -> 'Skewness':
        return cls(SumOfCubedDeviations.of(values, dtype, device), biased)

    def accept(self, value: Union[torch.Tensor, float]):
        self._moment.accept(value)

    def get(self) -> torch.Tensor:
        moment = self._moment
        n = moment.n
        m1 = moment.get_first_moment()
        if n == 0 or (n < 3 and not self.biased):
            return torch.full_like(m1, math.nan)
        m2 = moment.get_sum_of_squared_deviations() / n
        m3 = moment.get_sum_of_cubed_deviations() / n
        g1 = m3 / m2.pow(1.5)
        if not self.biased:
            g1 = g1 * (math.sqrt(n * (n - 1.0)) / (n - 2))
        g1 = torch.where(statistics.zero_variance(m1, m2), torch.zeros_like(g1), g1)
        return torch.where(torch.isfinite(m1), g1, torch.full_like(g1, math.nan))

    def combine(self, other: 'Skewness') -> 'Skewness':
        self._moment.combine(other._moment)
        return self

    def copy(self) -> 'Skewness':
        return Skewness(self._moment.copy(), self.biased)


def _variance(moment: SumOfSquaredDeviations, biased: bool) -> torch.Tensor:
    n = moment.n
    m1 = moment.get_first_moment()
    if n == 0:
        return torch.full_like(m1, math.nan)
    if n == 1:
        v = torch.zeros_like(m1)
    else:
        v = moment.get_sum_of_squared_deviations() / (n if biased else n - 1)
    return torch.where(torch.isfinite(m1), v, torch.full_like(v, math.nan))
