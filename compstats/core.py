"""
Core moment accumulators.

This module contains the compensated sum and the streaming moment classes the
public statistics are built on. All state is held in torch tensors of a fixed
shape; a scalar accumulator has shape ``()``, a shaped accumulator keeps one
independent accumulator per element with a shared count.

State tensors are rebound on update and never modified in place, so a shallow
copy of an accumulator never aliases live state.
"""

import copy
import math
from typing import Sequence, Union

import numpy as np
import torch

from . import statistics
from .extended_precision import two_sum, two_sum_low

# The mean is stored at half scale: the difference of two half-scaled finite
# values cannot overflow.
DOWNSCALE = 0.5
RESCALE = 2.0


class _TensorState:
    """Shape, dtype and device handling shared by the accumulators."""

    def __init__(self, shape=(), dtype=torch.float64, device=None):
        self.dtype = dtype
        self.device = device or torch.device('cpu')
        self.shape = torch.Size(shape)

    def _zeros(self) -> torch.Tensor:
        return torch.zeros(self.shape, dtype=self.dtype, device=self.device)

    def _as_value(self, value: Union[torch.Tensor, np.ndarray, float]) -> torch.Tensor:
        return torch.as_tensor(value, dtype=self.dtype, device=self.device)

    def copy(self):
        """Return an independent accumulator with the same state."""
        return copy.copy(self)


class CompensatedSum(_TensorState):
    """
    Compensated summation accumulator.

    Each addition computes the rounded sum and its exact round-off; the
    round-off is accumulated into the compensation term and the pair is
    renormalised so that ``total`` is always the correctly rounded value of
    ``total + compensation``. The compensation is only carried into later
    additions; it is never reported separately.

    Non-finite totals follow IEEE 754 addition: NaN is absorbing, opposite
    infinities give NaN and same-sign infinities are preserved.

    Attributes:
        total: The accumulated sum
        compensation: Round-off not representable in ``total``
    """

    def __init__(self, shape=(), dtype=torch.float64, device=None):
        super().__init__(shape, dtype, device)
        self.total = self._zeros()
        self.compensation = self._zeros()

    def add(self, value: Union['CompensatedSum', torch.Tensor, float]) -> 'CompensatedSum':
        """
        Add a value, or merge the total of another compensated sum.

        Args:
            value: Value to add, or another ``CompensatedSum``

        Returns:
            This instance
        """
        if isinstance(value, CompensatedSum):
            return self._add_sum(value)
        value = self._as_value(value)
        s = self.total + value
        low = two_sum_low(self.total, value, s)
        self._normalize(s, self.compensation + low)
        return self

    def _add_sum(self, other: 'CompensatedSum') -> 'CompensatedSum':
        s = self.total + other.total
        low = two_sum_low(self.total, other.total, s)
        c, c_low = two_sum(self.compensation, other.compensation)
        self._normalize(s, c + (c_low + low))
        return self

    def add_all(self, values: torch.Tensor) -> 'CompensatedSum':
        """
        Add each value, or each row of a shaped batch, in order.

        A scalar float64 accumulator runs the loop on Python floats; the
        result is identical to calling ``add`` on each value.

        Args:
            values: Tensor of shape ``(n, *shape)``

        Returns:
            This instance
        """
        if self.shape or self.dtype != torch.float64:
            for x in values:
                self.add(x)
            return self
        total = self.total.item()
        comp = self.compensation.item()
        for v in values.tolist():
            s = total + v
            total, comp = _normalize(s, comp + two_sum_low(total, v, s))
        self.total = self._as_value(total)
        self.compensation = self._as_value(comp)
        return self

    def _normalize(self, s: torch.Tensor, comp: torch.Tensor):
        hi, lo = two_sum(s, comp)
        finite = torch.isfinite(hi)
        # A non-finite sum discards the compensation: inf - inf is NaN
        self.total = torch.where(finite, hi, s)
        self.compensation = torch.where(finite, lo, torch.zeros_like(lo))

    def get(self) -> torch.Tensor:
        """Get the compensated sum."""
        return self.total

    def get_as_double(self) -> float:
        """Get the compensated sum of a scalar accumulator as a float."""
        return self.total.item()


def _normalize(s: float, comp: float):
    hi, lo = two_sum(s, comp)
    if math.isfinite(hi):
        return hi, lo
    return s, 0.0


class FirstMoment(_TensorState):
    """
    Streaming first moment (mean) accumulator.

    Uses the recursive update ``m = m + (x - m) / n`` on a half-scaled mean,
    which never forms a raw sum and so cannot overflow for finite input.
    The latest deviation ``dev = (x - m) / 2`` and ``n_dev = dev / n`` are kept
    for the higher moment subclasses.

    Non-finite inputs are summed separately; if the mean is not finite the
    result is that sum, so the mean of ``[inf, -inf]`` is NaN and the mean of
    ``[inf, inf]`` is infinite.
    """

    def __init__(self, shape=(), dtype=torch.float64, device=None):
        super().__init__(shape, dtype, device)
        self.n = 0
        self.m1 = self._zeros()
        self.dev = self._zeros()
        self.n_dev = self._zeros()
        self.non_finite = self._zeros()

    @classmethod
    def of(cls, values: Union[torch.Tensor, np.ndarray, Sequence[float], float],
           dtype=torch.float64, device=None) -> 'FirstMoment':
        """
        Create a moment from a batch of values using a corrected two-pass
        algorithm.

        The first pass is the one-pass recursive update; the second adds the
        mean deviation of the values from that provisional mean. The result
        is more accurate than calling ``accept`` on each value and may differ
        from it in the last bits.

        Args:
            values: Values; a shaped batch has shape ``(n, *shape)``
            dtype: Data type for the moment
            device: Device to place the moment on

        Returns:
            The moment
        """
        values = statistics.to_tensor(values, dtype, device)
        moment = cls(values.shape[1:], values.dtype, values.device)
        if len(values) == 0:
            return moment
        moment._first_pass(values)
        moment._correct(values)
        return moment

    def _first_pass(self, values: torch.Tensor):
        """Apply the recursive mean update to each value."""
        if self.shape or self.dtype != torch.float64:
            for x in values:
                FirstMoment.accept(self, x)
            return
        # Same operations on Python floats for a scalar moment
        n = self.n
        m = self.m1.item()
        dev = self.dev.item()
        n_dev = self.n_dev.item()
        non_finite = self.non_finite.item()
        for x in values.tolist():
            n += 1
            if not math.isfinite(x):
                non_finite += x
            dev = x * DOWNSCALE - m
            n_dev = dev / n
            m += n_dev
        self.n = n
        self.m1 = self._as_value(m)
        self.dev = self._as_value(dev)
        self.n_dev = self._as_value(n_dev)
        self.non_finite = self._as_value(non_finite)

    def _correct(self, values: torch.Tensor):
        """Apply the second pass correction to the provisional mean."""
        correction = (values * DOWNSCALE - self.m1).sum(dim=0)
        self.m1 = torch.where(torch.isfinite(correction),
                              self.m1 + correction / self.n, self.m1)

    def accept(self, value: Union[torch.Tensor, float]):
        """
        Update the moment with a value.

        Args:
            value: Value to add
        """
        value = self._as_value(value)
        self.n += 1
        self.non_finite = self.non_finite + torch.where(
            torch.isfinite(value), torch.zeros_like(value), value)
        self.dev = value * DOWNSCALE - self.m1
        self.n_dev = self.dev / self.n
        self.m1 = self.m1 + self.n_dev

    def get_first_moment(self) -> torch.Tensor:
        """Get the mean; NaN when no values have been added."""
        if self.n == 0:
            return torch.full_like(self.m1, math.nan)
        m = self.m1 * RESCALE
        return torch.where(torch.isfinite(m), m, self.non_finite)

    def combine(self, other: 'FirstMoment') -> 'FirstMoment':
        """
        Combine with another moment of the same type.

        The other moment is only read. If either side is empty the result is
        the other side unchanged.

        Args:
            other: Moment to merge

        Returns:
            This instance
        """
        n1 = self.n
        n2 = other.n
        if n2 == 0:
            return self
        if n1 == 0:
            self.__dict__.update(other.__dict__)
            return self
        self.non_finite = self.non_finite + other.non_finite
        self.n = n1 + n2
        if n1 == n2:
            self.m1 = (self.m1 + other.m1) * 0.5
        else:
            self.m1 = combine_means(self.m1, other.m1, n1, n2)
        return self


def combine_means(m1, m2, n1: int, n2: int):
    """
    Combine two means weighted by their counts.

    The difference is scaled by the weight of the smaller side, so the
    weighted sum ``m1 * n1 + m2 * n2`` is never formed.
    """
    n = n1 + n2
    if n2 < n1:
        return m1 + (m2 - m1) * (n2 / n)
    return m2 + (m1 - m2) * (n1 / n)


class SumOfSquaredDeviations(FirstMoment):
    """
    Streaming sum of squared deviations from the mean (Welford's algorithm).

    Combination uses the pairwise update of Chan, Golub and LeVeque.
    """

    def __init__(self, shape=(), dtype=torch.float64, device=None):
        super().__init__(shape, dtype, device)
        self.sum_sq_dev = self._zeros()

    def _correct(self, values: torch.Tensor):
        # Corrected two-pass: sum(d^2) - sum(d)^2 / n about the provisional mean
        d = values * DOWNSCALE - self.m1
        s = d.sum(dim=0)
        self.sum_sq_dev = ((d * d).sum(dim=0) - s * s / self.n) * 4
        super()._correct(values)

    def accept(self, value: Union[torch.Tensor, float]):
        super().accept(value)
        # (x - m_old)(x - m_new) in half-scaled terms
        self.sum_sq_dev = self.sum_sq_dev + (self.n - 1) * self.dev * self.n_dev * 4

    def get_sum_of_squared_deviations(self) -> torch.Tensor:
        return self.sum_sq_dev

    def combine(self, other: 'SumOfSquaredDeviations') -> 'SumOfSquaredDeviations':
        n1 = self.n
        n2 = other.n
        if n1 and n2:
            d = (other.m1 - self.m1) * RESCALE
            self.sum_sq_dev = (self.sum_sq_dev + other.sum_sq_dev
                               + d * d * (n1 * n2 / (n1 + n2)))
        return super().combine(other)


class SumOfCubedDeviations(SumOfSquaredDeviations):
    """Streaming sum of cubed deviations from the mean."""

    def __init__(self, shape=(), dtype=torch.float64, device=None):
        super().__init__(shape, dtype, device)
        self.sum_cubed_dev = self._zeros()

    def _correct(self, values: torch.Tensor):
        super()._correct(values)
        d = values - self.m1 * RESCALE
        self.sum_cubed_dev = (d * d * d).sum(dim=0)

    def accept(self, value: Union[torch.Tensor, float]):
        m2 = self.sum_sq_dev
        super().accept(value)
        n = self.n
        # delta = 2 dev, delta / n = 2 n_dev
        self.sum_cubed_dev = (self.sum_cubed_dev
                              + (n - 1) * (n - 2) * self.dev * self.n_dev * self.n_dev * 8
                              - 6 * self.n_dev * m2)

    def get_sum_of_cubed_deviations(self) -> torch.Tensor:
        return self.sum_cubed_dev

    def combine(self, other: 'SumOfCubedDeviations') -> 'SumOfCubedDeviations':
        n1 = self.n
        n2 = other.n
        if n1 and n2:
            n = n1 + n2
            d = (other.m1 - self.m1) * RESCALE
            self.sum_cubed_dev = (self.sum_cubed_dev + other.sum_cubed_dev
                                  + d * d * d * (n1 * n2 * (n1 - n2) / (n * n))
                                  + 3 * d * (n1 * other.sum_sq_dev - n2 * self.sum_sq_dev) / n)
        return super().combine(other)
