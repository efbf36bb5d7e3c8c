"""
Utility functions shared by the statistics.
"""

from typing import Optional, Protocol, TypeVar, Union, List

import numpy as np
import torch

T = TypeVar('T', bound='StatisticAccumulator')


class StatisticAccumulator(Protocol):
    """
    Protocol for accumulators that consume values one at a time and can be
    merged with another accumulator of the same type.
    """

    def accept(self, value) -> None:
        ...

    def combine(self: T, other: T) -> T:
        ...

    def copy(self: T) -> T:
        ...


def add(statistic: T, values) -> T:
    """
    Add all the values to the statistic.

    Args:
        statistic: Statistic
        values: Sequence of values; for a shaped statistic, a sequence of rows

    Returns:
        The statistic
    """
    for x in values:
        statistic.accept(x)
    return statistic


def combine(first: T, second: T) -> T:
    """
    Combine two statistics without modifying either of them.

    Args:
        first: First statistic
        second: Second statistic

    Returns:
        A new statistic equal to ``first`` combined with ``second``
    """
    return first.copy().combine(second)


def zero_variance(m1, m2):
    """
    Returns ``True`` if the second central moment ``m2`` is effectively zero
    given the magnitude of the first raw moment ``m1``.

    This is the shared guard for statistics that divide by the variance
    (e.g. skewness). An absolute threshold does not account for the magnitude
    of the data; instead the average squared deviation from the mean is
    compared with the squared precision of the mean, taken as 15 decimal
    digits (1e-15 is about 4.5 eps).

    Works element-wise on tensors and arrays.

    Args:
        m1: First raw moment (mean)
        m2: Second central moment (biased variance)

    Returns:
        True if the variance is zero
    """
    return m2 <= (1e-15 * m1) ** 2


def to_tensor(values: Union[List[float], torch.Tensor, np.ndarray, float],
              dtype=torch.float64,
              device: Optional[torch.device] = None) -> torch.Tensor:
    """
    Convert input values to a tensor whose first dimension indexes the values.

    Args:
        values: Scalar, sequence, numpy array or tensor
        dtype: Data type of the result
        device: Device to place the tensor on

    Returns:
        Tensor with at least one dimension
    """
    if isinstance(values, torch.Tensor):
        values = values.to(dtype=dtype, device=device)
    elif isinstance(values, np.ndarray):
        values = torch.from_numpy(values.astype(np.float64)).to(dtype=dtype, device=device)
    else:
        values = torch.tensor(np.asarray(values, dtype=np.float64), dtype=dtype, device=device)
    return torch.atleast_1d(values)
