"""
Fork-join aggregation of statistics.

Partial statistics are computed independently over disjoint partitions of
the data (each accumulator touched by exactly one worker) and merged
afterwards with ``combine``. The merge step runs in the calling thread.
"""

import logging
from concurrent.futures import Executor
from typing import Callable, List, Optional, Sequence, Union

import numpy as np
import torch

from . import statistics
from .statistics import T

logger = logging.getLogger(__name__)


def partition(values: Union[List[float], torch.Tensor, np.ndarray],
              num_partitions: int) -> List:
    """
    Split values into contiguous partitions.

    The last partition gets the remaining elements. There are never more
    partitions than values.

    Args:
        values: Sequence of values
        num_partitions: Requested number of partitions

    Returns:
        List of partitions
    """
    if num_partitions < 1:
        raise ValueError(f"Number of partitions must be positive: {num_partitions}")
    n = len(values)
    num_partitions = min(num_partitions, n)
    if num_partitions == 0:
        return []
    partition_size = n // num_partitions
    partitions = []
    for i in range(num_partitions):
        start_idx = i * partition_size
        if i == num_partitions - 1:
            end_idx = n
        else:
            end_idx = (i + 1) * partition_size
        partitions.append(values[start_idx:end_idx])
    return partitions


def tree_combine(parts: Sequence[T]) -> T:
    """
    Combine statistics pairwise in a balanced tree.

    The inputs are not modified.

    Args:
        parts: Statistics of the same type

    Returns:
        A new statistic equal to the combination of all inputs
    """
    if len(parts) == 0:
        raise ValueError("No statistics to combine")

    def tree_combine_recursive(stats):
        if len(stats) == 1:
            return stats[0].copy()
        mid = len(stats) // 2
        left = tree_combine_recursive(stats[:mid])
        right = tree_combine_recursive(stats[mid:])
        return left.combine(right)

    return tree_combine_recursive(list(parts))


def parallel_of(factory: Callable[..., T],
                values: Union[List[float], torch.Tensor, np.ndarray],
                num_partitions: int = 4,
                executor: Optional[Executor] = None) -> T:
    """
    Compute a statistic by partitioning the values and combining the partial
    results.

    Args:
        factory: Function creating a populated statistic from a partition,
            e.g. ``Mean.of``
        values: Values
        num_partitions: Number of partitions
        executor: Optional executor used to compute the partial statistics

    Returns:
        The combined statistic
    """
    values = statistics.to_tensor(values)
    partitions = partition(values, num_partitions)
    if not partitions:
        return factory(values)
    logger.debug("Computing %d partial statistics over %d values",
                 len(partitions), len(values))
    if executor is None:
        parts = [factory(p) for p in partitions]
    else:
        parts = list(executor.map(factory, partitions))
    return tree_combine(parts)
