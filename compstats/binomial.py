"""
Binomial distribution.
"""

import logging

import numpy as np
from scipy import stats

from .distribution import DiscreteDistribution, DistributionException, check_probability

logger = logging.getLogger(__name__)


class BinomialDistribution(DiscreteDistribution):
    """
    Binomial distribution: the number of successes in ``trials`` independent
    Bernoulli trials with success probability ``p``.

    With no trials, or ``p`` equal to 0 or 1, the distribution is a point
    mass on its single support value.
    """

    def __init__(self, trials: int, p: float):
        """
        Args:
            trials: Number of trials
            p: Probability of success

        Raises:
            DistributionException: if ``trials < 0`` or ``p`` is not in [0, 1]
        """
        if trials < 0:
            raise DistributionException(DistributionException.NEGATIVE, trials)
        check_probability(p)
        self.trials = trials
        self.p = p
        self._binom = stats.binom(trials, p)
        if p == 1:
            self._point_mass = trials
        elif trials == 0 or p == 0:
            self._point_mass = 0
        else:
            self._point_mass = None
        logger.debug("Created binomial distribution: trials=%d, p=%s", trials, p)

    def get_number_of_trials(self) -> int:
        return self.trials

    def get_probability_of_success(self) -> float:
        return self.p

    def probability_mass(self, x: int) -> float:
        if self._point_mass is not None:
            return 1.0 if x == self._point_mass else 0.0
        if x < 0 or x > self.trials:
            return 0.0
        return float(self._binom.pmf(x))

    def log_probability_mass(self, x: int) -> float:
        if self._point_mass is not None or x < 0 or x > self.trials:
            return super().log_probability_mass(x)
        return float(self._binom.logpmf(x))

    def cumulative_probability(self, x: int) -> float:
        if x < self.get_support_lower_bound():
            return 0.0
        if x >= self.get_support_upper_bound():
            return 1.0
        return float(self._binom.cdf(x))

    def survival_probability(self, x: int) -> float:
        if x < self.get_support_lower_bound():
            return 1.0
        if x >= self.get_support_upper_bound():
            return 0.0
        return float(self._binom.sf(x))

    def get_mean(self) -> float:
        return self.trials * self.p

    def get_variance(self) -> float:
        return self.trials * self.p * (1 - self.p)

    def get_support_lower_bound(self) -> int:
        if self._point_mass is not None:
            return self._point_mass
        return 0

    def get_support_upper_bound(self) -> int:
        if self._point_mass is not None:
            return self._point_mass
        return self.trials

    def create_sampler(self, rng: np.random.Generator) -> 'BinomialSampler':
        return BinomialSampler(self.trials, self.p, rng)


class BinomialSampler:
    """Draws binomial deviates from a numpy generator."""

    def __init__(self, trials: int, p: float, rng: np.random.Generator):
        self.trials = trials
        self.p = p
        self.rng = rng

    def sample(self) -> int:
        return int(self.rng.binomial(self.trials, self.p))
