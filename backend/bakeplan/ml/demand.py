"""
Poisson demand model shared by every downstream pipeline stage.
"""
from math import sqrt

import numpy as np
from scipy.stats import poisson


class PoissonDemandModel:
    """D ~ Poisson(lam). lam == 0 is the degenerate "never sells" model."""

    def __init__(self, lam: float):
        if lam < 0 or not np.isfinite(lam):
            raise ValueError(f"Poisson rate must be a finite non-negative number, got {lam!r}")
        self._lam = float(lam)

    @property
    def lam(self) -> float:
        return self._lam

    @property
    def mean(self) -> float:
        return self._lam

    @property
    def truncation_bound(self) -> int:
        """Support cut-off beyond which the tail mass is negligible."""
        return int(np.ceil(self._lam + 10 * sqrt(self._lam) + 10))

    def pmf(self, k: int) -> float:
        if k < 0:
            return 0.0
        if self._lam == 0:
            return 1.0 if k == 0 else 0.0
        return float(poisson.pmf(k, self._lam))

    def cdf(self, k: int) -> float:
        if k < 0:
            return 0.0
        if self._lam == 0:
            return 1.0
        return min(1.0, float(poisson.cdf(k, self._lam)))

    def quantile(self, p: float) -> int:
        """Smallest integer k with cdf(k) >= p, searched up to the truncation bound."""
        if not 0.0 <= p <= 1.0:
            raise ValueError(f"quantile probability must be in [0, 1], got {p!r}")
        if self._lam == 0:
            return 0
        support = np.arange(0, self.truncation_bound + 1)
        cdf_values = np.minimum(poisson.cdf(support, self._lam), 1.0)
        idx = int(np.searchsorted(cdf_values, p, side="left"))
        return int(support[min(idx, len(support) - 1)])

    def truncated_expected_min(self, quantity: int) -> float:
        """E[min(D, Q)] = sum_{k<Q} k*pmf(k) + Q*(1 - cdf(Q-1))."""
        if quantity <= 0 or self._lam == 0:
            return 0.0
        upper = min(quantity, self.truncation_bound + 1)
        ks = np.arange(0, upper)
        partial = float(np.sum(ks * poisson.pmf(ks, self._lam)))
        tail = quantity * (1.0 - self.cdf(quantity - 1))
        return partial + tail

    def __repr__(self) -> str:
        return f"PoissonDemandModel(lam={self._lam:.4f})"
