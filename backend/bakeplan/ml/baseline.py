"""
Baseline Estimation Strategies — Strategy Pattern

Each strategy reduces the outlier-filtered daily series (oldest first,
most recent last) to a single expected-demand rate. Strategies that need the
calendar receive the kept dates and the target date alongside the values.
"""
from abc import ABC, abstractmethod
from datetime import date
from typing import Optional, Sequence

import numpy as np

from bakeplan.core.exceptions import InsufficientHistoryException


class BaseBaselineStrategy(ABC):

    @property
    @abstractmethod
    def strategy_id(self) -> str:
        ...

    @property
    @abstractmethod
    def display_name(self) -> str:
        ...

    @abstractmethod
    def _estimate(
        self,
        values: np.ndarray,
        dates: Optional[Sequence[date]] = None,
        target_date: Optional[date] = None,
    ) -> float:
        ...

    def estimate(
        self,
        kept: Sequence[int],
        product_id: str = "",
        market_id: str = "",
        kept_dates: Optional[Sequence[date]] = None,
        target_date: Optional[date] = None,
    ) -> float:
        if len(kept) == 0:
            raise InsufficientHistoryException(product_id, market_id)
        if kept_dates is not None and len(kept_dates) != len(kept):
            raise ValueError("kept_dates must align with kept values")
        return float(self._estimate(np.asarray(kept, dtype=float), kept_dates, target_date))


class MeanBaselineStrategy(BaseBaselineStrategy):
    """Plain arithmetic mean of the kept series."""

    @property
    def strategy_id(self) -> str:
        return "mean"

    @property
    def display_name(self) -> str:
        return "Arithmetic Mean"

    def _estimate(self, values, dates=None, target_date=None) -> float:
        return float(np.mean(values))


class TimeDecayBaselineStrategy(BaseBaselineStrategy):
    """
    Exponentially time-decayed mean: w_i = exp(-decay_rate * days_ago_i).

    The last element is treated as zero days old. `recent_window`, when set,
    keeps only the most recent N points before weighting.
    """

    def __init__(self, decay_rate: float = 0.05, recent_window: Optional[int] = None):
        if decay_rate < 0:
            raise ValueError("decay_rate must be non-negative")
        self._decay_rate = decay_rate
        self._recent_window = recent_window if recent_window and recent_window > 0 else None

    @property
    def strategy_id(self) -> str:
        return "time_decay"

    @property
    def display_name(self) -> str:
        return "Time-Decay Weighted Mean"

    def _estimate(self, values, dates=None, target_date=None) -> float:
        if self._recent_window is not None:
            values = values[-self._recent_window:]
        days_ago = np.arange(len(values) - 1, -1, -1, dtype=float)
        weights = np.exp(-self._decay_rate * days_ago)
        return float(np.average(values, weights=weights))


class SameWeekdayBaselineStrategy(BaseBaselineStrategy):
    """
    Mean of the kept days that fall on the target's weekday.

    Weekly rhythm dominates market sales, so a Tuesday forecast starts from
    past Tuesdays. With fewer than `min_points` such days (or no calendar
    information) the time-decayed mean of the whole series is used instead.
    """

    def __init__(self, min_points: int = 2, decay_rate: float = 0.05):
        if min_points < 1:
            raise ValueError("min_points must be at least 1")
        self._min_points = min_points
        self._fallback = TimeDecayBaselineStrategy(decay_rate=decay_rate)

    @property
    def strategy_id(self) -> str:
        return "same_weekday"

    @property
    def display_name(self) -> str:
        return "Same-Weekday Mean"

    def _estimate(self, values, dates=None, target_date=None) -> float:
        if dates is not None and target_date is not None:
            weekday = target_date.weekday()
            mask = np.asarray([d.weekday() == weekday for d in dates], dtype=bool)
            if int(mask.sum()) >= self._min_points:
                return float(values[mask].mean())
        return self._fallback._estimate(values)
