"""
Weather Adjustment Strategies — Strategy Pattern

A strategy derives a multiplicative factor from the *unfiltered* history so
rare-weather days keep their signal even when the outlier filter drops them.
"""
import logging
from abc import ABC, abstractmethod
from typing import Sequence

import pandas as pd

from bakeplan.ml.contracts import SalesObservation, WeatherCondition

logger = logging.getLogger(__name__)


class BaseWeatherStrategy(ABC):

    @property
    @abstractmethod
    def strategy_id(self) -> str:
        ...

    @abstractmethod
    def factor_for(self, history: Sequence[SalesObservation], target_weather: WeatherCondition) -> float:
        ...


class RatioToMeanWeatherStrategy(BaseWeatherStrategy):
    """factor = mean(sales on matching-weather days) / mean(sales on all days)."""

    def __init__(self, min_matching_days: int = 2):
        self._min_matching_days = min_matching_days

    @property
    def strategy_id(self) -> str:
        return "ratio_to_mean"

    def _ratio(self, history: Sequence[SalesObservation], target_weather: WeatherCondition):
        """(raw ratio or None when no adjustment applies, matching day count)."""
        frame = pd.DataFrame(
            [{"weather": o.weather_condition.value, "y": float(o.quantity_sold)} for o in history],
            columns=["weather", "y"],
        )
        matching = frame.loc[frame["weather"] == target_weather.value, "y"]
        if len(matching) < max(self._min_matching_days, 1):
            logger.debug(
                "weather_factor_fallback reason=too_few_matching_days weather=%s matching=%d",
                target_weather.value, len(matching),
            )
            return None, len(matching)
        overall_mean = float(frame["y"].mean()) if len(frame) else 0.0
        if overall_mean <= 0:
            return None, len(matching)
        return float(matching.mean()) / overall_mean, len(matching)

    def factor_for(self, history: Sequence[SalesObservation], target_weather: WeatherCondition) -> float:
        ratio, _ = self._ratio(history, target_weather)
        return 1.0 if ratio is None else ratio


class ShrunkRatioWeatherStrategy(RatioToMeanWeatherStrategy):
    """Ratio-to-mean shrunk toward 1.0 by n / (n + prior_strength)."""

    def __init__(self, min_matching_days: int = 2, prior_strength: float = 5.0):
        super().__init__(min_matching_days=min_matching_days)
        if prior_strength < 0:
            raise ValueError("prior_strength must be non-negative")
        self._prior_strength = prior_strength

    @property
    def strategy_id(self) -> str:
        return "shrunk_ratio"

    def factor_for(self, history: Sequence[SalesObservation], target_weather: WeatherCondition) -> float:
        ratio, n = self._ratio(history, target_weather)
        if ratio is None:
            return 1.0
        weight = n / (n + self._prior_strength)
        return 1.0 + weight * (ratio - 1.0)


class WeatherAdjuster:
    """Applies a weather strategy to a baseline rate."""

    def __init__(self, strategy: BaseWeatherStrategy):
        self._strategy = strategy

    @property
    def strategy(self) -> BaseWeatherStrategy:
        return self._strategy

    def factor(self, history: Sequence[SalesObservation], target_weather: WeatherCondition) -> float:
        return float(self._strategy.factor_for(history, target_weather))

    def adjust(
        self,
        baseline: float,
        history: Sequence[SalesObservation],
        target_weather: WeatherCondition,
    ) -> float:
        return max(0.0, baseline * self.factor(history, target_weather))
