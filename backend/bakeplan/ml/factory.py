"""
Strategy Factory — builds baseline and weather strategies from configuration ids.
"""
from typing import Any, Dict, List, Optional, Type

from bakeplan.ml.baseline import (
    BaseBaselineStrategy,
    MeanBaselineStrategy,
    SameWeekdayBaselineStrategy,
    TimeDecayBaselineStrategy,
)
from bakeplan.ml.weather import BaseWeatherStrategy, RatioToMeanWeatherStrategy, ShrunkRatioWeatherStrategy


class StrategyFactory:
    _BASELINES: Dict[str, Type[BaseBaselineStrategy]] = {
        "mean": MeanBaselineStrategy,
        "time_decay": TimeDecayBaselineStrategy,
        "same_weekday": SameWeekdayBaselineStrategy,
    }
    _WEATHER: Dict[str, Type[BaseWeatherStrategy]] = {
        "ratio_to_mean": RatioToMeanWeatherStrategy,
        "shrunk_ratio": ShrunkRatioWeatherStrategy,
    }

    @classmethod
    def create_baseline(cls, strategy_id: str, params: Optional[Dict[str, Any]] = None) -> BaseBaselineStrategy:
        params = params or {}
        if strategy_id not in cls._BASELINES:
            raise ValueError(
                f"Unknown baseline strategy '{strategy_id}'. Available: {sorted(cls._BASELINES)}"
            )
        if strategy_id == "time_decay":
            return TimeDecayBaselineStrategy(
                decay_rate=float(params.get("decay_rate", 0.05)),
                recent_window=int(params.get("recent_window") or 0) or None,
            )
        if strategy_id == "same_weekday":
            return SameWeekdayBaselineStrategy(
                min_points=int(params.get("same_weekday_min_points", 2)),
                decay_rate=float(params.get("decay_rate", 0.05)),
            )
        return cls._BASELINES[strategy_id]()

    @classmethod
    def create_weather(cls, strategy_id: str, params: Optional[Dict[str, Any]] = None) -> BaseWeatherStrategy:
        params = params or {}
        if strategy_id not in cls._WEATHER:
            raise ValueError(
                f"Unknown weather strategy '{strategy_id}'. Available: {sorted(cls._WEATHER)}"
            )
        min_days = int(params.get("min_matching_days", 2))
        if strategy_id == "shrunk_ratio":
            return ShrunkRatioWeatherStrategy(
                min_matching_days=min_days,
                prior_strength=float(params.get("prior_strength", 5.0)),
            )
        return RatioToMeanWeatherStrategy(min_matching_days=min_days)

    @classmethod
    def list_strategies(cls) -> Dict[str, List[str]]:
        return {
            "baseline": sorted(cls._BASELINES),
            "weather": sorted(cls._WEATHER),
        }
