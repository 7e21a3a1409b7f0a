"""
Forecast Assembler — composes the pipeline stages into one ProductionForecast.

outliers -> baseline -> weather -> Poisson demand -> quantity / interval / profit

Pure computation: no I/O, no state kept between calls. Persisting the result
is the caller's job.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence

from bakeplan.core.exceptions import InsufficientHistoryException
from bakeplan.ml.contracts import (
    DataConfidence,
    ForecastRequest,
    ProductionForecast,
    SalesObservation,
)
from bakeplan.ml.demand import PoissonDemandModel
from bakeplan.ml.factory import StrategyFactory
from bakeplan.ml.newsvendor import (
    ProfitEstimator,
    QuantityOptimizer,
    UncertaintyEstimator,
    critical_fractile,
    resolve_service_level,
)
from bakeplan.ml.outliers import IQROutlierFilter
from bakeplan.ml.weather import WeatherAdjuster


@dataclass(frozen=True)
class ForecastEngineConfig:
    outlier_iqr_multiplier: float = 1.5
    outlier_min_points: int = 3
    baseline_strategy: str = "mean"
    baseline_decay_rate: float = 0.05
    baseline_recent_window: int = 0
    baseline_same_weekday_min_points: int = 2
    weather_strategy: str = "ratio_to_mean"
    weather_min_matching_days: int = 2
    weather_prior_strength: float = 5.0

    @classmethod
    def from_settings(cls, settings) -> "ForecastEngineConfig":
        return cls(
            outlier_iqr_multiplier=settings.OUTLIER_IQR_MULTIPLIER,
            outlier_min_points=settings.OUTLIER_MIN_POINTS,
            baseline_strategy=settings.BASELINE_STRATEGY,
            baseline_decay_rate=settings.BASELINE_DECAY_RATE,
            baseline_recent_window=settings.BASELINE_RECENT_WINDOW,
            baseline_same_weekday_min_points=settings.BASELINE_SAME_WEEKDAY_MIN_POINTS,
            weather_strategy=settings.WEATHER_STRATEGY,
            weather_min_matching_days=settings.WEATHER_MIN_MATCHING_DAYS,
            weather_prior_strength=settings.WEATHER_PRIOR_STRENGTH,
        )


def data_confidence_for(kept_points: int, same_weekday_points: int) -> DataConfidence:
    if same_weekday_points >= 4:
        return DataConfidence.HIGH
    if same_weekday_points >= 2 or kept_points >= 3:
        return DataConfidence.MEDIUM
    return DataConfidence.LOW


class ForecastAssembler:

    def __init__(self, config: Optional[ForecastEngineConfig] = None):
        self._config = config or ForecastEngineConfig()
        self._outlier_filter = IQROutlierFilter(
            multiplier=self._config.outlier_iqr_multiplier,
            min_points=self._config.outlier_min_points,
        )
        self._baseline = StrategyFactory.create_baseline(
            self._config.baseline_strategy,
            {
                "decay_rate": self._config.baseline_decay_rate,
                "recent_window": self._config.baseline_recent_window,
                "same_weekday_min_points": self._config.baseline_same_weekday_min_points,
            },
        )
        self._weather = WeatherAdjuster(
            StrategyFactory.create_weather(
                self._config.weather_strategy,
                {
                    "min_matching_days": self._config.weather_min_matching_days,
                    "prior_strength": self._config.weather_prior_strength,
                },
            )
        )
        self._optimizer = QuantityOptimizer()
        self._uncertainty = UncertaintyEstimator()
        self._profit = ProfitEstimator()

    @property
    def config(self) -> ForecastEngineConfig:
        return self._config

    def assemble(
        self,
        request: ForecastRequest,
        history: Sequence[SalesObservation],
        created_at: Optional[datetime] = None,
    ) -> ProductionForecast:
        if not history:
            raise InsufficientHistoryException(request.product_id, request.market_id)

        ordered = sorted(history, key=lambda o: o.sale_date)
        filtered = self._outlier_filter.filter([o.quantity_sold for o in ordered])

        baseline = self._baseline.estimate(
            filtered.kept,
            request.product_id,
            request.market_id,
            kept_dates=[ordered[i].sale_date for i in filtered.kept_indices],
            target_date=request.target_date,
        )
        factor = self._weather.factor(ordered, request.weather_forecast)
        adjusted = self._weather.adjust(baseline, ordered, request.weather_forecast)

        demand = PoissonDemandModel(adjusted)
        probability, source = resolve_service_level(
            request.service_level_target, request.unit_price, request.unit_cost
        )
        decision = self._optimizer.decide(demand, probability)
        lower, upper = self._uncertainty.interval(demand, request.confidence_level)
        expected_profit = self._profit.expected_profit(
            demand, request.unit_price, request.unit_cost, decision.optimal_quantity
        )
        economics = self._profit.economics(
            demand, request.unit_price, request.unit_cost, decision.optimal_quantity
        )

        target_weekday = request.target_date.weekday()
        same_weekday = sum(1 for o in ordered if o.sale_date.weekday() == target_weekday)

        return ProductionForecast(
            product_id=request.product_id,
            market_id=request.market_id,
            target_date=request.target_date,
            weather_forecast=request.weather_forecast,
            product_name=request.product_name,
            market_name=request.market_name,
            historical_data_points=len(filtered.kept),
            outliers_removed=filtered.removed_count,
            baseline_forecast=baseline,
            weather_factor=factor,
            weather_adjusted_forecast=adjusted,
            lambda_poisson=demand.lam,
            optimal_quantity=decision.optimal_quantity,
            service_level_target=probability,
            service_level_source=source,
            critical_fractile=critical_fractile(request.unit_price, request.unit_cost),
            stockout_probability=decision.stockout_probability,
            waste_probability=decision.waste_probability,
            expected_demand=demand.mean,
            prediction_interval_lower=lower,
            prediction_interval_upper=upper,
            confidence_level=request.confidence_level,
            unit_price=request.unit_price,
            unit_cost=request.unit_cost,
            expected_profit=expected_profit,
            economics=economics,
            data_confidence=data_confidence_for(len(filtered.kept), same_weekday),
            same_weekday_points=same_weekday,
            created_at=created_at or datetime.now(timezone.utc),
        )
