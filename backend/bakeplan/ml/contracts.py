"""
Value objects exchanged between the forecasting pipeline stages.

Every object here is immutable: the engine builds a fresh set per call and
never mutates one after construction.
"""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Tuple


class WeatherCondition(str, Enum):
    SUNNY = "sunny"
    CLOUDY = "cloudy"
    RAIN = "rain"
    STORM = "storm"


class ServiceLevelSource(str, Enum):
    TARGET = "target"
    CRITICAL_FRACTILE = "critical_fractile"


class DataConfidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class SalesObservation:
    sale_date: date
    quantity_sold: int
    weather_condition: WeatherCondition

    def __post_init__(self) -> None:
        if self.quantity_sold < 0:
            raise ValueError("quantity_sold must be non-negative")


@dataclass(frozen=True)
class ForecastRequest:
    product_id: str
    market_id: str
    target_date: date
    weather_forecast: WeatherCondition
    unit_price: float
    unit_cost: float
    service_level_target: Optional[float] = None
    confidence_level: float = 0.80
    product_name: Optional[str] = None
    market_name: Optional[str] = None

    def validation_errors(self, today: date) -> List[str]:
        """Return every rule the request breaks; an empty list means valid."""
        errors: List[str] = []
        numbers = {
            "unit_price": self.unit_price,
            "unit_cost": self.unit_cost,
            "service_level_target": self.service_level_target,
            "confidence_level": self.confidence_level,
        }
        non_finite = [name for name, value in numbers.items() if value is not None and not math.isfinite(value)]
        if non_finite:
            # Range checks below are meaningless for NaN or infinity.
            return [f"{name} must be a finite number" for name in non_finite]
        if self.unit_price <= 0:
            errors.append("unit_price must be greater than 0")
        if self.unit_cost < 0:
            errors.append("unit_cost must be non-negative")
        if self.unit_price > 0 and self.unit_cost >= self.unit_price:
            errors.append("unit_cost must be lower than unit_price")
        if self.service_level_target is not None and not 0.0 < self.service_level_target < 1.0:
            errors.append("service_level_target must be between 0 and 1 (exclusive)")
        if not 0.0 < self.confidence_level < 1.0:
            errors.append("confidence_level must be between 0 and 1 (exclusive)")
        if self.target_date < today:
            errors.append(f"target_date {self.target_date.isoformat()} is in the past")
        return errors


@dataclass(frozen=True)
class FilterResult:
    kept: Tuple[int, ...]
    removed_count: int
    # Positions of the kept values in the input series.
    kept_indices: Tuple[int, ...] = ()


@dataclass(frozen=True)
class ForecastEconomics:
    expected_sales: float
    expected_waste: float
    expected_revenue: float
    expected_cost: float
    expected_profit: float


@dataclass(frozen=True)
class ProductionForecast:
    product_id: str
    market_id: str
    target_date: date
    weather_forecast: WeatherCondition

    historical_data_points: int
    outliers_removed: int
    baseline_forecast: float
    weather_factor: float
    weather_adjusted_forecast: float
    lambda_poisson: float

    optimal_quantity: int
    service_level_target: float
    service_level_source: ServiceLevelSource
    critical_fractile: float
    stockout_probability: float
    waste_probability: float

    expected_demand: float
    prediction_interval_lower: float
    prediction_interval_upper: float
    confidence_level: float

    unit_price: float
    unit_cost: float
    expected_profit: float
    economics: ForecastEconomics

    data_confidence: DataConfidence
    same_weekday_points: int
    created_at: datetime

    product_name: Optional[str] = None
    market_name: Optional[str] = None
    id: Optional[int] = field(default=None, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["weather_forecast"] = self.weather_forecast.value
        payload["service_level_source"] = self.service_level_source.value
        payload["data_confidence"] = self.data_confidence.value
        return payload

    def to_record_fields(self) -> Dict[str, Any]:
        """Flatten to scalar columns for the record store."""
        payload = self.to_dict()
        payload.pop("id", None)
        economics = payload.pop("economics")
        payload.update(economics)
        return payload


class HistorySource(Protocol):
    """Read-only supplier of past daily sales, oldest first."""

    def history(
        self,
        product_id: str,
        market_id: str,
        lookback_days: int,
        as_of: Optional[date] = None,
    ) -> List[SalesObservation]:
        ...
