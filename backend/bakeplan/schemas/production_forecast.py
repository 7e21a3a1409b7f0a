from datetime import datetime, date
from typing import Optional, List

from pydantic import BaseModel, Field

from bakeplan.ml.contracts import DataConfidence, ServiceLevelSource, WeatherCondition


class ProductionForecastCreateRequest(BaseModel):
    # Range rules are enforced by the service so API and direct callers share one validator.
    product_id: str = Field(..., min_length=1, max_length=64)
    market_id: str = Field(..., min_length=1, max_length=64)
    target_date: date
    weather_forecast: WeatherCondition = WeatherCondition.SUNNY
    unit_price: float
    unit_cost: float
    service_level_target: Optional[float] = None
    confidence_level: Optional[float] = None
    product_name: Optional[str] = Field(None, max_length=200)
    market_name: Optional[str] = Field(None, max_length=200)


class ProductionForecastBatchRequest(BaseModel):
    requests: List[ProductionForecastCreateRequest] = Field(..., min_length=1, max_length=200)


class ForecastEconomicsView(BaseModel):
    expected_sales: float
    expected_waste: float
    expected_revenue: float
    expected_cost: float
    expected_profit: float


class ProductionForecastResponse(BaseModel):
    id: Optional[int] = None
    product_id: str
    product_name: Optional[str] = None
    market_id: str
    market_name: Optional[str] = None
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
    economics: ForecastEconomicsView

    data_confidence: DataConfidence
    same_weekday_points: int
    created_at: datetime

    class Config:
        from_attributes = True


class BatchItemResult(BaseModel):
    product_id: str
    market_id: str
    target_date: date
    success: bool
    forecast: Optional[ProductionForecastResponse] = None
    error: Optional[dict] = None


class ProductionForecastBatchResponse(BaseModel):
    requested: int
    succeeded: int
    failed: int
    results: List[BatchItemResult]


class DailySaleCreate(BaseModel):
    product_id: str = Field(..., min_length=1, max_length=64)
    market_id: str = Field(..., min_length=1, max_length=64)
    sale_date: date
    quantity_sold: int = Field(..., ge=0)
    weather_condition: WeatherCondition = WeatherCondition.SUNNY


class DailySaleResponse(DailySaleCreate):
    id: int
    created_at: datetime

    class Config:
        from_attributes = True


class AccuracyRecord(BaseModel):
    product_id: str
    product_name: Optional[str] = None
    market_id: str
    market_name: Optional[str] = None
    forecast_id: Optional[int] = None
    forecast_qty: int
    actual_qty: int
    diff: int
    accuracy: float
    waste_qty: int
    stockout_qty: int
    waste_cost: float
    stockout_revenue: float


class AccuracySummary(BaseModel):
    target_date: date
    forecasts_evaluated: int
    forecasts_without_actuals: int
    overall_accuracy: float
    overall_bias_pct: float
    total_forecast_qty: int
    total_actual_qty: int
    total_waste_qty: int
    total_stockout_qty: int
    total_waste_cost: float
    total_stockout_revenue: float


class AccuracyReport(BaseModel):
    summary: AccuracySummary
    records: List[AccuracyRecord]
