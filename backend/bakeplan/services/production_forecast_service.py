"""
Production Forecast Service — Service Layer (SRP / DIP)

Validates the request, pulls history, runs the pure ForecastAssembler and
only then appends the result to the record store. A failed write is logged
and the computed forecast is still returned.
"""
import dataclasses
import logging
from datetime import date, datetime, timezone
from typing import Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bakeplan.config import settings
from bakeplan.core.exceptions import InsufficientHistoryException, InvalidRequestException
from bakeplan.ml.assembler import ForecastAssembler, ForecastEngineConfig
from bakeplan.ml.contracts import (
    DataConfidence,
    ForecastEconomics,
    ForecastRequest,
    HistorySource,
    ProductionForecast,
    ServiceLevelSource,
    WeatherCondition,
)
from bakeplan.models.daily_sale import DailySale
from bakeplan.models.production_forecast import ProductionForecastRecord
from bakeplan.repositories.production_forecast_repository import ProductionForecastRepository
from bakeplan.repositories.sales_history_repository import SalesHistoryRepository
from bakeplan.schemas.production_forecast import DailySaleCreate, ProductionForecastCreateRequest

logger = logging.getLogger(__name__)


def to_forecast_request(
    body: ProductionForecastCreateRequest,
    default_confidence_level: Optional[float] = None,
) -> ForecastRequest:
    confidence = body.confidence_level
    if confidence is None:
        confidence = default_confidence_level or settings.DEFAULT_CONFIDENCE_LEVEL
    return ForecastRequest(
        product_id=body.product_id,
        market_id=body.market_id,
        target_date=body.target_date,
        weather_forecast=body.weather_forecast,
        unit_price=float(body.unit_price),
        unit_cost=float(body.unit_cost),
        service_level_target=body.service_level_target,
        confidence_level=float(confidence),
        product_name=body.product_name,
        market_name=body.market_name,
    )


def record_to_forecast(record: ProductionForecastRecord) -> ProductionForecast:
    created_at = record.created_at
    if created_at is not None and created_at.tzinfo is None:
        # SQLite drops tzinfo; rows are always written in UTC.
        created_at = created_at.replace(tzinfo=timezone.utc)
    return ProductionForecast(
        id=record.id,
        product_id=record.product_id,
        product_name=record.product_name,
        market_id=record.market_id,
        market_name=record.market_name,
        target_date=record.target_date,
        weather_forecast=WeatherCondition(record.weather_forecast),
        historical_data_points=record.historical_data_points,
        outliers_removed=record.outliers_removed,
        baseline_forecast=record.baseline_forecast,
        weather_factor=record.weather_factor,
        weather_adjusted_forecast=record.weather_adjusted_forecast,
        lambda_poisson=record.lambda_poisson,
        optimal_quantity=record.optimal_quantity,
        service_level_target=record.service_level_target,
        service_level_source=ServiceLevelSource(record.service_level_source),
        critical_fractile=record.critical_fractile,
        stockout_probability=record.stockout_probability,
        waste_probability=record.waste_probability,
        expected_demand=record.expected_demand,
        prediction_interval_lower=record.prediction_interval_lower,
        prediction_interval_upper=record.prediction_interval_upper,
        confidence_level=record.confidence_level,
        unit_price=float(record.unit_price),
        unit_cost=float(record.unit_cost),
        expected_profit=record.expected_profit,
        economics=ForecastEconomics(
            expected_sales=record.expected_sales,
            expected_waste=record.expected_waste,
            expected_revenue=record.expected_revenue,
            expected_cost=record.expected_cost,
            expected_profit=record.expected_profit,
        ),
        data_confidence=DataConfidence(record.data_confidence),
        same_weekday_points=record.same_weekday_points,
        created_at=created_at,
    )


class ProductionForecastService:

    def __init__(
        self,
        db: Session,
        history_source: Optional[HistorySource] = None,
        config: Optional[ForecastEngineConfig] = None,
        today: Optional[Callable[[], date]] = None,
        now: Optional[Callable[[], datetime]] = None,
        lookback_days: Optional[int] = None,
    ):
        self._db = db
        self._repo = ProductionForecastRepository(db)
        self._sales_repo = SalesHistoryRepository(db)
        self._history = history_source or self._sales_repo
        self._assembler = ForecastAssembler(config or ForecastEngineConfig.from_settings(settings))
        self._today = today or date.today
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._lookback_days = lookback_days or settings.FORECAST_LOOKBACK_DAYS

    def forecast(self, request: ForecastRequest) -> ProductionForecast:
        errors = request.validation_errors(self._today())
        if errors:
            logger.info(
                "forecast_rejected",
                extra={"product_id": request.product_id, "market_id": request.market_id, "errors": errors},
            )
            raise InvalidRequestException(errors)

        history = self._history.history(
            request.product_id,
            request.market_id,
            self._lookback_days,
            as_of=request.target_date,
        )
        if not history:
            logger.info(
                "forecast_insufficient_history",
                extra={"product_id": request.product_id, "market_id": request.market_id},
            )
            raise InsufficientHistoryException(request.product_id, request.market_id, self._lookback_days)

        result = self._assembler.assemble(request, history, created_at=self._now())
        logger.info(
            "forecast_computed",
            extra={
                "product_id": result.product_id,
                "market_id": result.market_id,
                "target_date": result.target_date,
                "lambda_poisson": round(result.lambda_poisson, 4),
                "optimal_quantity": result.optimal_quantity,
                "service_level_source": result.service_level_source.value,
                "outliers_removed": result.outliers_removed,
            },
        )
        return self._persist(result)

    def forecasts_by_date(self, target_date: date) -> List[ProductionForecast]:
        return [record_to_forecast(r) for r in self._repo.list_by_target_date(target_date)]

    def latest_forecast(self, product_id: str, market_id: str, target_date: date) -> Optional[ProductionForecast]:
        record = self._repo.get_latest(product_id=product_id, market_id=market_id, target_date=target_date)
        return record_to_forecast(record) if record else None

    def record_sale(self, body: DailySaleCreate) -> DailySale:
        return self._sales_repo.create(
            DailySale(
                product_id=body.product_id,
                market_id=body.market_id,
                sale_date=body.sale_date,
                quantity_sold=body.quantity_sold,
                weather_condition=body.weather_condition.value,
            )
        )

    def _persist(self, result: ProductionForecast) -> ProductionForecast:
        try:
            record = self._repo.append(ProductionForecastRecord(**result.to_record_fields()))
        except SQLAlchemyError as exc:
            self._db.rollback()
            logger.warning(
                "forecast_persist_failed",
                extra={
                    "product_id": result.product_id,
                    "market_id": result.market_id,
                    "target_date": result.target_date,
                    "error": str(exc),
                },
            )
            return result
        return dataclasses.replace(result, id=record.id)
