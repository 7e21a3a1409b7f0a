"""
Production Forecasts Router — Thin Controller (SRP / DIP)
Delegates to ProductionForecastService; domain errors are converted by the
global exception handler.
"""
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bakeplan.core.exceptions import EntityNotFoundException
from bakeplan.database import get_db
from bakeplan.ml.contracts import ProductionForecast
from bakeplan.ml.factory import StrategyFactory
from bakeplan.schemas.production_forecast import (
    AccuracyReport,
    BatchItemResult,
    DailySaleCreate,
    DailySaleResponse,
    ProductionForecastBatchRequest,
    ProductionForecastBatchResponse,
    ProductionForecastCreateRequest,
    ProductionForecastResponse,
)
from bakeplan.services.forecast_accuracy_service import ForecastAccuracyService
from bakeplan.services.forecast_batch_service import ForecastBatchService
from bakeplan.services.production_forecast_service import ProductionForecastService, to_forecast_request

router = APIRouter(prefix="/production-forecasts", tags=["Production Forecasting"])


def get_forecast_service(db: Session = Depends(get_db)) -> ProductionForecastService:
    return ProductionForecastService(db)


def get_accuracy_service(db: Session = Depends(get_db)) -> ForecastAccuracyService:
    return ForecastAccuracyService(db)


def get_batch_service() -> ForecastBatchService:
    return ForecastBatchService()


def _to_response(forecast: ProductionForecast) -> ProductionForecastResponse:
    return ProductionForecastResponse.model_validate(forecast.to_dict())


@router.post("", response_model=ProductionForecastResponse, status_code=201)
def create_forecast(
    body: ProductionForecastCreateRequest,
    service: ProductionForecastService = Depends(get_forecast_service),
):
    """Compute tomorrow's production recommendation and append it to the forecast log."""
    return _to_response(service.forecast(to_forecast_request(body)))


@router.post("/batch", response_model=ProductionForecastBatchResponse)
def create_forecast_batch(
    body: ProductionForecastBatchRequest,
    service: ForecastBatchService = Depends(get_batch_service),
):
    outcomes = service.forecast_batch([to_forecast_request(item) for item in body.requests])
    results = [
        BatchItemResult(
            product_id=o.request.product_id,
            market_id=o.request.market_id,
            target_date=o.request.target_date,
            success=o.success,
            forecast=_to_response(o.forecast) if o.forecast else None,
            error=o.error.to_dict() if o.error else None,
        )
        for o in outcomes
    ]
    succeeded = sum(1 for r in results if r.success)
    return ProductionForecastBatchResponse(
        requested=len(results),
        succeeded=succeeded,
        failed=len(results) - succeeded,
        results=results,
    )


@router.get("", response_model=List[ProductionForecastResponse])
def list_forecasts_by_date(
    target_date: date,
    service: ProductionForecastService = Depends(get_forecast_service),
):
    """Every stored forecast for the date, re-forecasts included."""
    return [_to_response(f) for f in service.forecasts_by_date(target_date)]


@router.get("/latest", response_model=ProductionForecastResponse)
def latest_forecast(
    product_id: str,
    market_id: str,
    target_date: date,
    service: ProductionForecastService = Depends(get_forecast_service),
):
    forecast = service.latest_forecast(product_id, market_id, target_date)
    if forecast is None:
        raise EntityNotFoundException("ProductionForecast", f"{product_id}:{market_id}:{target_date}")
    return _to_response(forecast)


@router.get("/accuracy", response_model=AccuracyReport)
def forecast_accuracy(
    target_date: date = Query(...),
    service: ForecastAccuracyService = Depends(get_accuracy_service),
):
    return service.accuracy_for_date(target_date)


@router.get("/strategies")
def list_strategies():
    """Registered baseline and weather strategies."""
    return StrategyFactory.list_strategies()


@router.post("/sales", response_model=DailySaleResponse, status_code=201)
def record_sale(
    body: DailySaleCreate,
    service: ProductionForecastService = Depends(get_forecast_service),
):
    return service.record_sale(body)
