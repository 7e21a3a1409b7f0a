"""
Forecast Accuracy Service

Compares the latest forecast per (product, market) for a date with the
sales actually recorded that day.
"""
from datetime import date
from typing import Dict, List, Tuple

from sqlalchemy.orm import Session

from bakeplan.ml.contracts import ProductionForecast
from bakeplan.repositories.sales_history_repository import SalesHistoryRepository
from bakeplan.schemas.production_forecast import AccuracyRecord, AccuracyReport, AccuracySummary
from bakeplan.services.production_forecast_service import ProductionForecastService


class ForecastAccuracyService:
    def __init__(self, db: Session):
        self._forecasts = ProductionForecastService(db)
        self._sales_repo = SalesHistoryRepository(db)

    def latest_per_key(self, target_date: date) -> List[ProductionForecast]:
        latest: Dict[Tuple[str, str], ProductionForecast] = {}
        for f in self._forecasts.forecasts_by_date(target_date):
            key = (f.product_id, f.market_id)
            current = latest.get(key)
            if current is None or (f.created_at, f.id or 0) > (current.created_at, current.id or 0):
                latest[key] = f
        return sorted(latest.values(), key=lambda f: (f.product_id, f.market_id))

    def accuracy_for_date(self, target_date: date) -> AccuracyReport:
        records: List[AccuracyRecord] = []
        missing = 0
        for f in self.latest_per_key(target_date):
            actual = self._sales_repo.actual_quantity(f.product_id, f.market_id, target_date)
            if actual is None:
                missing += 1
                continue
            records.append(self._compare(f, actual))

        total_forecast = sum(r.forecast_qty for r in records)
        total_actual = sum(r.actual_qty for r in records)
        summary = AccuracySummary(
            target_date=target_date,
            forecasts_evaluated=len(records),
            forecasts_without_actuals=missing,
            overall_accuracy=round(sum(r.accuracy for r in records) / len(records), 4) if records else 0.0,
            overall_bias_pct=round((total_forecast - total_actual) / total_actual * 100.0, 4) if total_actual else 0.0,
            total_forecast_qty=total_forecast,
            total_actual_qty=total_actual,
            total_waste_qty=sum(r.waste_qty for r in records),
            total_stockout_qty=sum(r.stockout_qty for r in records),
            total_waste_cost=round(sum(r.waste_cost for r in records), 2),
            total_stockout_revenue=round(sum(r.stockout_revenue for r in records), 2),
        )
        return AccuracyReport(summary=summary, records=records)

    @staticmethod
    def _compare(forecast: ProductionForecast, actual: int) -> AccuracyRecord:
        # diff > 0: produced too much (waste); diff < 0: sold out (stockout)
        diff = forecast.optimal_quantity - actual
        waste = max(0, diff)
        stockout = max(0, -diff)
        accuracy = max(0.0, 1.0 - abs(diff) / max(actual, 1))
        return AccuracyRecord(
            product_id=forecast.product_id,
            product_name=forecast.product_name,
            market_id=forecast.market_id,
            market_name=forecast.market_name,
            forecast_id=forecast.id,
            forecast_qty=forecast.optimal_quantity,
            actual_qty=actual,
            diff=diff,
            accuracy=round(accuracy, 4),
            waste_qty=waste,
            stockout_qty=stockout,
            waste_cost=round(waste * forecast.unit_cost, 2),
            stockout_revenue=round(stockout * forecast.unit_price, 2),
        )
