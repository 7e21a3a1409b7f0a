"""
Sales History Repository — the history source feeding the forecasting engine.
"""
from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session

from bakeplan.ml.contracts import SalesObservation, WeatherCondition
from bakeplan.models.daily_sale import DailySale
from bakeplan.repositories.base import BaseRepository


class SalesHistoryRepository(BaseRepository[DailySale]):
    def __init__(self, db: Session):
        super().__init__(DailySale, db)

    def history(
        self,
        product_id: str,
        market_id: str,
        lookback_days: int,
        as_of: Optional[date] = None,
    ) -> List[SalesObservation]:
        """Observations in [as_of - lookback_days, as_of), oldest first."""
        as_of = as_of or date.today()
        start = as_of - timedelta(days=lookback_days)
        rows = (
            self.db.query(DailySale)
            .filter(
                DailySale.product_id == product_id,
                DailySale.market_id == market_id,
                DailySale.sale_date >= start,
                DailySale.sale_date < as_of,
            )
            .order_by(DailySale.sale_date.asc(), DailySale.id.asc())
            .all()
        )
        return [
            SalesObservation(
                sale_date=row.sale_date,
                quantity_sold=int(row.quantity_sold),
                weather_condition=WeatherCondition(row.weather_condition),
            )
            for row in rows
        ]

    def actual_quantity(self, product_id: str, market_id: str, sale_date: date) -> Optional[int]:
        rows = (
            self.db.query(DailySale.quantity_sold)
            .filter(
                DailySale.product_id == product_id,
                DailySale.market_id == market_id,
                DailySale.sale_date == sale_date,
            )
            .all()
        )
        if not rows:
            return None
        return int(sum(r[0] for r in rows))
