"""
Production Forecast Repository — append-only record store.

Writes never update or deduplicate: re-forecasting the same
(product, market, target_date) adds a row, and readers pick the newest.
"""
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from bakeplan.models.production_forecast import ProductionForecastRecord
from bakeplan.repositories.base import BaseRepository


class ProductionForecastRepository(BaseRepository[ProductionForecastRecord]):
    def __init__(self, db: Session):
        super().__init__(ProductionForecastRecord, db)

    def append(self, record: ProductionForecastRecord) -> ProductionForecastRecord:
        return self.create(record)

    def list_by_target_date(self, target_date: date) -> List[ProductionForecastRecord]:
        return (
            self.db.query(ProductionForecastRecord)
            .filter(ProductionForecastRecord.target_date == target_date)
            .order_by(
                ProductionForecastRecord.product_id.asc(),
                ProductionForecastRecord.market_id.asc(),
                ProductionForecastRecord.created_at.asc(),
                ProductionForecastRecord.id.asc(),
            )
            .all()
        )

    def get_latest(
        self,
        *,
        product_id: str,
        market_id: str,
        target_date: date,
    ) -> Optional[ProductionForecastRecord]:
        return (
            self.db.query(ProductionForecastRecord)
            .filter(
                ProductionForecastRecord.product_id == product_id,
                ProductionForecastRecord.market_id == market_id,
                ProductionForecastRecord.target_date == target_date,
            )
            .order_by(ProductionForecastRecord.created_at.desc(), ProductionForecastRecord.id.desc())
            .first()
        )
