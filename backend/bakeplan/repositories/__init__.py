# Repository Layer — Data Access (Repository Pattern, GoF)
from bakeplan.repositories.base import BaseRepository
from bakeplan.repositories.production_forecast_repository import ProductionForecastRepository
from bakeplan.repositories.sales_history_repository import SalesHistoryRepository

__all__ = [
    "BaseRepository",
    "ProductionForecastRepository",
    "SalesHistoryRepository",
]
