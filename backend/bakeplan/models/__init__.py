from bakeplan.models.daily_sale import DailySale
from bakeplan.models.production_forecast import ProductionForecastRecord

__all__ = [
    "DailySale",
    "ProductionForecastRecord",
]
