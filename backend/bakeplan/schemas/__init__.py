from bakeplan.schemas.production_forecast import (
    ProductionForecastCreateRequest,
    ProductionForecastBatchRequest,
    ProductionForecastBatchResponse,
    ProductionForecastResponse,
    ForecastEconomicsView,
    BatchItemResult,
    DailySaleCreate,
    DailySaleResponse,
    AccuracyRecord,
    AccuracySummary,
    AccuracyReport,
)
