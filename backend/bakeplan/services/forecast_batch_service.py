"""
Forecast Batch Service

Runs independent forecast requests on a thread pool. Each worker opens its
own session; the engine shares no mutable state, so requests for any key
(even the same one) can run side by side.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
import logging
from typing import Callable, List, Optional, Sequence

from sqlalchemy.orm import Session

from bakeplan.config import settings
from bakeplan.core.exceptions import BakePlanException, ForecastFailedException
from bakeplan.database import SessionLocal
from bakeplan.ml.contracts import ForecastRequest, ProductionForecast
from bakeplan.services.production_forecast_service import ProductionForecastService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchOutcome:
    request: ForecastRequest
    forecast: Optional[ProductionForecast] = None
    error: Optional[BakePlanException] = None

    @property
    def success(self) -> bool:
        return self.forecast is not None


class ForecastBatchService:
    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        max_workers: Optional[int] = None,
        service_factory: Optional[Callable[[Session], ProductionForecastService]] = None,
    ):
        self._session_factory = session_factory
        self._max_workers = max_workers or settings.BATCH_MAX_WORKERS
        self._service_factory = service_factory or ProductionForecastService

    def forecast_batch(self, requests: Sequence[ForecastRequest]) -> List[BatchOutcome]:
        if not requests:
            return []
        workers = min(self._max_workers, len(requests))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="forecast-worker") as executor:
            outcomes = list(executor.map(self._run_one, requests))

        failed = sum(1 for o in outcomes if not o.success)
        logger.info(
            "forecast_batch_completed",
            extra={"requested": len(outcomes), "succeeded": len(outcomes) - failed, "failed": failed},
        )
        return outcomes

    def _run_one(self, request: ForecastRequest) -> BatchOutcome:
        db = self._session_factory()
        try:
            forecast = self._service_factory(db).forecast(request)
            return BatchOutcome(request=request, forecast=forecast)
        except BakePlanException as exc:
            return BatchOutcome(request=request, error=exc)
        except Exception as exc:
            logger.exception(
                "forecast_batch_item_failed",
                extra={"product_id": request.product_id, "market_id": request.market_id},
            )
            return BatchOutcome(
                request=request,
                error=ForecastFailedException(request.product_id, request.market_id, exc),
            )
        finally:
            db.close()
