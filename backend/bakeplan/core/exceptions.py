"""
Domain exceptions for the production forecasting service.

Services raise these; the FastAPI layer converts them with
`to_http_exception` so routers never catch domain errors themselves.
"""
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status


class BakePlanException(Exception):
    """Base class for all domain errors."""

    code = "BAKEPLAN_ERROR"
    http_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class InvalidRequestException(BakePlanException):
    """A forecast request failed validation; nothing was computed or persisted."""

    code = "INVALID_REQUEST"
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors), details={"errors": errors})
        self.errors = errors


class InsufficientHistoryException(BakePlanException):
    """The history source returned no observations for the requested key."""

    code = "INSUFFICIENT_HISTORY"
    http_status = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, product_id: str, market_id: str, lookback_days: Optional[int] = None):
        details: Dict[str, Any] = {"product_id": product_id, "market_id": market_id}
        if lookback_days is not None:
            details["lookback_days"] = lookback_days
        super().__init__(
            f"No sales history for product '{product_id}' at market '{market_id}'; refusing to forecast.",
            details=details,
        )
        self.product_id = product_id
        self.market_id = market_id


class ForecastFailedException(BakePlanException):
    """An unexpected error while computing one forecast of a batch."""

    code = "FORECAST_FAILED"
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, product_id: str, market_id: str, error: Exception):
        super().__init__(
            f"Forecast for product '{product_id}' at market '{market_id}' failed unexpectedly.",
            details={"product_id": product_id, "market_id": market_id, "error_type": type(error).__name__},
        )


class EntityNotFoundException(BakePlanException):
    code = "NOT_FOUND"
    http_status = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, identifier: Any):
        super().__init__(f"{entity} '{identifier}' not found.", details={"entity": entity, "id": str(identifier)})


def to_http_exception(exc: BakePlanException) -> HTTPException:
    return HTTPException(status_code=exc.http_status, detail=exc.to_dict())
