"""
Structured logging for the forecasting service.

Every line is a JSON object stamped with the service name and environment so
forecast events from several deployments can share one log sink. Fields passed
through `extra=` (product_id, target_date, optimal_quantity, ...) become
top-level keys; dates are written in ISO format.
"""
import json
import logging
import logging.config
from datetime import date, datetime, timezone
from typing import Optional


class JsonFormatter(logging.Formatter):
    RESERVED = {
        "name", "msg", "args", "levelname", "levelno", "pathname", "filename",
        "module", "exc_info", "exc_text", "stack_info", "lineno", "funcName",
        "created", "msecs", "relativeCreated", "thread", "threadName", "processName",
        "process", "message", "asctime", "taskName",
    }

    def __init__(self, service: str = "bakeplan", environment: Optional[str] = None):
        super().__init__()
        self.service = service
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "service": self.service,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        if self.environment:
            payload["environment"] = self.environment

        for key, value in record.__dict__.items():
            if key not in self.RESERVED and not key.startswith("_"):
                payload[key] = value.isoformat() if isinstance(value, (date, datetime)) else value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def configure_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    service: str = "bakeplan",
    environment: Optional[str] = None,
) -> None:
    level = log_level.upper()
    formatter_name = "json" if log_format.lower() == "json" else "standard"

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {
                    "format": "%(asctime)s %(levelname)s [%(threadName)s] %(name)s %(message)s",
                },
                "json": {
                    "()": "bakeplan.utils.logging.JsonFormatter",
                    "service": service,
                    "environment": environment,
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": formatter_name,
                    "level": level,
                }
            },
            "loggers": {
                "bakeplan": {"level": level},
                # Batch workers log per item; keep SQL echo out of the forecast stream.
                "sqlalchemy.engine": {"level": "WARNING"},
            },
            "root": {
                "handlers": ["default"],
                "level": level,
            },
        }
    )
