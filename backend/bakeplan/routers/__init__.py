# Routers package — Thin Controllers (SRP / DIP)
from bakeplan.routers import production_forecasts

__all__ = [
    "production_forecasts",
]
