from pydantic_settings import BaseSettings
from typing import List
from pydantic import model_validator


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./bakeplan.db"
    ENVIRONMENT: str = "development"
    AUTO_CREATE_TABLES: bool = True
    CORS_ORIGINS: str = "http://localhost:5173,http://localhost:3000"
    DEBUG: bool = True
    APP_NAME: str = "BakePlan"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"
    ENABLE_REQUEST_ID: bool = True
    ENABLE_REQUEST_LOGGING: bool = True
    READINESS_CHECK_DATABASE: bool = True

    # Production forecasting engine
    FORECAST_LOOKBACK_DAYS: int = 60
    OUTLIER_IQR_MULTIPLIER: float = 1.5
    OUTLIER_MIN_POINTS: int = 3
    BASELINE_STRATEGY: str = "mean"
    BASELINE_DECAY_RATE: float = 0.05
    BASELINE_RECENT_WINDOW: int = 0
    BASELINE_SAME_WEEKDAY_MIN_POINTS: int = 2
    WEATHER_STRATEGY: str = "ratio_to_mean"
    WEATHER_MIN_MATCHING_DAYS: int = 2
    WEATHER_PRIOR_STRENGTH: float = 5.0
    DEFAULT_CONFIDENCE_LEVEL: float = 0.80
    BATCH_MAX_WORKERS: int = 4

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",")]

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() in {"prod", "production"}

    @model_validator(mode="after")
    def validate_forecasting_ranges(self):
        if self.FORECAST_LOOKBACK_DAYS < 1:
            raise ValueError("FORECAST_LOOKBACK_DAYS must be at least 1.")
        if self.OUTLIER_MIN_POINTS < 1:
            raise ValueError("OUTLIER_MIN_POINTS must be at least 1.")
        if self.BASELINE_SAME_WEEKDAY_MIN_POINTS < 1:
            raise ValueError("BASELINE_SAME_WEEKDAY_MIN_POINTS must be at least 1.")
        if not 0.0 < self.DEFAULT_CONFIDENCE_LEVEL < 1.0:
            raise ValueError("DEFAULT_CONFIDENCE_LEVEL must be between 0 and 1 (exclusive).")
        if self.BATCH_MAX_WORKERS < 1:
            raise ValueError("BATCH_MAX_WORKERS must be at least 1.")
        return self

    @model_validator(mode="after")
    def validate_production_safety(self):
        if not self.is_production:
            return self

        if "sqlite" in self.DATABASE_URL.lower():
            raise ValueError("SQLite is not allowed when ENVIRONMENT is production.")

        if self.AUTO_CREATE_TABLES:
            raise ValueError("AUTO_CREATE_TABLES must be false in production; use Alembic migrations.")

        return self


settings = Settings()
