from sqlalchemy import (
    Column,
    Integer,
    String,
    Float,
    DateTime,
    Date,
    CheckConstraint,
    Index,
    func,
)
from bakeplan.database import Base


class ProductionForecastRecord(Base):
    """Append-only forecast log; several rows per (product, market, date) are expected."""

    __tablename__ = "production_forecasts"
    __table_args__ = (
        CheckConstraint("optimal_quantity >= 0", name="ck_production_forecasts_quantity_non_negative"),
        CheckConstraint("historical_data_points >= 0", name="ck_production_forecasts_points_non_negative"),
        CheckConstraint("outliers_removed >= 0", name="ck_production_forecasts_outliers_non_negative"),
        CheckConstraint(
            "stockout_probability >= 0 AND stockout_probability <= 1",
            name="ck_production_forecasts_stockout_range",
        ),
        CheckConstraint(
            "waste_probability >= 0 AND waste_probability <= 1",
            name="ck_production_forecasts_waste_range",
        ),
        CheckConstraint(
            "prediction_interval_lower <= prediction_interval_upper",
            name="ck_production_forecasts_interval_order",
        ),
        Index("ix_production_forecasts_key_created", "product_id", "market_id", "target_date", "created_at"),
        Index("ix_production_forecasts_target_date", "target_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(String(64), nullable=False, index=True)
    product_name = Column(String(200), nullable=True)
    market_id = Column(String(64), nullable=False, index=True)
    market_name = Column(String(200), nullable=True)
    target_date = Column(Date, nullable=False)
    weather_forecast = Column(String(20), nullable=False)

    historical_data_points = Column(Integer, nullable=False)
    outliers_removed = Column(Integer, nullable=False, default=0)
    same_weekday_points = Column(Integer, nullable=False, default=0)
    data_confidence = Column(String(10), nullable=False)

    baseline_forecast = Column(Float, nullable=False)
    weather_factor = Column(Float, nullable=False, default=1.0)
    weather_adjusted_forecast = Column(Float, nullable=False)
    lambda_poisson = Column(Float, nullable=False)

    optimal_quantity = Column(Integer, nullable=False)
    service_level_target = Column(Float, nullable=False)
    service_level_source = Column(String(20), nullable=False)
    critical_fractile = Column(Float, nullable=False)
    stockout_probability = Column(Float, nullable=False)
    waste_probability = Column(Float, nullable=False)

    expected_demand = Column(Float, nullable=False)
    prediction_interval_lower = Column(Float, nullable=False)
    prediction_interval_upper = Column(Float, nullable=False)
    confidence_level = Column(Float, nullable=False)

    unit_price = Column(Float, nullable=False)
    unit_cost = Column(Float, nullable=False)
    expected_sales = Column(Float, nullable=False)
    expected_waste = Column(Float, nullable=False)
    expected_revenue = Column(Float, nullable=False)
    expected_cost = Column(Float, nullable=False)
    expected_profit = Column(Float, nullable=False)

    created_at = Column(DateTime(timezone=True), default=func.now(), nullable=False, index=True)
