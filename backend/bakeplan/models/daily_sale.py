from sqlalchemy import (
    Column,
    Integer,
    String,
    Date,
    DateTime,
    CheckConstraint,
    Index,
    func,
)
from bakeplan.database import Base


class DailySale(Base):
    __tablename__ = "daily_sales"
    __table_args__ = (
        CheckConstraint("quantity_sold >= 0", name="ck_daily_sales_quantity_non_negative"),
        CheckConstraint(
            "weather_condition IN ('sunny', 'cloudy', 'rain', 'storm')",
            name="ck_daily_sales_weather_condition",
        ),
        Index("ix_daily_sales_product_market_date", "product_id", "market_id", "sale_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(String(64), nullable=False)
    market_id = Column(String(64), nullable=False)
    sale_date = Column(Date, nullable=False)
    quantity_sold = Column(Integer, nullable=False)
    weather_condition = Column(String(20), nullable=False, default="sunny")
    created_at = Column(DateTime(timezone=True), default=func.now(), nullable=False)
