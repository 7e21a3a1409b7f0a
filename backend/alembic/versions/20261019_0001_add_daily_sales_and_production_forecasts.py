"""add daily sales and production forecasts tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "daily_sales",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.String(length=64), nullable=False),
        sa.Column("market_id", sa.String(length=64), nullable=False),
        sa.Column("sale_date", sa.Date(), nullable=False),
        sa.Column("quantity_sold", sa.Integer(), nullable=False),
        sa.Column("weather_condition", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("quantity_sold >= 0", name="ck_daily_sales_quantity_non_negative"),
        sa.CheckConstraint(
            "weather_condition IN ('sunny', 'cloudy', 'rain', 'storm')",
            name="ck_daily_sales_weather_condition",
        ),
    )
    op.create_index(
        "ix_daily_sales_product_market_date",
        "daily_sales",
        ["product_id", "market_id", "sale_date"],
        unique=False,
    )

    # No unique key on (product_id, market_id, target_date): every re-forecast is a new row.
    op.create_table(
        "production_forecasts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.String(length=64), nullable=False),
        sa.Column("product_name", sa.String(length=200), nullable=True),
        sa.Column("market_id", sa.String(length=64), nullable=False),
        sa.Column("market_name", sa.String(length=200), nullable=True),
        sa.Column("target_date", sa.Date(), nullable=False),
        sa.Column("weather_forecast", sa.String(length=20), nullable=False),
        sa.Column("historical_data_points", sa.Integer(), nullable=False),
        sa.Column("outliers_removed", sa.Integer(), nullable=False),
        sa.Column("same_weekday_points", sa.Integer(), nullable=False),
        sa.Column("data_confidence", sa.String(length=10), nullable=False),
        sa.Column("baseline_forecast", sa.Float(), nullable=False),
        sa.Column("weather_factor", sa.Float(), nullable=False),
        sa.Column("weather_adjusted_forecast", sa.Float(), nullable=False),
        sa.Column("lambda_poisson", sa.Float(), nullable=False),
        sa.Column("optimal_quantity", sa.Integer(), nullable=False),
        sa.Column("service_level_target", sa.Float(), nullable=False),
        sa.Column("service_level_source", sa.String(length=20), nullable=False),
        sa.Column("critical_fractile", sa.Float(), nullable=False),
        sa.Column("stockout_probability", sa.Float(), nullable=False),
        sa.Column("waste_probability", sa.Float(), nullable=False),
        sa.Column("expected_demand", sa.Float(), nullable=False),
        sa.Column("prediction_interval_lower", sa.Float(), nullable=False),
        sa.Column("prediction_interval_upper", sa.Float(), nullable=False),
        sa.Column("confidence_level", sa.Float(), nullable=False),
        sa.Column("unit_price", sa.Float(), nullable=False),
        sa.Column("unit_cost", sa.Float(), nullable=False),
        sa.Column("expected_sales", sa.Float(), nullable=False),
        sa.Column("expected_waste", sa.Float(), nullable=False),
        sa.Column("expected_revenue", sa.Float(), nullable=False),
        sa.Column("expected_cost", sa.Float(), nullable=False),
        sa.Column("expected_profit", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("optimal_quantity >= 0", name="ck_production_forecasts_quantity_non_negative"),
        sa.CheckConstraint("historical_data_points >= 0", name="ck_production_forecasts_points_non_negative"),
        sa.CheckConstraint("outliers_removed >= 0", name="ck_production_forecasts_outliers_non_negative"),
        sa.CheckConstraint(
            "stockout_probability >= 0 AND stockout_probability <= 1",
            name="ck_production_forecasts_stockout_range",
        ),
        sa.CheckConstraint(
            "waste_probability >= 0 AND waste_probability <= 1",
            name="ck_production_forecasts_waste_range",
        ),
        sa.CheckConstraint(
            "prediction_interval_lower <= prediction_interval_upper",
            name="ck_production_forecasts_interval_order",
        ),
    )
    op.create_index(
        "ix_production_forecasts_key_created",
        "production_forecasts",
        ["product_id", "market_id", "target_date", "created_at"],
        unique=False,
    )
    op.create_index("ix_production_forecasts_target_date", "production_forecasts", ["target_date"], unique=False)
    op.create_index("ix_production_forecasts_created_at", "production_forecasts", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_production_forecasts_created_at", table_name="production_forecasts")
    op.drop_index("ix_production_forecasts_target_date", table_name="production_forecasts")
    op.drop_index("ix_production_forecasts_key_created", table_name="production_forecasts")
    op.drop_table("production_forecasts")
    op.drop_index("ix_daily_sales_product_market_date", table_name="daily_sales")
    op.drop_table("daily_sales")
