from datetime import date, datetime, timedelta, timezone

import numpy as np
import pytest

from bakeplan.core.exceptions import InsufficientHistoryException
from bakeplan.ml import assembler as assembler_module
from bakeplan.ml.assembler import ForecastAssembler, ForecastEngineConfig, data_confidence_for
from bakeplan.ml.contracts import (
    DataConfidence,
    ForecastRequest,
    SalesObservation,
    ServiceLevelSource,
    WeatherCondition,
)

TARGET = date(2026, 10, 20)
CREATED = datetime(2026, 10, 19, 18, 0, tzinfo=timezone.utc)


def _request(**overrides):
    fields = dict(
        product_id="sourdough",
        market_id="harbour",
        target_date=TARGET,
        weather_forecast=WeatherCondition.SUNNY,
        unit_price=4.0,
        unit_cost=1.5,
        service_level_target=0.9,
    )
    fields.update(overrides)
    return ForecastRequest(**fields)


def _history(quantities, weathers=None):
    start = TARGET - timedelta(days=len(quantities))
    weathers = weathers or [WeatherCondition.SUNNY] * len(quantities)
    return [
        SalesObservation(sale_date=start + timedelta(days=i), quantity_sold=q, weather_condition=w)
        for i, (q, w) in enumerate(zip(quantities, weathers))
    ]


def test_spike_is_filtered_before_the_baseline():
    result = ForecastAssembler().assemble(_request(), _history([10, 12, 11, 9, 50]), created_at=CREATED)

    assert result.historical_data_points == 4
    assert result.outliers_removed == 1
    assert result.baseline_forecast == pytest.approx(10.5)
    assert result.weather_factor == pytest.approx(1.0)
    assert result.lambda_poisson == pytest.approx(10.5)
    assert result.created_at == CREATED


def test_flat_history_at_ninety_percent_produces_fourteen():
    result = ForecastAssembler().assemble(_request(), _history([10] * 14))

    assert result.lambda_poisson == pytest.approx(10.0)
    assert result.optimal_quantity == 14
    assert result.service_level_target == 0.9
    assert result.service_level_source == ServiceLevelSource.TARGET
    assert result.critical_fractile == pytest.approx(2.5 / 4.0)


def test_missing_target_falls_back_to_critical_fractile():
    result = ForecastAssembler().assemble(_request(service_level_target=None), _history([10] * 14))

    assert result.service_level_source == ServiceLevelSource.CRITICAL_FRACTILE
    assert result.service_level_target == pytest.approx(0.625)


def test_weather_factor_uses_unfiltered_history():
    weathers = [WeatherCondition.SUNNY] * 10 + [WeatherCondition.STORM] * 2
    history = _history([10] * 10 + [40, 40], weathers)

    result = ForecastAssembler().assemble(_request(weather_forecast=WeatherCondition.STORM), history)

    assert result.outliers_removed == 2
    assert result.baseline_forecast == pytest.approx(10.0)
    assert result.weather_factor == pytest.approx(40 / 15)
    assert result.lambda_poisson == pytest.approx(10.0 * 40 / 15)


def test_all_zero_history_never_produces():
    result = ForecastAssembler().assemble(_request(), _history([0] * 7))

    assert result.lambda_poisson == 0.0
    assert result.optimal_quantity == 0
    assert result.expected_profit == 0.0
    assert result.stockout_probability == 1.0
    assert result.waste_probability == 0.0
    assert (result.prediction_interval_lower, result.prediction_interval_upper) == (0.0, 0.0)


def test_history_order_does_not_matter():
    history = _history([10, 12, 11, 9, 50, 14, 8])
    assembler = ForecastAssembler()

    forward = assembler.assemble(_request(), history, created_at=CREATED)
    backward = assembler.assemble(_request(), list(reversed(history)), created_at=CREATED)

    assert forward == backward


def test_empty_history_raises():
    with pytest.raises(InsufficientHistoryException):
        ForecastAssembler().assemble(_request(), [])


@pytest.mark.parametrize("seed", range(10))
def test_forecast_invariants_hold_for_random_histories(seed):
    rng = np.random.RandomState(seed)
    n = int(rng.randint(1, 60))
    quantities = [int(q) for q in rng.poisson(rng.uniform(0, 40), size=n)]
    weathers = [list(WeatherCondition)[i] for i in rng.randint(0, 4, size=n)]
    request = _request(
        weather_forecast=list(WeatherCondition)[int(rng.randint(0, 4))],
        service_level_target=float(rng.uniform(0.05, 0.95)),
        confidence_level=float(rng.uniform(0.05, 0.99)),
    )

    result = ForecastAssembler().assemble(request, _history(quantities, weathers))

    assert result.historical_data_points + result.outliers_removed == n
    assert result.lambda_poisson >= 0.0
    assert result.optimal_quantity >= 0
    assert result.stockout_probability + result.waste_probability == pytest.approx(1.0)
    assert result.prediction_interval_lower <= result.expected_demand <= result.prediction_interval_upper
    assert result.expected_demand == result.lambda_poisson
    assert result.economics.expected_profit == result.expected_profit


def test_time_decay_configuration_is_honoured():
    config = ForecastEngineConfig(baseline_strategy="time_decay", baseline_decay_rate=0.5)
    history = _history([4, 4, 4, 4, 20, 20, 20, 20])

    result = ForecastAssembler(config).assemble(_request(), history)

    assert result.baseline_forecast > 12.0


@pytest.mark.parametrize(
    "days,expected",
    [(1, DataConfidence.LOW), (3, DataConfidence.MEDIUM), (14, DataConfidence.MEDIUM), (28, DataConfidence.HIGH)],
)
def test_data_confidence_tracks_same_weekday_history(days, expected):
    result = ForecastAssembler().assemble(_request(), _history([10] * days))

    assert result.data_confidence == expected


def test_data_confidence_thresholds():
    assert data_confidence_for(kept_points=30, same_weekday_points=4) == DataConfidence.HIGH
    assert data_confidence_for(kept_points=1, same_weekday_points=2) == DataConfidence.MEDIUM
    assert data_confidence_for(kept_points=2, same_weekday_points=0) == DataConfidence.LOW


def test_same_weekday_baseline_follows_weekly_pattern():
    # TARGET is a Tuesday; each weekday has its own level, Tuesday sells 14.
    by_weekday = {0: 10, 1: 14, 2: 9, 3: 11, 4: 12, 5: 13, 6: 8}
    start = TARGET - timedelta(days=28)
    history = [
        SalesObservation(
            sale_date=start + timedelta(days=i),
            quantity_sold=by_weekday[(start + timedelta(days=i)).weekday()],
            weather_condition=WeatherCondition.SUNNY,
        )
        for i in range(28)
    ]

    weekly = ForecastAssembler(ForecastEngineConfig(baseline_strategy="same_weekday")).assemble(_request(), history)
    flat = ForecastAssembler().assemble(_request(), history)

    assert weekly.outliers_removed == 0
    assert weekly.baseline_forecast == pytest.approx(14.0)
    assert flat.baseline_forecast == pytest.approx(11.0)
    assert weekly.optimal_quantity > flat.optimal_quantity


def test_pipeline_uses_weather_adjuster_and_profit_estimator(monkeypatch):
    monkeypatch.setattr(assembler_module.WeatherAdjuster, "adjust", lambda self, baseline, history, weather: 3.0)
    monkeypatch.setattr(
        assembler_module.ProfitEstimator,
        "expected_profit",
        lambda self, demand, price, cost, quantity: -1.0,
    )

    result = ForecastAssembler().assemble(_request(), _history([10] * 14))

    assert result.weather_adjusted_forecast == 3.0
    assert result.lambda_poisson == 3.0
    assert result.expected_profit == -1.0
