"""
Integration Tests — Production Forecast Endpoints

Covers:
- POST /api/v1/production-forecasts/sales feeding the sales history
- POST /api/v1/production-forecasts compute + append contract
- Validation and insufficient-history error envelopes
- GET by date, GET /latest, GET /accuracy, POST /batch
- Health and readiness endpoints
"""

import json
from datetime import date, timedelta

from fastapi.testclient import TestClient

BASE = "/api/v1/production-forecasts"


def _tomorrow() -> date:
    return date.today() + timedelta(days=1)


def _seed_sales(client: TestClient, product_id: str, quantities, weather="sunny") -> None:
    target = _tomorrow()
    for offset, quantity in enumerate(reversed(quantities), start=1):
        resp = client.post(
            f"{BASE}/sales",
            json={
                "product_id": product_id,
                "market_id": "harbour",
                "sale_date": (target - timedelta(days=offset)).isoformat(),
                "quantity_sold": quantity,
                "weather_condition": weather,
            },
        )
        assert resp.status_code == 201


def _payload(product_id: str, **overrides) -> dict:
    payload = {
        "product_id": product_id,
        "product_name": product_id.title(),
        "market_id": "harbour",
        "market_name": "Harbour Market",
        "target_date": _tomorrow().isoformat(),
        "weather_forecast": "sunny",
        "unit_price": 3.0,
        "unit_cost": 1.0,
        "service_level_target": 0.9,
    }
    payload.update(overrides)
    return payload


class TestProductionForecastsIntegration:
    def test_create_forecast_returns_full_contract(self, client: TestClient):
        _seed_sales(client, "baguette", [10] * 14)

        resp = client.post(BASE, json=_payload("baguette"))

        assert resp.status_code == 201
        body = resp.json()
        assert body["id"] is not None
        assert body["optimal_quantity"] == 14
        assert body["lambda_poisson"] == 10.0
        assert body["service_level_source"] == "target"
        assert body["historical_data_points"] == 14
        assert body["outliers_removed"] == 0
        assert body["data_confidence"] == "medium"
        assert body["confidence_level"] == 0.8
        assert body["product_name"] == "Baguette"
        assert abs(body["stockout_probability"] + body["waste_probability"] - 1.0) < 1e-9
        assert body["prediction_interval_lower"] <= body["expected_demand"] <= body["prediction_interval_upper"]
        assert set(body["economics"]) == {
            "expected_sales",
            "expected_waste",
            "expected_revenue",
            "expected_cost",
            "expected_profit",
        }

    def test_missing_service_level_uses_critical_fractile(self, client: TestClient):
        _seed_sales(client, "rye", [10] * 14)

        resp = client.post(BASE, json=_payload("rye", service_level_target=None))

        assert resp.status_code == 201
        assert resp.json()["service_level_source"] == "critical_fractile"
        assert abs(resp.json()["service_level_target"] - 2.0 / 3.0) < 1e-9

    def test_invalid_request_returns_error_envelope(self, client: TestClient):
        resp = client.post(BASE, json=_payload("baguette", unit_cost=3.0, confidence_level=1.2))

        assert resp.status_code == 422
        body = resp.json()
        assert body["success"] is False
        assert body["error"]["code"] == "INVALID_REQUEST"
        assert len(body["error"]["details"]["errors"]) == 2

    def test_non_finite_price_is_rejected(self, client: TestClient):
        _seed_sales(client, "baguette", [10] * 14)
        body = json.dumps(_payload("baguette", unit_cost=float("nan"), service_level_target=None))

        resp = client.post(BASE, content=body, headers={"Content-Type": "application/json"})

        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "INVALID_REQUEST"
        assert client.get(BASE, params={"target_date": _tomorrow().isoformat()}).json() == []

    def test_past_target_date_is_rejected(self, client: TestClient):
        yesterday = (date.today() - timedelta(days=1)).isoformat()

        resp = client.post(BASE, json=_payload("baguette", target_date=yesterday))

        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "INVALID_REQUEST"

    def test_no_history_returns_insufficient_history(self, client: TestClient):
        resp = client.post(BASE, json=_payload("never-baked"))

        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "INSUFFICIENT_HISTORY"
        assert client.get(BASE, params={"target_date": _tomorrow().isoformat()}).json() == []

    def test_re_forecast_appends_and_latest_returns_newest(self, client: TestClient):
        _seed_sales(client, "brioche", [10] * 14)
        first = client.post(BASE, json=_payload("brioche", service_level_target=0.5)).json()
        second = client.post(BASE, json=_payload("brioche", service_level_target=0.95)).json()

        listed = client.get(BASE, params={"target_date": _tomorrow().isoformat()})
        latest = client.get(
            f"{BASE}/latest",
            params={"product_id": "brioche", "market_id": "harbour", "target_date": _tomorrow().isoformat()},
        )

        assert listed.status_code == 200
        assert [f["id"] for f in listed.json()] == [first["id"], second["id"]]
        assert latest.status_code == 200
        assert latest.json()["id"] == second["id"]
        assert latest.json()["optimal_quantity"] == second["optimal_quantity"]

    def test_latest_for_unknown_key_is_not_found(self, client: TestClient):
        resp = client.get(
            f"{BASE}/latest",
            params={"product_id": "brioche", "market_id": "nowhere", "target_date": _tomorrow().isoformat()},
        )

        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "NOT_FOUND"

    def test_batch_reports_each_item(self, client: TestClient):
        _seed_sales(client, "spelt", [8] * 14)

        resp = client.post(
            f"{BASE}/batch",
            json={"requests": [_payload("spelt"), _payload("never-baked")]},
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["requested"] == 2
        assert body["succeeded"] == 1
        assert body["failed"] == 1
        assert body["results"][0]["forecast"]["product_id"] == "spelt"
        assert body["results"][1]["error"]["code"] == "INSUFFICIENT_HISTORY"

    def test_accuracy_for_date_with_actuals(self, client: TestClient):
        _seed_sales(client, "croissant", [10] * 14)
        forecast = client.post(BASE, json=_payload("croissant")).json()
        client.post(
            f"{BASE}/sales",
            json={
                "product_id": "croissant",
                "market_id": "harbour",
                "sale_date": _tomorrow().isoformat(),
                "quantity_sold": 12,
            },
        )

        resp = client.get(f"{BASE}/accuracy", params={"target_date": _tomorrow().isoformat()})

        assert resp.status_code == 200
        record = resp.json()["records"][0]
        assert record["forecast_id"] == forecast["id"]
        assert record["actual_qty"] == 12
        assert record["diff"] == forecast["optimal_quantity"] - 12

    def test_strategies_are_listed(self, client: TestClient):
        resp = client.get(f"{BASE}/strategies")

        assert resp.status_code == 200
        assert "time_decay" in resp.json()["baseline"]

    def test_negative_sale_quantity_is_rejected(self, client: TestClient):
        resp = client.post(
            f"{BASE}/sales",
            json={
                "product_id": "baguette",
                "market_id": "harbour",
                "sale_date": date.today().isoformat(),
                "quantity_sold": -3,
            },
        )

        assert resp.status_code == 422

    def test_health_endpoints(self, client: TestClient):
        assert client.get("/health").json()["status"] == "healthy"
        ready = client.get("/ready")
        assert ready.status_code == 200
        assert ready.headers.get("X-Request-ID")
