"""
Unit tests for the indicator API endpoints.
"""

import json

import pytest

from conftest import make_candles, wave
from chart_engine.schemas.indicators import IndicatorType


def candle_payload(n=60):
    return [c.model_dump() for c in make_candles(wave(n))]


@pytest.mark.fast
@pytest.mark.unit
class TestHealth:
    """Health and root endpoints"""

    def test_health(self, api_client):
        response = api_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root(self, api_client):
        response = api_client.get("/")

        assert response.status_code == 200
        assert response.json()["health"] == "/health"


@pytest.mark.fast
@pytest.mark.unit
class TestCatalog:
    """GET /api/v1/indicators/catalog"""

    def test_lists_every_type(self, api_client):
        response = api_client.get("/api/v1/indicators/catalog")

        assert response.status_code == 200
        entries = {e["type"]: e for e in response.json()}
        assert set(entries) == {t.value for t in IndicatorType}
        assert entries["RSI"]["category"] == "oscillator"
        assert entries["Ichimoku"]["category"] == "overlay"
        assert entries["MACD"]["lines"] == ["histogram", "macd_line", "signal_line"]
        assert entries["BollingerBands"]["default_parameters"] == {"period": 20, "std_dev": 2}

    def test_single_entry(self, api_client):
        response = api_client.get("/api/v1/indicators/catalog/Stochastic")

        assert response.status_code == 200
        assert response.json()["default_color"] == "#2962FF"

    def test_unknown_entry(self, api_client):
        response = api_client.get("/api/v1/indicators/catalog/Volume")

        assert response.status_code == 422


@pytest.mark.fast
@pytest.mark.unit
class TestCalculate:
    """POST /api/v1/indicators/calculate"""

    def test_sma_with_defaults(self, api_client):
        response = api_client.post(
            "/api/v1/indicators/calculate",
            json={"type": "SMA", "candles": candle_payload(60)},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["category"] == "overlay"
        assert body["parameters"] == {"period": 20}
        assert len(body["lines"]["sma"]) == 60 - 19

    def test_overrides_and_unknown_parameters(self, api_client):
        response = api_client.post(
            "/api/v1/indicators/calculate",
            json={
                "type": "RSI",
                "candles": candle_payload(60),
                "parameters": {"period": 7, "colour": 3},
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["parameters"]["period"] == 7
        assert "colour" not in body["parameters"]
        assert len(body["lines"]["rsi"]) == 60 - 7

    def test_short_history_gives_empty_lines(self, api_client):
        response = api_client.post(
            "/api/v1/indicators/calculate",
            json={"type": "MACD", "candles": candle_payload(10)},
        )

        assert response.status_code == 200
        assert all(points == [] for points in response.json()["lines"].values())

    def test_invalid_type(self, api_client):
        response = api_client.post(
            "/api/v1/indicators/calculate",
            json={"type": "Volume", "candles": candle_payload(10)},
        )

        assert response.status_code == 422

    def test_non_numeric_parameter(self, api_client):
        response = api_client.post(
            "/api/v1/indicators/calculate",
            json={"type": "SMA", "candles": candle_payload(10), "parameters": {"period": "x"}},
        )

        assert response.status_code == 422

    @pytest.mark.parametrize("period", ["1e400", "-1e400", "2.5"])
    def test_unusable_window_is_a_client_error(self, api_client, period):
        candles = json.dumps(candle_payload(30))
        body = f'{{"type": "SMA", "candles": {candles}, "parameters": {{"period": {period}}}}}'

        response = api_client.post(
            "/api/v1/indicators/calculate",
            content=body,
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert "period" in response.json()["detail"]
