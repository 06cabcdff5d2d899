"""Tests for the FastAPI routes (service and scanner overridden)."""

import pytest
from fastapi.testclient import TestClient

from clickcoin.api.app import app
from clickcoin.api.dependencies import get_coin_scanner, get_structure_service
from clickcoin.core.structure import StructureConfig
from clickcoin.repositories.base import CandleRepository, OHLCVData
from clickcoin.screener.coin_scanner import CoinScanner
from clickcoin.services.structure_service import StructureService

from conftest import BEARISH_MSB_MIDS, candles_from_mids


class FakeRepository(CandleRepository):
    source = "fake"

    def __init__(self, candles):
        self.candles = candles

    def get_ohlcv(self, symbol, days=365, end=None):
        if symbol != "BTC":
            return OHLCVData.empty()
        c = self.candles
        return OHLCVData(
            timestamps=[x.time for x in c],
            open=[x.open for x in c],
            high=[x.high for x in c],
            low=[x.low for x in c],
            close=[x.close for x in c],
            volume=[x.volume for x in c],
        )


@pytest.fixture
def client():
    candles = candles_from_mids(BEARISH_MSB_MIDS)
    repo = FakeRepository(candles)
    service = StructureService(repository=repo)
    scanner = CoinScanner(
        fetch_candles=repo.get_candles,
        symbols=["BTC", "ETH"],
        batch_delay=0,
        config=StructureConfig(short_depth=1),
    )

    app.dependency_overrides[get_structure_service] = lambda: service
    app.dependency_overrides[get_coin_scanner] = lambda: scanner
    yield TestClient(app)
    app.dependency_overrides.clear()
    scanner.close()


class TestAPI:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_structure(self, client):
        response = client.get("/structure/btc", params={"depth": 1})

        assert response.status_code == 200
        body = response.json()
        assert body["symbol"] == "BTC"
        assert [s["label"] for s in body["swing_points"]] == ["L", "H", "HL", "HH"]
        assert body["events"][0]["kind"] == "MSB"
        assert body["has_recent_bearish_msb"] is True
        assert body["overlay"]["break_lines"][0]["direction"] == "bearish"

    def test_structure_invalid_depth(self, client):
        response = client.get("/structure/btc", params={"depth": 0})

        assert response.status_code == 422

    def test_structure_no_data(self, client):
        response = client.get("/structure/xyz")

        assert response.status_code == 200
        assert response.json()["swing_points"] == []

    def test_scan_msb(self, client):
        response = client.get("/scan", params={"type": "msb"})

        assert response.status_code == 200
        body = response.json()
        assert body["symbols"] == ["BTC"]
        assert body["type"] == "msb"
        assert body["cached"] is False

    def test_scan_cached(self, client):
        client.get("/scan", params={"type": "rising"})
        response = client.get("/scan", params={"type": "rising"})

        assert response.json()["cached"] is True

    def test_scan_unknown_type(self, client):
        response = client.get("/scan", params={"type": "sideways"})

        assert response.status_code == 400
