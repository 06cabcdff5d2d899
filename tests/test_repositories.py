"""Tests for the candle repository (yfinance mocked)."""

from datetime import date, datetime
from zoneinfo import ZoneInfo

import pandas as pd
import pytest

from clickcoin.repositories import yfinance_repository
from clickcoin.repositories.base import OHLCVData, drop_incomplete_candle
from clickcoin.repositories.yfinance_repository import YFinanceRepository, to_yf_symbol

KST = ZoneInfo("Asia/Seoul")


def _frame(days, closes):
    index = pd.DatetimeIndex(
        [pd.Timestamp(d, tz="UTC") for d in days], name="Date"
    )
    return pd.DataFrame(
        {
            "Open": [c - 1 for c in closes],
            "High": [c + 2 for c in closes],
            "Low": [c - 2 for c in closes],
            "Close": closes,
            "Volume": [1000.0] * len(closes),
        },
        index=index,
    )


class FakeTicker:
    calls = []

    def __init__(self, symbol, frame=None, error=None):
        self.symbol = symbol
        self._frame = frame
        self._error = error

    def history(self, **kwargs):
        FakeTicker.calls.append((self.symbol, kwargs))
        if self._error is not None:
            raise self._error
        return self._frame


@pytest.fixture
def fake_yf(monkeypatch):
    state = {"frame": None, "error": None}
    FakeTicker.calls = []

    def ticker(symbol):
        return FakeTicker(symbol, frame=state["frame"], error=state["error"])

    monkeypatch.setattr(yfinance_repository.yf, "Ticker", ticker)
    return state


class TestSymbolConversion:

    def test_bare_symbol_gets_usd(self):
        assert to_yf_symbol("btc") == "BTC-USD"

    def test_suffixed_symbol_passes_through(self):
        assert to_yf_symbol("ETH-USD") == "ETH-USD"
        assert to_yf_symbol("SUI20947-USD") == "SUI20947-USD"


class TestDropIncompleteCandle:

    def _data(self, days):
        ts = [int(datetime(d.year, d.month, d.day, tzinfo=ZoneInfo("UTC")).timestamp()) for d in days]
        n = len(ts)
        return OHLCVData(
            timestamps=ts, open=[1.0] * n, high=[2.0] * n,
            low=[0.5] * n, close=[1.5] * n, volume=[10.0] * n,
        )

    def test_drops_today(self):
        data = self._data([date(2024, 1, 8), date(2024, 1, 9), date(2024, 1, 10)])

        result = drop_incomplete_candle(data, today=date(2024, 1, 10))

        assert len(result) == 2
        assert result.timestamps == data.timestamps[:2]

    def test_keeps_closed_bars(self):
        data = self._data([date(2024, 1, 8), date(2024, 1, 9)])

        result = drop_incomplete_candle(data, today=date(2024, 1, 10))

        assert len(result) == 2

    def test_empty(self):
        assert drop_incomplete_candle(OHLCVData.empty(), today=date(2024, 1, 10)).is_empty()


class TestYFinanceRepository:

    def test_returns_ohlcv_without_today(self, fake_yf):
        fake_yf["frame"] = _frame(["2024-01-08", "2024-01-09", "2024-01-10"], [100.0, 101.0, 102.0])
        repo = YFinanceRepository(market_tz="Asia/Seoul")

        data = repo.get_ohlcv("btc", days=30, end=datetime(2024, 1, 10, 15, 0, tzinfo=KST))

        assert len(data) == 2
        assert data.close == [100.0, 101.0]
        assert data.high == [102.0, 103.0]
        assert all(isinstance(t, int) for t in data.timestamps)
        assert data.timestamps == sorted(data.timestamps)

        symbol, kwargs = FakeTicker.calls[0]
        assert symbol == "BTC-USD"
        assert kwargs["interval"] == "1d"
        assert kwargs["start"] == "2023-12-11"
        assert kwargs["end"] == "2024-01-11"

    def test_nan_volume_becomes_zero(self, fake_yf):
        frame = _frame(["2024-01-08", "2024-01-09"], [100.0, 101.0])
        frame.loc[frame.index[0], "Volume"] = float("nan")
        fake_yf["frame"] = frame

        data = YFinanceRepository().get_ohlcv("ETH", end=datetime(2024, 1, 20, tzinfo=KST))

        assert data.volume[0] == 0.0
        assert len(data) == 2

    def test_row_with_nan_price_dropped(self, fake_yf):
        frame = _frame(["2024-01-07", "2024-01-08", "2024-01-09"], [100.0, 101.0, 102.0])
        frame.loc[frame.index[1], "Low"] = float("nan")
        fake_yf["frame"] = frame

        data = YFinanceRepository().get_ohlcv("ETH", end=datetime(2024, 1, 20, tzinfo=KST))

        assert data.close == [100.0, 102.0]
        assert 0.0 not in data.low
        assert [c.close for c in data.to_candles()] == [100.0, 102.0]

    def test_empty_frame(self, fake_yf):
        fake_yf["frame"] = pd.DataFrame()

        assert YFinanceRepository().get_ohlcv("BTC").is_empty()

    def test_error_returns_empty(self, fake_yf):
        fake_yf["error"] = RuntimeError("rate limited")

        assert YFinanceRepository().get_ohlcv("BTC").is_empty()

    def test_get_candles(self, fake_yf):
        fake_yf["frame"] = _frame(["2024-01-08", "2024-01-09"], [100.0, 101.0])

        candles = YFinanceRepository().get_candles("BTC", days=10)

        # end defaults to now, so both bars are in the past
        assert [c.close for c in candles] == [100.0, 101.0]
        assert candles[0].time < candles[1].time
