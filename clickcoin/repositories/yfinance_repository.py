"""
yfinance Repository: daily coin candles.

Rules:
- Daily bars only (market structure runs on 1D)
- NEVER returns today's bar (still forming); judged in MARKET_TZ
- Symbol conversion: "BTC" -> "BTC-USD" (already-suffixed tickers pass through)
- Returns OHLCVData standard format (Unix int timestamps)
"""

import logging
from datetime import datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

import yfinance as yf

from clickcoin.config import MARKET_TZ
from clickcoin.repositories.base import CandleRepository, OHLCVData, drop_incomplete_candle

logger = logging.getLogger(__name__)


def to_yf_symbol(symbol: str) -> str:
    """Convert a bare coin ticker to Yahoo's quote-currency form."""
    symbol = symbol.strip().upper()
    if "-" in symbol:
        return symbol
    return f"{symbol}-USD"


class YFinanceRepository(CandleRepository):
    """Daily coin bars from Yahoo Finance."""

    source = "yfinance"

    def __init__(self, market_tz: str = MARKET_TZ):
        self.market_tz = market_tz

    def get_ohlcv(
        self,
        symbol: str,
        days: int = 365,
        end: Optional[datetime] = None,
    ) -> OHLCVData:
        """Fetch daily bars for the last `days` days (excludes today)."""
        yf_symbol = to_yf_symbol(symbol)

        if end is None:
            end = datetime.now(ZoneInfo(self.market_tz))
        start = end - timedelta(days=days)

        logger.info(
            f"[yfinance] Fetching {yf_symbol} 1d "
            f"from {start.date()} to {end.date()}"
        )

        try:
            df = yf.Ticker(yf_symbol).history(
                start=start.strftime("%Y-%m-%d"),
                # yfinance end is exclusive
                end=(end + timedelta(days=1)).strftime("%Y-%m-%d"),
                interval="1d",
                auto_adjust=True,
            )

            if df is None or df.empty:
                logger.warning(f"[yfinance] No data for {yf_symbol}")
                return OHLCVData.empty()

            df = df.sort_index()
            # Rows missing any price are unusable; a missing volume is 0
            df = df.dropna(subset=["Open", "High", "Low", "Close"])
            timestamps = [int(ts.timestamp()) for ts in df.index]

            # NaN -> 0.0 (NaN != NaN)
            def clean(vals):
                return [float(v) if v == v else 0.0 for v in vals]

            data = OHLCVData(
                timestamps=timestamps,
                open=clean(df["Open"].tolist()),
                high=clean(df["High"].tolist()),
                low=clean(df["Low"].tolist()),
                close=clean(df["Close"].tolist()),
                volume=clean(df["Volume"].tolist()),
            )
            data = drop_incomplete_candle(
                data, today=end.astimezone(ZoneInfo(self.market_tz)).date(), tz=self.market_tz
            )

            logger.info(f"[yfinance] Got {len(data)} bars for {yf_symbol}")
            return data

        except Exception as e:
            logger.error(f"[yfinance] Error fetching {yf_symbol}: {e}")
            return OHLCVData.empty()
