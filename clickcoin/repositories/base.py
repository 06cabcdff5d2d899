from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional
from zoneinfo import ZoneInfo

from clickcoin.core.structure import Candle


@dataclass
class OHLCVData:
    """
    Standard data format returned by ALL repositories.
    Whatever the source, it MUST be converted to this format before returning.
    """
    timestamps: List[int]    # Unix seconds (int). Always. No exceptions.
    open: List[float]
    high: List[float]
    low: List[float]
    close: List[float]
    volume: List[float]

    def __len__(self):
        return len(self.timestamps)

    def is_empty(self):
        return len(self.timestamps) == 0

    def to_candles(self) -> List[Candle]:
        return [
            Candle(
                time=self.timestamps[i],
                open=self.open[i],
                high=self.high[i],
                low=self.low[i],
                close=self.close[i],
                volume=self.volume[i],
            )
            for i in range(len(self.timestamps))
        ]

    def head(self, n: int) -> "OHLCVData":
        """First n bars."""
        return OHLCVData(
            timestamps=self.timestamps[:n],
            open=self.open[:n],
            high=self.high[:n],
            low=self.low[:n],
            close=self.close[:n],
            volume=self.volume[:n],
        )

    @staticmethod
    def empty() -> "OHLCVData":
        return OHLCVData(
            timestamps=[], open=[], high=[], low=[], close=[], volume=[]
        )


def drop_incomplete_candle(
    data: OHLCVData,
    today: Optional[date] = None,
    tz: str = "Asia/Seoul",
) -> OHLCVData:
    """
    Strip the last bar if it belongs to today (still forming).

    The bar date is read in `tz`, the same zone `today` defaults to.
    """
    if data.is_empty():
        return data
    zone = ZoneInfo(tz)
    if today is None:
        today = datetime.now(zone).date()
    last_day = datetime.fromtimestamp(data.timestamps[-1], tz=zone).date()
    if last_day == today:
        return data.head(len(data) - 1)
    return data


class CandleRepository:
    """
    Interface that all candle sources must implement.
    YFinanceRepository inherits from this.
    """

    source = "unknown"

    def get_ohlcv(
        self,
        symbol: str,
        days: int = 365,
        end: Optional[datetime] = None,
    ) -> OHLCVData:
        """
        Fetch closed daily OHLCV bars.

        Args:
            symbol: Coin ticker (e.g., "BTC", "ETH-USD")
            days: Calendar days of history to request
            end: End date (None = now)

        Returns:
            OHLCVData with timestamps sorted ascending (oldest first),
            today's incomplete bar excluded.
        """
        raise NotImplementedError

    def get_candles(self, symbol: str, days: int = 365) -> List[Candle]:
        return self.get_ohlcv(symbol, days=days).to_candles()
