"""
Structure Service

Orchestrator that fetches daily candles from the repository and runs the
market structure engine for one symbol.
"""

import time
import logging
from typing import Optional

from clickcoin.config import HISTORY_DAYS
from clickcoin.core.overlay import build_overlay
from clickcoin.core.structure import Direction, MarketStructure, StructureConfig, analyze
from clickcoin.repositories.base import CandleRepository
from clickcoin.repositories.yfinance_repository import YFinanceRepository

logger = logging.getLogger(__name__)


def _swing_to_dict(s) -> dict:
    return {
        "index": s.index,
        "time": s.time,
        "price": s.price,
        "type": s.swing_type.value,
        "label": s.label,
    }


def _event_to_dict(e) -> dict:
    return {
        "index": e.index,
        "time": e.time,
        "kind": e.kind.value,
        "direction": e.direction.value,
        "trigger_level": e.trigger_level,
        "anchor_time": e.anchor_time,
        "anchor_label": e.anchor_label,
        "close": e.close,
    }


def structure_to_dict(structure: MarketStructure, recent_window: int = 2) -> dict:
    """Serialize engine output (without symbol/source metadata)."""
    trend = structure.trend
    return {
        "depth": structure.depth,
        "bar_count": len(structure.candles),
        "swing_points": [_swing_to_dict(s) for s in structure.swing_points],
        "events": [_event_to_dict(e) for e in structure.events],
        "overlay": build_overlay(structure),
        "trend": trend.value if trend is not None else None,
        "has_recent_bullish_msb": structure.has_recent_reversal(
            recent_window, Direction.BULLISH
        ),
        "has_recent_bearish_msb": structure.has_recent_reversal(
            recent_window, Direction.BEARISH
        ),
    }


class StructureService:
    """
    Fetches candles and analyzes market structure for a symbol.

    The repository is injected so tests and other data sources can replace
    Yahoo Finance.
    """

    def __init__(
        self,
        repository: Optional[CandleRepository] = None,
        config: Optional[StructureConfig] = None,
        history_days: int = HISTORY_DAYS,
    ):
        self.repository = repository or YFinanceRepository()
        self.config = config
        self.history_days = history_days

    def analyze_symbol(self, symbol: str, depth: Optional[int] = None) -> MarketStructure:
        candles = self.repository.get_candles(symbol, days=self.history_days)
        return analyze(candles, depth=depth, config=self.config)

    def get_structure(self, symbol: str, depth: Optional[int] = None) -> dict:
        """
        Fetch candles and return the serialized market structure.

        Args:
            symbol: Coin ticker (e.g., "BTC", "ETH-USD")
            depth: Pivot confirmation window (None = adaptive)

        Returns:
            Dict with swing points, events, overlay and summary flags.
            Insufficient data yields empty lists, not an error.
        """
        symbol = symbol.upper()
        structure = self.analyze_symbol(symbol, depth=depth)

        if structure.is_empty:
            logger.info(
                f"[structure] {symbol}: no structure "
                f"({len(structure.candles)} valid bars)"
            )

        result = structure_to_dict(structure)
        result.update({
            "symbol": symbol,
            "data_source": self.repository.source,
            "last_updated": int(time.time()),
        })
        return result
