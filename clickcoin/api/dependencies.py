"""Shared service instances for the API (overridable in tests)."""

from typing import Optional

from clickcoin.config import HISTORY_DAYS, WATCHLIST_FILE
from clickcoin.screener.coin_scanner import CoinScanner, load_watchlist
from clickcoin.services.structure_service import StructureService

_service: Optional[StructureService] = None
_scanner: Optional[CoinScanner] = None


def get_structure_service() -> StructureService:
    """Get or create the global structure service."""
    global _service
    if _service is None:
        _service = StructureService()
    return _service


def get_coin_scanner() -> CoinScanner:
    """Get or create the global scanner over the configured watchlist."""
    global _scanner
    if _scanner is None:
        repo = get_structure_service().repository
        _scanner = CoinScanner(
            fetch_candles=lambda symbol: repo.get_candles(symbol, days=HISTORY_DAYS),
            symbols=load_watchlist(WATCHLIST_FILE),
        )
    return _scanner
