"""
Coin Screener Module
Watchlist scanner ranking coins by move, volume, value and recent MSB.
"""
from .coin_scanner import (
    CoinScanner,
    CoinSnapshot,
    ScanReport,
    ScanType,
    build_snapshot,
    load_watchlist,
    rank_snapshots,
)

__all__ = [
    "CoinScanner",
    "CoinSnapshot",
    "ScanReport",
    "ScanType",
    "build_snapshot",
    "load_watchlist",
    "rank_snapshots",
]
