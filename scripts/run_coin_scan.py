#!/usr/bin/env python3
"""
Run a one-off watchlist scan and print the ranked symbols

Usage:
    python scripts/run_coin_scan.py [rising|volume|popular|msb]

Uses the watchlist at CLICKCOIN_WATCHLIST (default data/coin_watchlist.txt)
and daily candles from Yahoo Finance.
"""
import sys
import asyncio
import logging
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv
load_dotenv(project_root / ".env")

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(message)s',
)


def main():
    from clickcoin.config import HISTORY_DAYS, WATCHLIST_FILE
    from clickcoin.repositories.yfinance_repository import YFinanceRepository
    from clickcoin.screener.coin_scanner import CoinScanner, ScanType, load_watchlist

    scan_type = sys.argv[1] if len(sys.argv) > 1 else ScanType.MSB.value
    try:
        scan_type = ScanType(scan_type)
    except ValueError:
        print(f"Unknown scan type: {scan_type}")
        print(f"Choose one of: {', '.join(t.value for t in ScanType)}")
        sys.exit(1)

    symbols = load_watchlist(WATCHLIST_FILE)
    if not symbols:
        print(f"No symbols in {WATCHLIST_FILE}")
        sys.exit(1)

    repo = YFinanceRepository()
    scanner = CoinScanner(
        fetch_candles=lambda s: repo.get_candles(s, days=HISTORY_DAYS),
        symbols=symbols,
    )

    print("=" * 60)
    print(f"CLICKCOIN SCAN: {scan_type.value} ({len(symbols)} symbols)")
    print("=" * 60)

    try:
        report = asyncio.run(scanner.scan(scan_type))
    finally:
        scanner.close()

    if not report.snapshots:
        print("No symbols matched.")
        return

    for rank, snap in enumerate(report.snapshots, start=1):
        flag = " MSB" if snap.has_msb else ""
        print(
            f"{rank:2d}. {snap.symbol:<16} {snap.change_percent:+7.2f}%  "
            f"vol={snap.volume:,.0f}  value={snap.value:,.0f}{flag}"
        )

    print()
    print(f"Done in {report.scan_duration_seconds:.1f}s")


if __name__ == "__main__":
    main()
