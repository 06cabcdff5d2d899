"""
Runtime settings from environment variables (.env supported).

Engine tuning is not configured here; pass a StructureConfig explicitly.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent

load_dotenv(PROJECT_ROOT / ".env")

# Candle history fetched per symbol (daily bars)
HISTORY_DAYS = int(os.getenv("CLICKCOIN_HISTORY_DAYS", "365"))

# "Today" is judged in this timezone when dropping the incomplete bar
MARKET_TZ = os.getenv("CLICKCOIN_MARKET_TZ", "Asia/Seoul")

# Scanner throttling
SCAN_CHUNK_SIZE = int(os.getenv("CLICKCOIN_SCAN_CHUNK_SIZE", "12"))
SCAN_DELAY_MS = int(os.getenv("CLICKCOIN_SCAN_DELAY_MS", "50"))
SCAN_TOP_N = int(os.getenv("CLICKCOIN_SCAN_TOP_N", "10"))
SCAN_CACHE_TTL_HOURS = float(os.getenv("CLICKCOIN_SCAN_CACHE_TTL_HOURS", "12"))

WATCHLIST_FILE = Path(
    os.getenv("CLICKCOIN_WATCHLIST", str(PROJECT_ROOT / "data" / "coin_watchlist.txt"))
)

CORS_ORIGINS = [
    o.strip()
    for o in os.getenv(
        "CLICKCOIN_CORS_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000",
    ).split(",")
    if o.strip()
]
