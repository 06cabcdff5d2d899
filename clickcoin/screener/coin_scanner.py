"""
Coin Watchlist Scanner
Ranks a coin watchlist by daily move, volume, traded value, or a recent
Market Structure Break ("storm's coming" list).
"""
import asyncio
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from clickcoin.config import (
    SCAN_CACHE_TTL_HOURS,
    SCAN_CHUNK_SIZE,
    SCAN_DELAY_MS,
    SCAN_TOP_N,
)
from clickcoin.core.structure import Candle, StructureConfig, analyze, clean_candles

logger = logging.getLogger(__name__)


class ScanType(str, Enum):
    """Ranking modes."""
    RISING = "rising"    # Daily change % desc
    VOLUME = "volume"    # Last bar volume desc
    POPULAR = "popular"  # Traded value (close * volume) desc
    MSB = "msb"          # Recent MSB only, traded value desc


@dataclass
class CoinSnapshot:
    """Per-symbol figures used for ranking."""
    symbol: str
    change_percent: float
    volume: float
    value: float  # close * volume
    has_msb: bool

    def to_dict(self) -> Dict:
        return {
            "symbol": self.symbol,
            "change_percent": self.change_percent,
            "volume": self.volume,
            "value": self.value,
            "has_msb": self.has_msb,
        }


@dataclass
class ScanReport:
    """Ranked output of one scan."""
    scan_type: str
    symbols: List[str]
    snapshots: List[CoinSnapshot]
    symbols_scanned: int
    scanned_at: datetime = field(default_factory=datetime.now)
    scan_duration_seconds: float = 0.0

    @property
    def timestamp(self) -> int:
        """Unix milliseconds."""
        return int(self.scanned_at.timestamp() * 1000)

    def to_dict(self) -> Dict:
        return {
            "type": self.scan_type,
            "symbols": self.symbols,
            "snapshots": [s.to_dict() for s in self.snapshots],
            "symbols_scanned": self.symbols_scanned,
            "timestamp": self.timestamp,
            "scan_duration_seconds": self.scan_duration_seconds,
        }


def load_watchlist(path: Path) -> List[str]:
    """One symbol per line; blank lines and '#' comments ignored."""
    path = Path(path)
    if not path.exists():
        logger.warning(f"[scan] Watchlist not found: {path}")
        return []
    with open(path, "r") as f:
        return [
            line.strip() for line in f
            if line.strip() and not line.strip().startswith("#")
        ]


def build_snapshot(
    symbol: str,
    candles: Sequence[Candle],
    config: Optional[StructureConfig] = None,
    recent_window: int = 2,
) -> Optional[CoinSnapshot]:
    """
    Summarize a symbol from its closed daily candles.

    Returns None with fewer than 2 usable candles.
    """
    series = clean_candles(candles)
    if len(series) < 2:
        return None

    latest, prev = series[-1], series[-2]
    if prev.close:
        change = (latest.close - prev.close) / prev.close * 100
    else:
        change = 0.0

    structure = analyze(series, config=config)
    return CoinSnapshot(
        symbol=symbol,
        change_percent=change,
        volume=latest.volume,
        value=latest.close * latest.volume,
        has_msb=structure.has_recent_reversal(recent_window),
    )


def rank_snapshots(snapshots: List[CoinSnapshot], scan_type: ScanType) -> List[CoinSnapshot]:
    """Order snapshots for a scan type (MSB also filters)."""
    if scan_type == ScanType.RISING:
        return sorted(snapshots, key=lambda s: s.change_percent, reverse=True)
    if scan_type == ScanType.VOLUME:
        return sorted(snapshots, key=lambda s: s.volume, reverse=True)
    if scan_type == ScanType.POPULAR:
        return sorted(snapshots, key=lambda s: s.value, reverse=True)
    if scan_type == ScanType.MSB:
        return sorted(
            (s for s in snapshots if s.has_msb),
            key=lambda s: s.value,
            reverse=True,
        )
    raise ValueError(f"Unknown scan type: {scan_type}")


class CoinScanner:
    """
    Batch scanner over a watchlist.

    Candle fetching is injected (`fetch_candles`); chunks of `chunk_size`
    symbols run concurrently in a thread pool with `batch_delay` seconds
    between chunks so a rate-limited data source is not hammered.
    """

    def __init__(
        self,
        fetch_candles: Callable[[str], Sequence[Candle]],
        symbols: Sequence[str],
        chunk_size: int = SCAN_CHUNK_SIZE,
        batch_delay: float = SCAN_DELAY_MS / 1000,
        top_n: int = SCAN_TOP_N,
        cache_ttl_hours: float = SCAN_CACHE_TTL_HOURS,
        config: Optional[StructureConfig] = None,
        sink: Optional[Callable[[ScanReport], None]] = None,
    ):
        self.fetch_candles = fetch_candles
        self.symbols = list(symbols)
        self.chunk_size = max(1, chunk_size)
        self.batch_delay = batch_delay
        self.top_n = top_n
        self.cache_ttl = timedelta(hours=cache_ttl_hours)
        self.config = config
        self.sink = sink

        self._executor = ThreadPoolExecutor(max_workers=self.chunk_size)

        # In-memory cache keyed by scan type
        self._cache: Dict[str, ScanReport] = {}

    def _snapshot_symbol(self, symbol: str) -> Optional[CoinSnapshot]:
        """Fetch + analyze one symbol. Failures yield None."""
        try:
            candles = self.fetch_candles(symbol)
            if not candles:
                return None
            return build_snapshot(symbol, candles, config=self.config)
        except Exception as e:
            logger.debug(f"[scan] Failed to scan {symbol}: {e}")
            return None

    async def _collect(self) -> List[CoinSnapshot]:
        loop = asyncio.get_running_loop()
        snapshots: List[CoinSnapshot] = []
        total_batches = (len(self.symbols) + self.chunk_size - 1) // self.chunk_size

        for i in range(0, len(self.symbols), self.chunk_size):
            batch = self.symbols[i:i + self.chunk_size]
            logger.debug(f"[scan] Processing batch {i // self.chunk_size + 1}/{total_batches}")

            tasks = [
                loop.run_in_executor(self._executor, self._snapshot_symbol, symbol)
                for symbol in batch
            ]
            results = await asyncio.gather(*tasks, return_exceptions=True)

            for result in results:
                if isinstance(result, CoinSnapshot):
                    snapshots.append(result)

            if i + self.chunk_size < len(self.symbols) and self.batch_delay > 0:
                await asyncio.sleep(self.batch_delay)

        return snapshots

    def _cached(self, key: str) -> Optional[ScanReport]:
        entry = self._cache.get(key)
        if entry is None:
            return None
        if datetime.now() - entry.scanned_at >= self.cache_ttl:
            del self._cache[key]
            return None
        return entry

    async def scan(self, scan_type="rising", force_refresh: bool = False) -> ScanReport:
        """
        Scan the watchlist and rank it.

        Args:
            scan_type: ScanType or its string value
            force_refresh: Bypass the in-memory cache

        Returns:
            ScanReport with the top_n symbols

        Raises:
            ValueError: Unknown scan type
        """
        scan_type = ScanType(scan_type)
        key = scan_type.value

        if not force_refresh:
            cached = self._cached(key)
            if cached is not None:
                logger.info(f"[scan] Returning cached {key} results ({len(cached.symbols)} symbols)")
                return cached

        if not self.symbols:
            logger.warning("[scan] Watchlist is empty")

        logger.info(f"[scan] Scanning {len(self.symbols)} symbols ({key})...")
        started = time.monotonic()

        snapshots = await self._collect()
        ranked = rank_snapshots(snapshots, scan_type)[:self.top_n]

        report = ScanReport(
            scan_type=key,
            symbols=[s.symbol for s in ranked],
            snapshots=ranked,
            symbols_scanned=len(self.symbols),
            scan_duration_seconds=time.monotonic() - started,
        )
        self._cache[key] = report

        logger.info(
            f"[scan] Scan complete: {len(report.symbols)} symbols ranked in "
            f"{report.scan_duration_seconds:.1f}s ({len(snapshots)} with data)"
        )

        if self.sink is not None:
            try:
                self.sink(report)
            except Exception as e:
                logger.error(f"[scan] Result sink failed: {e}")

        return report

    def is_cached(self, scan_type) -> bool:
        return self._cached(ScanType(scan_type).value) is not None

    def clear_cache(self, scan_type=None):
        """Clear cached results (all types if scan_type is None)."""
        if scan_type is None:
            self._cache.clear()
        else:
            self._cache.pop(ScanType(scan_type).value, None)

    def close(self):
        self._executor.shutdown(wait=False)
