"""
Market structure detection: swing points, BOS and MSB events.

Rules:
- Pivot swings: `depth` bars on both sides required, strictly exceeded.
- Swings alternate HIGH/LOW and carry H/HH/LH or L/LL/HL labels.
- BOS: close breaks the last HH (bullish) or LL (bearish) level.
- MSB: close breaks the last LH (bullish) or HL (bearish) level.
- At most one event per calendar day (or per candle, see DedupPolicy).

Candles must be closed bars; excluding today's incomplete bar is the
repository's job.
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timezone, tzinfo
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Union

import numpy as np


class SwingType(Enum):
    HIGH = "high"
    LOW = "low"


class EventKind(Enum):
    BOS = "BOS"  # Break of Structure (continuation)
    MSB = "MSB"  # Market Structure Break (reversal)


class Direction(Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"


class DedupPolicy(Enum):
    DAY = "day"
    CANDLE = "candle"


@dataclass(frozen=True)
class Candle:
    """
    Single OHLCV bar.

    `time` is Unix seconds (int). Millisecond epochs and date strings such as
    "2024-01-01" are not converted; such candles are dropped as malformed.
    """
    time: int
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    @property
    def is_degenerate(self) -> bool:
        """Flat bar with no price discovery (no-trade period)."""
        return self.open == self.close and self.high == self.low

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Candle":
        return cls(
            time=int(d["time"]),
            open=float(d["open"]),
            high=float(d["high"]),
            low=float(d["low"]),
            close=float(d["close"]),
            volume=float(d.get("volume") or 0.0),
        )


@dataclass(frozen=True)
class SwingPoint:
    """Confirmed pivot in the alternating swing sequence."""
    index: int  # Position in the filtered candle series
    time: int
    price: float
    swing_type: SwingType
    label: str = ""


@dataclass(frozen=True)
class StructuralEvent:
    """A close breaching an armed swing level."""
    index: int  # Bar index of the breaking candle
    time: int
    kind: EventKind
    direction: Direction
    trigger_level: float
    anchor_time: int
    anchor_label: str
    close: float


@dataclass(frozen=True)
class StructureConfig:
    """Engine tuning. Thresholds are fixed for the lifetime of an instance."""
    min_candles: int = 20
    short_depth: int = 3
    long_depth: int = 10
    long_series_threshold: int = 50
    dedup: DedupPolicy = DedupPolicy.DAY
    day_tz: tzinfo = timezone.utc

    def depth_for(self, n: int) -> int:
        return self.long_depth if n >= self.long_series_threshold else self.short_depth


DEFAULT_CONFIG = StructureConfig()


@dataclass
class MarketStructure:
    """Result of a single analyze() call."""
    candles: List[Candle] = field(default_factory=list)
    depth: int = 0
    swing_points: List[SwingPoint] = field(default_factory=list)
    events: List[StructuralEvent] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.swing_points and not self.events

    @property
    def trend(self) -> Optional[Direction]:
        """Direction of the latest structural event, None if there is none."""
        return self.events[-1].direction if self.events else None

    def has_recent_reversal(
        self,
        window_size: int = 2,
        direction: Optional[Direction] = None,
    ) -> bool:
        """True if an MSB fired within the last `window_size` candles."""
        if window_size <= 0 or not self.candles:
            return False
        threshold = len(self.candles) - window_size
        return any(
            e.kind == EventKind.MSB
            and e.index >= threshold
            and (direction is None or e.direction == direction)
            for e in self.events
        )


CandleLike = Union[Candle, Dict[str, Any]]


def _valid_time(ts) -> bool:
    """Time must map to a calendar day in any timezone."""
    try:
        year = datetime.fromtimestamp(ts, tz=timezone.utc).year
    except (TypeError, ValueError, OverflowError, OSError):
        return False
    return 1 < year < 9999


def _coerce(raw: CandleLike) -> Optional[Candle]:
    if isinstance(raw, Candle):
        c = raw
    else:
        try:
            c = Candle.from_dict(raw)
        except (KeyError, TypeError, ValueError, OverflowError):
            return None
    values = (c.open, c.high, c.low, c.close)
    if not all(math.isfinite(v) for v in values):
        return None
    if not _valid_time(c.time):
        return None
    if c.high < c.low:
        return None
    return c


def clean_candles(candles: Iterable[CandleLike]) -> List[Candle]:
    """
    Drop malformed and degenerate candles, then stable-sort by time.

    Input is expected in time order already; sorting only guards against
    callers that concatenate sources out of order.
    """
    valid = []
    for raw in candles:
        c = _coerce(raw)
        if c is None or c.is_degenerate:
            continue
        valid.append(c)
    valid.sort(key=lambda c: c.time)
    return valid


def _time_at(times: Optional[np.ndarray], i: int) -> int:
    return int(times[i]) if times is not None else i


def find_pivot_swings(
    high: np.ndarray,
    low: np.ndarray,
    depth: int = 3,
    times: Optional[np.ndarray] = None,
) -> List[SwingPoint]:
    """
    Find raw pivot highs and lows (unlabeled, possibly non-alternating).

    A swing high at index i requires:
      high[i] > max(high[i-depth:i]) AND high[i] > max(high[i+1:i+depth+1])

    Swing lows are symmetric on `low`. A bar that qualifies as both is
    recorded as a high only.

    Raising `depth` only ever removes pivot indices, but a bar recorded as a
    high at one depth may come back as a low at a larger depth.

    Args:
        high: Array of high prices
        low: Array of low prices
        depth: Bars required on each side to confirm a pivot
        times: Optional bar timestamps (swing time defaults to the index)

    Returns:
        List of unlabeled SwingPoint objects sorted by index
    """
    if len(high) != len(low):
        raise ValueError("high and low arrays must have same length")
    if depth < 1:
        raise ValueError("depth must be >= 1")

    n = len(high)
    swings: List[SwingPoint] = []

    for i in range(depth, n - depth):
        left_high_max = np.max(high[i - depth:i])
        right_high_max = np.max(high[i + 1:i + depth + 1])
        if high[i] > left_high_max and high[i] > right_high_max:
            swings.append(SwingPoint(
                index=i, time=_time_at(times, i), price=float(high[i]), swing_type=SwingType.HIGH,
            ))
            continue

        left_low_min = np.min(low[i - depth:i])
        right_low_min = np.min(low[i + 1:i + depth + 1])
        if low[i] < left_low_min and low[i] < right_low_min:
            swings.append(SwingPoint(
                index=i, time=_time_at(times, i), price=float(low[i]), swing_type=SwingType.LOW,
            ))

    return swings


def _more_extreme(a: SwingPoint, b: SwingPoint) -> bool:
    """True if `a` is a higher high / lower low than `b` (same kind)."""
    if a.swing_type == SwingType.HIGH:
        return a.price > b.price
    return a.price < b.price


def enforce_alternation(
    raw: List[SwingPoint],
    high: np.ndarray,
    low: np.ndarray,
    times: Optional[np.ndarray] = None,
) -> List[SwingPoint]:
    """
    Resolve consecutive same-kind pivots into a strict HIGH/LOW sequence.

    A more extreme repeat replaces the previous entry. A less extreme repeat
    gets the most extreme opposite-kind bar between the two inserted before
    it; if no bar lies between them it is dropped.
    """
    out: List[SwingPoint] = []
    for p in raw:
        if not out or out[-1].swing_type != p.swing_type:
            out.append(p)
            continue

        last = out[-1]
        if _more_extreme(p, last):
            out[-1] = p
            continue

        start, stop = last.index + 1, p.index
        if stop <= start:
            continue

        if p.swing_type == SwingType.HIGH:
            k = start + int(np.argmin(low[start:stop]))
            bridge = SwingPoint(
                index=k, time=_time_at(times, k), price=float(low[k]), swing_type=SwingType.LOW,
            )
        else:
            k = start + int(np.argmax(high[start:stop]))
            bridge = SwingPoint(
                index=k, time=_time_at(times, k), price=float(high[k]), swing_type=SwingType.HIGH,
            )
        out.append(bridge)
        out.append(p)

    return out


def label_swings(swings: List[SwingPoint]) -> List[SwingPoint]:
    """Label each swing against the nearest earlier swing of the same kind."""
    labeled: List[SwingPoint] = []
    prev: Dict[SwingType, SwingPoint] = {}
    for s in swings:
        before = prev.get(s.swing_type)
        if s.swing_type == SwingType.HIGH:
            if before is None:
                label = "H"
            else:
                label = "HH" if s.price > before.price else "LH"
        else:
            if before is None:
                label = "L"
            else:
                label = "LL" if s.price < before.price else "HL"
        s = SwingPoint(
            index=s.index,
            time=s.time,
            price=s.price,
            swing_type=s.swing_type,
            label=label,
        )
        prev[s.swing_type] = s
        labeled.append(s)
    return labeled


# Check order matters: only the first triggering level fires per dedup slot.
_TRIGGERS = (
    ("HH", EventKind.BOS, Direction.BULLISH),
    ("LL", EventKind.BOS, Direction.BEARISH),
    ("LH", EventKind.MSB, Direction.BULLISH),
    ("HL", EventKind.MSB, Direction.BEARISH),
)


def _day_key(ts: int, tz: tzinfo) -> date:
    return datetime.fromtimestamp(ts, tz=tz).date()


def detect_structure_events(
    candles: List[Candle],
    swings: List[SwingPoint],
    config: StructureConfig = DEFAULT_CONFIG,
) -> List[StructuralEvent]:
    """
    Walk candles in order and emit BOS/MSB events on closing breaks.

    Armed levels (HH, LL, LH, HL) are set when a swing with that label is
    reached and cleared when breached. Bare H/L swings arm nothing.
    """
    swing_at = {s.index: s for s in swings}
    armed: Dict[str, Optional[SwingPoint]] = {"HH": None, "LL": None, "LH": None, "HL": None}
    fired_days = set()
    events: List[StructuralEvent] = []

    for i, c in enumerate(candles):
        s = swing_at.get(i)
        if s is not None and s.label in armed:
            armed[s.label] = s

        if config.dedup == DedupPolicy.DAY:
            day = _day_key(c.time, config.day_tz)
            if day in fired_days:
                continue

        for label, kind, direction in _TRIGGERS:
            level = armed[label]
            if level is None:
                continue
            if direction == Direction.BULLISH:
                broken = c.close > level.price
            else:
                broken = c.close < level.price
            if not broken:
                continue

            events.append(StructuralEvent(
                index=i,
                time=c.time,
                kind=kind,
                direction=direction,
                trigger_level=level.price,
                anchor_time=level.time,
                anchor_label=level.label,
                close=c.close,
            ))
            armed[label] = None
            if config.dedup == DedupPolicy.DAY:
                fired_days.add(day)
            break

    return events


def analyze(
    candles: Iterable[CandleLike],
    depth: Optional[int] = None,
    config: Optional[StructureConfig] = None,
) -> MarketStructure:
    """
    Run the full market structure pipeline over a candle series.

    Args:
        candles: Closed OHLCV bars (Candle objects or dicts), oldest first
        depth: Pivot confirmation window; None picks it from series length
        config: Engine tuning (defaults to DEFAULT_CONFIG)

    Returns:
        MarketStructure. Empty (no swings, no events) when fewer than
        config.min_candles valid candles remain; never raises on bad data.
    """
    config = config or DEFAULT_CONFIG
    series = clean_candles(candles)
    n = len(series)
    if n < config.min_candles:
        return MarketStructure(candles=series)

    if depth is None:
        depth = config.depth_for(n)
    depth = max(1, int(depth))

    high = np.array([c.high for c in series], dtype=np.float64)
    low = np.array([c.low for c in series], dtype=np.float64)
    times = np.array([c.time for c in series], dtype=np.int64)

    raw = find_pivot_swings(high, low, depth=depth, times=times)
    swings = label_swings(enforce_alternation(raw, high, low, times=times))
    events = detect_structure_events(series, swings, config)

    return MarketStructure(
        candles=series,
        depth=depth,
        swing_points=swings,
        events=events,
    )
