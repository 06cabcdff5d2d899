"""Shared candle fixtures.

Series are built from a mid-price path: high = mid + 1, low = mid - 1,
close = mid, open = previous mid. With depth=1 pivots land exactly on the
turning points of the path.
"""

from datetime import datetime, timezone

import numpy as np
import pytest

from clickcoin.core.structure import Candle

DAY = 86400
BASE_TS = int(datetime(2024, 1, 1, tzinfo=timezone.utc).timestamp())


def candles_from_mids(mids, volumes=None, start=BASE_TS, step=DAY):
    candles = []
    prev = mids[0]
    for i, m in enumerate(mids):
        candles.append(Candle(
            time=start + i * step,
            open=float(prev),
            high=float(m) + 1.0,
            low=float(m) - 1.0,
            close=float(m),
            volume=float(volumes[i]) if volumes is not None else 1000.0,
        ))
        prev = m
    return candles


# L(100) H(110) LL(95) HH(120), then drifting lower without a new pivot
CANONICAL_MIDS = [
    105, 104, 103, 102, 101,           # 0-4: L at 4 (low 100)
    103, 105, 107, 109,                # 5-8: H at 8 (high 110)
    106, 103, 100, 98, 96,             # 9-13: LL at 13 (low 95)
    100, 104, 108, 112, 116, 119,      # 14-19: HH at 19 (high 120)
    117, 115, 113, 111, 109,           # 20-24
]

# L(100) H(110) HL(104) HH(120), last close 102 breaks the HL -> bearish MSB
BEARISH_MSB_MIDS = [
    105, 104, 103, 102, 101,           # 0-4: L at 4
    104, 107, 109,                     # 5-7: H at 7 (high 110)
    108, 107, 106, 105,                # 8-11: HL at 11 (low 104)
    108, 112, 116, 119,                # 12-15: HH at 15 (high 120)
    116, 113, 110, 107, 104, 102,      # 16-21: close 102 < 104 at 21
]

# H(120) L(110) LH(116) LL(100), last close 118 breaks the LH -> bullish MSB
BULLISH_MSB_MIDS = [
    115, 116, 117, 118, 119,           # 0-4: H at 4 (high 120)
    116, 113, 111,                     # 5-7: L at 7 (low 110)
    112, 113, 114, 115,                # 8-11: LH at 11 (high 116)
    112, 108, 104, 101,                # 12-15: LL at 15 (low 100)
    104, 107, 110, 113, 116, 118,      # 16-21: close 118 > 116 at 21
]


@pytest.fixture
def canonical_candles():
    return candles_from_mids(CANONICAL_MIDS)


@pytest.fixture
def bearish_msb_candles():
    return candles_from_mids(BEARISH_MSB_MIDS)


@pytest.fixture
def bullish_msb_candles():
    return candles_from_mids(BULLISH_MSB_MIDS)


@pytest.fixture
def rising_candles():
    return candles_from_mids(list(range(100, 140)))


@pytest.fixture
def random_walk_candles():
    rng = np.random.RandomState(42)
    closes = 100 + np.cumsum(rng.randn(300))
    highs = closes + np.abs(rng.randn(300)) + 0.01
    lows = closes - np.abs(rng.randn(300)) - 0.01
    opens = np.concatenate([[closes[0]], closes[:-1]])
    return [
        Candle(
            time=BASE_TS + i * DAY,
            open=float(opens[i]),
            high=float(max(highs[i], opens[i])),
            low=float(min(lows[i], opens[i])),
            close=float(closes[i]),
            volume=1000.0,
        )
        for i in range(300)
    ]
