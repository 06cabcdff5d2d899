"""
Chart overlay payloads built from a MarketStructure.

The chart draws three series on top of the candles:
- line: the zigzag through swing points
- markers: swing labels and BOS/MSB markers
- break_lines: horizontal segment from the broken swing to the breaking bar
"""

from typing import Dict, List

from .structure import Direction, EventKind, MarketStructure, SwingType


def _swing_marker(s) -> Dict:
    return {
        "time": s.time,
        "position": "aboveBar" if s.swing_type == SwingType.HIGH else "belowBar",
        "shape": "none",
        "text": s.label,
    }


def _event_marker(e) -> Dict:
    bullish = e.direction == Direction.BULLISH
    if e.kind == EventKind.BOS:
        shape = "square"
    else:
        shape = "arrowUp" if bullish else "arrowDown"
    return {
        "time": e.time,
        "position": "belowBar" if bullish else "aboveBar",
        "shape": shape,
        "text": e.kind.value,
    }


def build_overlay(structure: MarketStructure) -> Dict[str, List[Dict]]:
    """Map engine output to the chart's line, marker and break-line series."""
    line = [{"time": s.time, "value": s.price} for s in structure.swing_points]

    markers = [_swing_marker(s) for s in structure.swing_points]
    markers.extend(_event_marker(e) for e in structure.events)
    # Stable: a swing label keeps its place ahead of an event on the same bar
    markers.sort(key=lambda m: m["time"])

    break_lines = [
        {
            "start": {"time": e.anchor_time, "price": e.trigger_level},
            "end": {"time": e.time, "price": e.trigger_level},
            "direction": e.direction.value,
        }
        for e in structure.events
    ]

    return {"line": line, "markers": markers, "break_lines": break_lines}
