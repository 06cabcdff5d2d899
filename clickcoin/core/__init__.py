"""Core engine modules for market structure detection."""

from .structure import (
    analyze,
    clean_candles,
    find_pivot_swings,
    enforce_alternation,
    label_swings,
    detect_structure_events,
    Candle,
    SwingPoint,
    SwingType,
    StructuralEvent,
    EventKind,
    Direction,
    DedupPolicy,
    StructureConfig,
    MarketStructure,
)
from .overlay import build_overlay

__all__ = [
    "analyze",
    "clean_candles",
    "find_pivot_swings",
    "enforce_alternation",
    "label_swings",
    "detect_structure_events",
    "Candle",
    "SwingPoint",
    "SwingType",
    "StructuralEvent",
    "EventKind",
    "Direction",
    "DedupPolicy",
    "StructureConfig",
    "MarketStructure",
    "build_overlay",
]
