"""Pydantic schemas for API responses."""

from typing import List, Optional

from pydantic import BaseModel


class SwingPointSchema(BaseModel):
    """Labeled swing point."""
    index: int
    time: int
    price: float
    type: str  # "high" or "low"
    label: str  # H, HH, LH, L, LL, HL


class StructuralEventSchema(BaseModel):
    """BOS / MSB event."""
    index: int
    time: int
    kind: str  # "BOS" or "MSB"
    direction: str  # "bullish" or "bearish"
    trigger_level: float
    anchor_time: int
    anchor_label: str
    close: float


class LinePointSchema(BaseModel):
    time: int
    value: float


class MarkerSchema(BaseModel):
    """Chart marker."""
    time: int
    position: str  # "aboveBar" or "belowBar"
    shape: str  # "none", "square", "arrowUp", "arrowDown"
    text: str


class PricePointSchema(BaseModel):
    time: int
    price: float


class BreakLineSchema(BaseModel):
    start: PricePointSchema
    end: PricePointSchema
    direction: str


class OverlaySchema(BaseModel):
    line: List[LinePointSchema]
    markers: List[MarkerSchema]
    break_lines: List[BreakLineSchema]


class StructureResponse(BaseModel):
    """Response schema for /structure/{symbol}."""
    symbol: str
    data_source: str
    last_updated: int
    depth: int
    bar_count: int
    swing_points: List[SwingPointSchema]
    events: List[StructuralEventSchema]
    overlay: OverlaySchema
    trend: Optional[str] = None
    has_recent_bullish_msb: bool = False
    has_recent_bearish_msb: bool = False


class ScanResponse(BaseModel):
    """Response schema for /scan."""
    symbols: List[str]
    type: str
    cached: bool
    timestamp: int
