"""
Structure + Scan Router

Thin FastAPI router that delegates to StructureService and CoinScanner.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from clickcoin.api.dependencies import get_coin_scanner, get_structure_service
from clickcoin.api.schemas import ScanResponse, StructureResponse
from clickcoin.screener.coin_scanner import CoinScanner, ScanType
from clickcoin.services.structure_service import StructureService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["structure"])


@router.get("/structure/{symbol}", response_model=StructureResponse)
def get_structure(
    symbol: str,
    depth: Optional[int] = Query(None, ge=1, le=50, description="Pivot window (default: adaptive)"),
    service: StructureService = Depends(get_structure_service),
):
    """Swing points, BOS/MSB events and chart overlay for a coin."""
    try:
        return service.get_structure(symbol, depth=depth)
    except Exception as e:
        logger.error(f"[structure] Error for {symbol}: {e}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to analyze structure: {str(e)}",
        )


@router.get("/scan", response_model=ScanResponse)
async def scan(
    type: str = Query("rising", description="rising, volume, popular or msb"),
    force_refresh: bool = Query(False),
    scanner: CoinScanner = Depends(get_coin_scanner),
):
    """Top symbols of the watchlist for a ranking type."""
    try:
        scan_type = ScanType(type)
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail=f"type must be one of: {', '.join(t.value for t in ScanType)}",
        )

    cached = not force_refresh and scanner.is_cached(scan_type)
    try:
        report = await scanner.scan(scan_type, force_refresh=force_refresh)
    except Exception as e:
        logger.error(f"[scan] Scan failed: {e}")
        raise HTTPException(status_code=500, detail="Scan failed")

    return ScanResponse(
        symbols=report.symbols,
        type=report.scan_type,
        cached=cached,
        timestamp=report.timestamp,
    )
