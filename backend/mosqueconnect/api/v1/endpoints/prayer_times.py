from fastapi import APIRouter, Query
from datetime import datetime
from typing import Optional, Dict, Any

from mosqueconnect.core.config import settings
from mosqueconnect.services.prayer_times import prayer_times_client

router = APIRouter()


@router.get("/prayer-times")
async def get_prayer_times(
    latitude: float = Query(settings.PRAYER_TIMES_DEFAULT_LATITUDE, ge=-90, le=90),
    longitude: float = Query(settings.PRAYER_TIMES_DEFAULT_LONGITUDE, ge=-180, le=180),
    method: int = Query(settings.PRAYER_TIMES_DEFAULT_METHOD, ge=0, le=99),
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1900, le=2200),
) -> Dict[str, Any]:
    """Monthly prayer calendar (defaults: New York, ISNA, current month)"""
    today = datetime.utcnow()
    data = await prayer_times_client.get_calendar(
        latitude=latitude,
        longitude=longitude,
        method=method,
        month=month or today.month,
        year=year or today.year,
    )
    return {"success": True, "data": data}
