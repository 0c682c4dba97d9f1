"""
Aladhan prayer times client.

Fetches a month of prayer times for a coordinate pair from the public
Aladhan calendar API.
"""
from typing import Dict, Any, Optional
import httpx

from mosqueconnect.core.config import settings
from mosqueconnect.core.exceptions import ExternalServiceError
from mosqueconnect.core.logging_config import logger


class PrayerTimesClient:
    """Thin async wrapper around the Aladhan calendar endpoint"""

    SERVICE_NAME = "Aladhan"

    def __init__(
        self,
        base_url: str = settings.PRAYER_TIMES_API_URL,
        timeout: float = settings.PRAYER_TIMES_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def get_calendar(
        self,
        latitude: float,
        longitude: float,
        method: int,
        month: int,
        year: int,
    ) -> Dict[str, Any]:
        """Return the upstream JSON document for one month"""
        url = f"{self.base_url}/{year}/{month}"
        params = {"latitude": latitude, "longitude": longitude, "method": method}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(url, params=params)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"[PrayerTimes] HTTP error: {e.response.status_code} - {e.response.text[:200]}")
            raise ExternalServiceError(self.SERVICE_NAME, f"status {e.response.status_code}")
        except httpx.RequestError as e:
            logger.error(f"[PrayerTimes] Request error: {e}")
            raise ExternalServiceError(self.SERVICE_NAME, str(e) or e.__class__.__name__)


# Singleton instance
prayer_times_client = PrayerTimesClient()
