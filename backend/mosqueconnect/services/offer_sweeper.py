"""
Offer Status Sweeper

Background service that keeps offer status in step with the validity window:

- draft offers whose window contains now become active
- active offers past valid_to become expired

Reads never mutate status; this periodic sweep (plus the recomputation when an
offer itself is created or updated) is the only place status changes with time.
"""

import asyncio
from datetime import datetime, timedelta
from typing import Dict, Optional, Callable

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from mosqueconnect.core.config import settings
from mosqueconnect.core.database import AsyncSessionLocal
from mosqueconnect.core.logging_config import logger
from mosqueconnect.models.offer import Offer, OfferStatus


async def sweep_offer_statuses(db: AsyncSession, now: Optional[datetime] = None) -> Dict[str, int]:
    """Run one sweep pass on the given session and commit it"""
    now = now or datetime.utcnow()

    activated = await db.execute(
        update(Offer)
        .where(
            Offer.status == OfferStatus.DRAFT,
            Offer.valid_from <= now,
            Offer.valid_to >= now,
        )
        .values(status=OfferStatus.ACTIVE, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    expired = await db.execute(
        update(Offer)
        .where(
            Offer.status == OfferStatus.ACTIVE,
            Offer.valid_to < now,
        )
        .values(status=OfferStatus.EXPIRED, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    await db.commit()

    return {"activated": activated.rowcount or 0, "expired": expired.rowcount or 0}


class OfferStatusSweeper:
    """Periodic asyncio task running sweep_offer_statuses"""

    def __init__(
        self,
        interval_seconds: int = settings.OFFER_SWEEP_INTERVAL_SECONDS,
        session_factory: Callable[[], AsyncSession] = AsyncSessionLocal,
    ):
        self.interval = timedelta(seconds=interval_seconds)
        self.session_factory = session_factory

        self.running = False
        self._task: Optional[asyncio.Task] = None

        self.stats = {
            "total_activated": 0,
            "total_expired": 0,
            "last_sweep": None,
        }

    async def start(self):
        """Start the background sweep loop"""
        if self.running:
            logger.warning("[OfferSweeper] Service already running")
            return

        self.running = True
        self._task = asyncio.create_task(self._sweep_loop())
        logger.info(f"[OfferSweeper] Started - Interval: {self.interval}")

    async def stop(self):
        """Stop the sweep loop"""
        self.running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("[OfferSweeper] Stopped")

    async def _sweep_loop(self):
        while self.running:
            try:
                await self.sweep()
            except Exception as e:
                logger.error(f"[OfferSweeper] Error in sweep loop: {e}", exc_info=True)

            await asyncio.sleep(self.interval.total_seconds())

    async def sweep(self, now: Optional[datetime] = None) -> Dict[str, int]:
        """Run a single pass in a fresh session"""
        async with self.session_factory() as session:
            result = await sweep_offer_statuses(session, now)

        self.stats["total_activated"] += result["activated"]
        self.stats["total_expired"] += result["expired"]
        self.stats["last_sweep"] = (now or datetime.utcnow()).isoformat()

        if result["activated"] or result["expired"]:
            logger.info(
                f"[OfferSweeper] Activated {result['activated']}, expired {result['expired']}",
                extra={"event_type": "offer_sweep", **result},
            )
        return result


# Singleton instance
offer_sweeper = OfferStatusSweeper()
