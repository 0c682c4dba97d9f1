"""Offer redemption and dashboard statistics"""
from collections import Counter, defaultdict
from datetime import datetime, timedelta
from typing import Optional, Dict, Any, List

from sqlalchemy import select, update, or_, func
from sqlalchemy.ext.asyncio import AsyncSession

from mosqueconnect.core.config import settings
from mosqueconnect.core.exceptions import OfferNotValidError, OfferUsageLimitError
from mosqueconnect.core.logging_config import logger
from mosqueconnect.models.offer import Offer, OfferStatus


async def redeem_offer(db: AsyncSession, offer: Offer, now: Optional[datetime] = None) -> Offer:
    """
    Record one use of an offer.

    The increment is a single conditional UPDATE, so concurrent redemptions
    can never push used_count past usage_limit.
    """
    now = now or datetime.utcnow()
    offer_id, usage_limit = offer.id, offer.usage_limit
    if offer.limit_reached():
        raise OfferUsageLimitError(offer_id, usage_limit)
    if not offer.is_valid(now):
        raise OfferNotValidError(offer_id)

    stmt = (
        update(Offer)
        .where(
            Offer.id == offer_id,
            Offer.status == OfferStatus.ACTIVE,
            or_(Offer.usage_limit.is_(None), Offer.used_count < Offer.usage_limit),
        )
        .values(used_count=Offer.used_count + 1, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    if result.rowcount == 0:
        await db.rollback()
        raise OfferUsageLimitError(offer_id, usage_limit)

    await db.commit()
    await db.refresh(offer)
    logger.info(
        f"Offer {offer.id} redeemed ({offer.used_count}/{offer.usage_limit or 'unlimited'})",
        extra={"event_type": "offer_redeemed", "offer_id": offer.id, "used_count": offer.used_count},
    )
    return offer


def _summary(offer: Offer) -> Dict[str, Any]:
    return {
        "id": offer.id,
        "title": offer.title,
        "status": offer.status.value,
        "used_count": offer.used_count or 0,
        "valid_to": offer.valid_to,
    }


async def compute_offer_stats(db: AsyncSession, business_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Aggregate a business's offers for the dashboard"""
    now = now or datetime.utcnow()

    status_rows = await db.execute(
        select(Offer.status, func.count(Offer.id))
        .where(Offer.business_id == business_id)
        .group_by(Offer.status)
    )
    by_status = {status.value: count for status, count in status_rows.all()}

    result = await db.execute(select(Offer).where(Offer.business_id == business_id))
    offers: List[Offer] = list(result.scalars().all())

    performance = defaultdict(lambda: {"count": 0, "total_usage": 0, "value_sum": 0.0})
    for offer in offers:
        bucket = performance[offer.discount_type.value]
        bucket["count"] += 1
        bucket["total_usage"] += offer.used_count or 0
        bucket["value_sum"] += offer.discount_value or 0

    soon = now + timedelta(days=settings.OFFER_EXPIRING_SOON_DAYS)
    expiring = [
        o for o in offers
        if o.status == OfferStatus.ACTIVE and now <= o.valid_to <= soon
    ]

    year_ago = now - timedelta(days=365)
    monthly = Counter(o.created_at.strftime("%Y-%m") for o in offers if o.created_at and o.created_at >= year_ago)

    return {
        "total_offers": len(offers),
        "active_offers": by_status.get(OfferStatus.ACTIVE.value, 0),
        "draft_offers": by_status.get(OfferStatus.DRAFT.value, 0),
        "inactive_offers": by_status.get(OfferStatus.INACTIVE.value, 0),
        "expired_offers": by_status.get(OfferStatus.EXPIRED.value, 0),
        "featured_offers": sum(1 for o in offers if o.featured),
        "total_usage": sum(o.used_count or 0 for o in offers),
        "performance_by_type": [
            {
                "discount_type": discount_type,
                "count": data["count"],
                "total_usage": data["total_usage"],
                "average_value": round(data["value_sum"] / data["count"], 2),
            }
            for discount_type, data in sorted(performance.items())
        ],
        "top_offers": [_summary(o) for o in sorted(offers, key=lambda o: o.used_count or 0, reverse=True)[:5]],
        "recent_offers": [_summary(o) for o in sorted(offers, key=lambda o: o.created_at, reverse=True)[:5]],
        "expiring_soon": [_summary(o) for o in sorted(expiring, key=lambda o: o.valid_to)],
        "monthly_created": dict(sorted(monthly.items())),
    }
