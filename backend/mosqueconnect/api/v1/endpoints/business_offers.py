"""
Business offer management.

Offer status follows the validity window: whenever an offer is created or
edited its status is recomputed with `Offer.refresh_status`. Offers that
nobody touches are moved along by the background sweeper.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from datetime import datetime
from typing import Optional
import enum

from mosqueconnect.core.database import get_db
from mosqueconnect.core.exceptions import ResourceNotFoundError, ValidationError
from mosqueconnect.core.logging_config import logger
from mosqueconnect.models import User, Offer, OfferStatus, DiscountType
from mosqueconnect.models.offer import MAX_PERCENTAGE
from mosqueconnect.modules.auth.dependencies import get_current_business
from mosqueconnect.schemas.common import MessageResponse
from mosqueconnect.schemas.offer import (
    OfferCreate,
    OfferUpdate,
    OfferStatusPatch,
    OfferResponse,
    OfferEnvelope,
    OfferListResponse,
    OfferStats,
)
from mosqueconnect.services.offer_service import compute_offer_stats
from mosqueconnect.api.v1.endpoints.business import get_owned_business
from mosqueconnect.utils.pagination import paginate
from mosqueconnect.utils.queries import get_or_404, search_filter

router = APIRouter()


class OfferSort(str, enum.Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    ENDING_SOON = "ending_soon"
    MOST_USED = "most_used"
    PRIORITY = "priority"


OFFER_SORT_ORDERS = {
    OfferSort.NEWEST: (Offer.created_at.desc(),),
    OfferSort.OLDEST: (Offer.created_at.asc(),),
    OfferSort.ENDING_SOON: (Offer.valid_to.asc(),),
    OfferSort.MOST_USED: (Offer.used_count.desc(),),
    OfferSort.PRIORITY: (Offer.priority.desc(), Offer.created_at.desc()),
}


async def ensure_code_available(db: AsyncSession, code: Optional[str], exclude_id: Optional[str] = None) -> None:
    """Offer codes are unique regardless of case"""
    if not code:
        return
    query = select(Offer.id).where(func.upper(Offer.code) == code.upper())
    if exclude_id:
        query = query.where(Offer.id != exclude_id)
    if await db.scalar(query):
        raise ValidationError("Offer code already exists", field="code")


async def get_owned_offer(db: AsyncSession, business_id: str, offer_id: str) -> Offer:
    offer = await get_or_404(db, Offer, offer_id, "Offer")
    if str(offer.business_id) != str(business_id):
        raise ResourceNotFoundError("Offer", offer_id)
    return offer


@router.get("", response_model=OfferListResponse)
async def list_offers(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Optional[OfferStatus] = Query(None, alias="status"),
    discount_type: Optional[DiscountType] = None,
    featured: Optional[bool] = None,
    search: Optional[str] = None,
    sort: OfferSort = OfferSort.NEWEST,
    current_user: User = Depends(get_current_business),
    db: AsyncSession = Depends(get_db)
):
    """List the caller's offers"""
    business = await get_owned_business(db, current_user)

    query = select(Offer).where(Offer.business_id == business.id)
    if status_filter:
        query = query.where(Offer.status == status_filter)
    if discount_type:
        query = query.where(Offer.discount_type == discount_type)
    if featured is not None:
        query = query.where(Offer.featured == featured)
    if search:
        query = query.where(search_filter(search, [Offer.title, Offer.description, Offer.code]))
    query = query.order_by(*OFFER_SORT_ORDERS[sort])

    offers, pagination = await paginate(db, query, page, limit)
    now = datetime.utcnow()
    return OfferListResponse(
        offers=[OfferResponse.from_offer(o, now) for o in offers],
        pagination=pagination,
    )


@router.post("", response_model=OfferEnvelope, status_code=status.HTTP_201_CREATED)
async def create_offer(
    offer_data: OfferCreate,
    current_user: User = Depends(get_current_business),
    db: AsyncSession = Depends(get_db)
):
    """Create an offer; status starts as requested and is then aligned with the window"""
    business = await get_owned_business(db, current_user)
    await ensure_code_available(db, offer_data.code)

    now = datetime.utcnow()
    offer = Offer(**offer_data.model_dump(), business_id=business.id, used_count=0)
    offer.normalize()
    offer.refresh_status(now)

    db.add(offer)
    await db.commit()
    await db.refresh(offer)

    logger.info(
        f"Offer created: {offer.title} ({offer.id}) status={offer.status.value}",
        extra={"event_type": "offer_created", "offer_id": offer.id, "business_id": business.id},
    )
    return OfferEnvelope(offer=OfferResponse.from_offer(offer, now), message="Offer created successfully")


@router.get("/stats", response_model=OfferStats)
async def offer_stats(
    current_user: User = Depends(get_current_business),
    db: AsyncSession = Depends(get_db)
):
    """Offer dashboard statistics"""
    business = await get_owned_business(db, current_user)
    return await compute_offer_stats(db, business.id)


@router.get("/{offer_id}", response_model=OfferResponse)
async def get_offer(
    offer_id: str,
    current_user: User = Depends(get_current_business),
    db: AsyncSession = Depends(get_db)
):
    business = await get_owned_business(db, current_user)
    offer = await get_owned_offer(db, business.id, offer_id)
    return OfferResponse.from_offer(offer)


@router.put("/{offer_id}", response_model=OfferEnvelope)
async def update_offer(
    offer_id: str,
    updates: OfferUpdate,
    current_user: User = Depends(get_current_business),
    db: AsyncSession = Depends(get_db)
):
    """Edit an offer"""
    business = await get_owned_business(db, current_user)
    offer = await get_owned_offer(db, business.id, offer_id)

    data = updates.model_dump(exclude_unset=True)
    if data.get("code"):
        await ensure_code_available(db, data["code"], exclude_id=offer.id)

    valid_from = data.get("valid_from") or offer.valid_from
    valid_to = data.get("valid_to") or offer.valid_to
    if valid_from >= valid_to:
        raise ValidationError("valid_to must be after valid_from", field="valid_to")

    discount_type = data.get("discount_type") or offer.discount_type
    discount_value = data.get("discount_value") or offer.discount_value
    if discount_type == DiscountType.PERCENTAGE and discount_value > MAX_PERCENTAGE:
        raise ValidationError("Percentage discount cannot exceed 100", field="discount_value")

    if data.get("usage_limit") is not None and data["usage_limit"] < (offer.used_count or 0):
        raise ValidationError("Usage limit cannot be below the current usage count", field="usage_limit")

    for field, value in data.items():
        setattr(offer, field, value)

    now = datetime.utcnow()
    offer.normalize()
    offer.refresh_status(now)

    await db.commit()
    await db.refresh(offer)
    return OfferEnvelope(offer=OfferResponse.from_offer(offer, now), message="Offer updated successfully")


@router.patch("/{offer_id}", response_model=OfferEnvelope)
async def patch_offer(
    offer_id: str,
    patch: OfferStatusPatch,
    current_user: User = Depends(get_current_business),
    db: AsyncSession = Depends(get_db)
):
    """Toggle status or featured flag"""
    business = await get_owned_business(db, current_user)
    offer = await get_owned_offer(db, business.id, offer_id)

    now = datetime.utcnow()
    if patch.status is not None:
        if patch.status == OfferStatus.ACTIVE and now > offer.valid_to:
            raise ValidationError("Cannot activate an offer whose validity window has ended", field="status")
        offer.status = patch.status
    if patch.featured is not None:
        offer.featured = patch.featured

    offer.refresh_status(now)
    await db.commit()
    await db.refresh(offer)
    return OfferEnvelope(offer=OfferResponse.from_offer(offer, now), message="Offer updated successfully")


@router.delete("/{offer_id}", response_model=MessageResponse)
async def delete_offer(
    offer_id: str,
    current_user: User = Depends(get_current_business),
    db: AsyncSession = Depends(get_db)
):
    business = await get_owned_business(db, current_user)
    offer = await get_owned_offer(db, business.id, offer_id)

    await db.delete(offer)
    await db.commit()
    logger.info(f"Offer {offer_id} deleted from business {business.id}")
    return MessageResponse(message="Offer deleted successfully")
