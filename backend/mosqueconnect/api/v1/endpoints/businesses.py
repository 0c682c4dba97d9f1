"""Public business directory"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, cast, String
from typing import Optional
import enum

from mosqueconnect.core.database import get_db
from mosqueconnect.core.exceptions import ResourceNotFoundError
from mosqueconnect.models import Business, BusinessCategory, BusinessStatus, VerificationStatus
from mosqueconnect.schemas.business import BusinessResponse, BusinessListResponse
from mosqueconnect.utils.pagination import paginate
from mosqueconnect.utils.queries import get_or_404, search_filter

router = APIRouter()


class BusinessSort(str, enum.Enum):
    RECOMMENDED = "recommended"
    NEWEST = "newest"
    NAME = "name"
    RATING = "rating"


SORT_ORDERS = {
    BusinessSort.RECOMMENDED: (
        Business.featured.desc(),
        Business.average_rating.desc(),
        Business.created_at.desc(),
    ),
    BusinessSort.NEWEST: (Business.created_at.desc(),),
    BusinessSort.NAME: (Business.name.asc(),),
    BusinessSort.RATING: (Business.average_rating.desc(), Business.total_reviews.desc()),
}


@router.get("", response_model=BusinessListResponse)
async def list_businesses(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    search: Optional[str] = None,
    location: Optional[str] = Query(None, description="City or state"),
    category: Optional[BusinessCategory] = None,
    verified: Optional[bool] = None,
    featured: Optional[bool] = None,
    sort: BusinessSort = BusinessSort.RECOMMENDED,
    db: AsyncSession = Depends(get_db)
):
    """List active businesses"""
    query = select(Business).where(Business.status == BusinessStatus.ACTIVE)

    if search:
        query = query.where(
            search_filter(search, [Business.name, Business.description, cast(Business.tags, String)])
        )
    if location:
        query = query.where(search_filter(location, [Business.city, Business.state]))
    if category:
        query = query.where(Business.category == category)
    if verified is not None:
        if verified:
            query = query.where(Business.verification_status == VerificationStatus.VERIFIED)
        else:
            query = query.where(Business.verification_status != VerificationStatus.VERIFIED)
    if featured is not None:
        query = query.where(Business.featured == featured)

    query = query.order_by(*SORT_ORDERS[sort])

    businesses, pagination = await paginate(db, query, page, limit)
    return BusinessListResponse(
        businesses=[BusinessResponse.model_validate(b) for b in businesses],
        pagination=pagination,
    )


@router.get("/{business_id}", response_model=BusinessResponse)
async def get_business(
    business_id: str,
    db: AsyncSession = Depends(get_db)
):
    """Get an active business"""
    business = await get_or_404(db, Business, business_id, "Business")
    if business.status != BusinessStatus.ACTIVE:
        raise ResourceNotFoundError("Business", business_id)
    return business
