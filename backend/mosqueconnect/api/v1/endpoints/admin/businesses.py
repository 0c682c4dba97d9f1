"""
Admin Business Management endpoints
"""
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from typing import Optional

from mosqueconnect.core.database import get_db
from mosqueconnect.core.logging_config import logger
from mosqueconnect.models import (
    User,
    Business,
    BusinessCategory,
    BusinessStatus,
    VerificationStatus,
    Product,
    Offer,
    HalalCertification,
    Announcement,
)
from mosqueconnect.modules.auth.dependencies import get_current_admin
from mosqueconnect.schemas.business import BusinessResponse, BusinessListResponse, BusinessStatusUpdate
from mosqueconnect.schemas.common import MessageResponse, ReviewRequest
from mosqueconnect.services.activity_logger import log_admin_action
from mosqueconnect.services.review_workflow import review_business
from mosqueconnect.utils.pagination import paginate
from mosqueconnect.utils.queries import get_or_404, search_filter

router = APIRouter()


@router.get("", response_model=BusinessListResponse)
async def list_businesses(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    verification_status: Optional[VerificationStatus] = None,
    status: Optional[BusinessStatus] = None,
    category: Optional[BusinessCategory] = None,
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """List businesses regardless of verification or operational status"""
    query = select(Business)
    if verification_status:
        query = query.where(Business.verification_status == verification_status)
    if status:
        query = query.where(Business.status == status)
    if category:
        query = query.where(Business.category == category)
    if search:
        query = query.where(search_filter(search, [Business.name, Business.email, Business.city]))
    query = query.order_by(Business.created_at.desc())

    businesses, pagination = await paginate(db, query, page, limit)
    return BusinessListResponse(
        businesses=[BusinessResponse.model_validate(b) for b in businesses],
        pagination=pagination,
    )


@router.get("/{business_id}", response_model=BusinessResponse)
async def get_business(
    business_id: str,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    return await get_or_404(db, Business, business_id, "Business")


@router.patch("/{business_id}", response_model=BusinessResponse)
async def review_business_verification(
    business_id: str,
    body: ReviewRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Verify or reject a business ("approved" means verified)"""
    business = await get_or_404(db, Business, business_id, "Business")
    business = await review_business(db, business, body.status, current_admin, notes=body.notes, request=request)
    await db.refresh(business)
    return business


@router.patch("/{business_id}/status", response_model=BusinessResponse)
async def update_business_status(
    business_id: str,
    body: BusinessStatusUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Change a business's operational status or featured flag"""
    business = await get_or_404(db, Business, business_id, "Business")

    changes = {}
    if body.status is not None and body.status != business.status:
        changes["status"] = {"from": business.status.value, "to": body.status.value}
        business.status = body.status
    if body.featured is not None and body.featured != business.featured:
        changes["featured"] = {"from": business.featured, "to": body.featured}
        business.featured = body.featured

    if changes:
        log_admin_action(
            db,
            admin_id=current_admin.id,
            action="UPDATE_BUSINESS_STATUS",
            module="businesses",
            target_id=business.id,
            details=f"Updated business {business.name}",
            changes=changes,
            request=request,
        )
        await db.commit()
        await db.refresh(business)

    return business


@router.delete("/{business_id}", response_model=MessageResponse)
async def delete_business(
    business_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    business = await get_or_404(db, Business, business_id, "Business")
    log_admin_action(
        db,
        admin_id=current_admin.id,
        action="DELETE_BUSINESS",
        module="businesses",
        target_id=business.id,
        details=f"Deleted business {business.name}",
        request=request,
    )
    # Dependent rows go first; SQLite does not enforce ON DELETE CASCADE by default
    for model in (Product, Offer, HalalCertification, Announcement):
        await db.execute(delete(model).where(model.business_id == business.id))
    await db.delete(business)
    await db.commit()

    logger.info(f"Business {business_id} deleted by admin {current_admin.email}")
    return MessageResponse(message="Business deleted successfully")
