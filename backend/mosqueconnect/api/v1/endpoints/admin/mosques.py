"""
Admin Mosque Management endpoints
"""
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional

from mosqueconnect.core.database import get_db
from mosqueconnect.core.logging_config import logger
from mosqueconnect.models import User, Mosque, MosqueStatus
from mosqueconnect.modules.auth.dependencies import get_current_admin
from mosqueconnect.schemas.common import MessageResponse, ReviewRequest
from mosqueconnect.schemas.mosque import MosqueResponse, MosqueListResponse
from mosqueconnect.services.activity_logger import log_admin_action
from mosqueconnect.services.review_workflow import review_mosque
from mosqueconnect.api.v1.endpoints.mosques import apply_mosque_filters, delete_mosque_records
from mosqueconnect.utils.pagination import paginate
from mosqueconnect.utils.queries import get_or_404, search_filter

router = APIRouter()


@router.get("", response_model=MosqueListResponse)
async def list_mosques(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[MosqueStatus] = None,
    city: Optional[str] = None,
    state: Optional[str] = None,
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """List mosques of every status, newest first"""
    query = apply_mosque_filters(select(Mosque), status, city, state)
    if search:
        query = query.where(search_filter(search, [Mosque.name, Mosque.street, Mosque.email]))
    query = query.order_by(Mosque.created_at.desc())

    mosques, pagination = await paginate(db, query, page, limit)
    return MosqueListResponse(
        mosques=[MosqueResponse.model_validate(m) for m in mosques],
        pagination=pagination,
    )


@router.get("/{mosque_id}", response_model=MosqueResponse)
async def get_mosque(
    mosque_id: str,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    return await get_or_404(db, Mosque, mosque_id, "Mosque")


@router.patch("/{mosque_id}", response_model=MosqueResponse)
async def review_mosque_status(
    mosque_id: str,
    body: ReviewRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Approve or reject a pending mosque"""
    mosque = await get_or_404(db, Mosque, mosque_id, "Mosque")
    mosque = await review_mosque(db, mosque, body.status, current_admin, notes=body.notes, request=request)
    await db.refresh(mosque)
    return mosque


@router.delete("/{mosque_id}", response_model=MessageResponse)
async def delete_mosque(
    mosque_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    mosque = await get_or_404(db, Mosque, mosque_id, "Mosque")
    log_admin_action(
        db,
        admin_id=current_admin.id,
        action="DELETE_MOSQUE",
        module="mosques",
        target_id=mosque.id,
        details=f"Deleted mosque {mosque.name}",
        request=request,
    )
    await delete_mosque_records(db, mosque)
    await db.commit()

    logger.info(f"Mosque {mosque_id} deleted by admin {current_admin.email}")
    return MessageResponse(message="Mosque deleted successfully")
