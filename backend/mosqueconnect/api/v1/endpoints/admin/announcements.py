"""
Admin Announcement endpoints - platform-wide announcements.
"""
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional

from mosqueconnect.core.database import get_db
from mosqueconnect.models import User, Announcement, AnnouncementType, TargetAudience
from mosqueconnect.modules.auth.dependencies import get_current_admin
from mosqueconnect.schemas.announcement import (
    AnnouncementCreate,
    AnnouncementUpdate,
    AnnouncementResponse,
    AnnouncementListResponse,
)
from mosqueconnect.schemas.common import MessageResponse
from mosqueconnect.services.activity_logger import log_admin_action
from mosqueconnect.api.v1.endpoints.announcements import announcement_fields, apply_announcement_update
from mosqueconnect.utils.pagination import paginate
from mosqueconnect.utils.queries import get_or_404, search_filter

router = APIRouter()


@router.get("", response_model=AnnouncementListResponse)
async def list_announcements(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    type: Optional[AnnouncementType] = None,
    target_audience: Optional[TargetAudience] = None,
    is_admin_announcement: Optional[bool] = None,
    is_active: Optional[bool] = None,
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Every announcement on the platform, business ones included"""
    query = select(Announcement)
    if type:
        query = query.where(Announcement.type == type)
    if target_audience:
        query = query.where(Announcement.target_audience == target_audience)
    if is_admin_announcement is not None:
        query = query.where(Announcement.is_admin_announcement == is_admin_announcement)
    if is_active is not None:
        query = query.where(Announcement.is_active == is_active)
    if search:
        query = query.where(search_filter(search, [Announcement.title, Announcement.content]))
    query = query.order_by(Announcement.created_at.desc())

    announcements, pagination = await paginate(db, query, page, limit)
    return AnnouncementListResponse(
        announcements=[AnnouncementResponse.model_validate(a) for a in announcements],
        pagination=pagination,
    )


@router.post("", response_model=AnnouncementResponse, status_code=status.HTTP_201_CREATED)
async def create_announcement(
    data: AnnouncementCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    announcement = Announcement(
        **announcement_fields(data),
        business_id=None,
        created_by=current_admin.id,
        is_admin_announcement=True,
    )
    db.add(announcement)
    await db.flush()

    log_admin_action(
        db,
        admin_id=current_admin.id,
        action="CREATE_ANNOUNCEMENT",
        module="announcements",
        target_id=announcement.id,
        details=f"Created announcement {announcement.title}",
        request=request,
    )
    await db.commit()
    await db.refresh(announcement)
    return announcement


@router.put("/{announcement_id}", response_model=AnnouncementResponse)
async def update_announcement(
    announcement_id: str,
    updates: AnnouncementUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    announcement = await get_or_404(db, Announcement, announcement_id, "Announcement")
    apply_announcement_update(announcement, updates)

    log_admin_action(
        db,
        admin_id=current_admin.id,
        action="UPDATE_ANNOUNCEMENT",
        module="announcements",
        target_id=announcement.id,
        details=f"Updated announcement {announcement.title}",
        changes={"fields": sorted(updates.model_dump(exclude_unset=True).keys())},
        request=request,
    )
    await db.commit()
    await db.refresh(announcement)
    return announcement


@router.delete("/{announcement_id}", response_model=MessageResponse)
async def delete_announcement(
    announcement_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    announcement = await get_or_404(db, Announcement, announcement_id, "Announcement")
    log_admin_action(
        db,
        admin_id=current_admin.id,
        action="DELETE_ANNOUNCEMENT",
        module="announcements",
        target_id=announcement.id,
        details=f"Deleted announcement {announcement.title}",
        request=request,
    )
    await db.delete(announcement)
    await db.commit()
    return MessageResponse(message="Announcement deleted successfully")
