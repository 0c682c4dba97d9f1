"""
Admin Volunteer Management endpoints
"""
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional, List

from mosqueconnect.core.database import get_db
from mosqueconnect.models import User, Volunteer, VolunteerRegistrationStatus
from mosqueconnect.modules.auth.dependencies import get_current_admin
from mosqueconnect.schemas.common import ReviewRequest
from mosqueconnect.schemas.volunteer import VolunteerResponse, VolunteerListResponse
from mosqueconnect.services.review_workflow import review_volunteer
from mosqueconnect.utils.pagination import paginate
from mosqueconnect.utils.queries import get_or_404, search_filter

router = APIRouter()


def volunteer_query(
    status: Optional[VolunteerRegistrationStatus] = None,
    search: Optional[str] = None,
    mosque_ids: Optional[List[str]] = None,
):
    """Volunteer registrations, optionally restricted to a set of mosques"""
    query = select(Volunteer)
    if mosque_ids is not None:
        query = query.where(Volunteer.mosque_id.in_(mosque_ids))
    if status:
        query = query.where(Volunteer.status == status)
    if search:
        query = query.where(search_filter(search, [Volunteer.name, Volunteer.email]))
    return query.order_by(Volunteer.created_at.desc())


@router.get("", response_model=VolunteerListResponse)
async def list_volunteers(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[VolunteerRegistrationStatus] = None,
    mosque_id: Optional[str] = None,
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    query = volunteer_query(status, search, [mosque_id] if mosque_id else None)
    volunteers, pagination = await paginate(db, query, page, limit)
    return VolunteerListResponse(
        volunteers=[VolunteerResponse.model_validate(v) for v in volunteers],
        pagination=pagination,
    )


@router.get("/{volunteer_id}", response_model=VolunteerResponse)
async def get_volunteer(
    volunteer_id: str,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    return await get_or_404(db, Volunteer, volunteer_id, "Volunteer")


@router.patch("/{volunteer_id}", response_model=VolunteerResponse)
async def review_volunteer_registration(
    volunteer_id: str,
    body: ReviewRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Approve or reject a volunteer; the user's volunteer status follows"""
    volunteer = await get_or_404(db, Volunteer, volunteer_id, "Volunteer")
    volunteer = await review_volunteer(db, volunteer, body.status, current_admin, notes=body.notes, request=request)
    await db.refresh(volunteer)
    return volunteer
