"""
Imam workspace.

Imams see the mosques they lead, review volunteers registered for those
mosques and act as halal certifiers. Admins can use every route here too and
are not restricted to particular mosques.
"""
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional

from mosqueconnect.core.database import get_db
from mosqueconnect.core.exceptions import AuthorizationError
from mosqueconnect.models import (
    User,
    UserRole,
    Mosque,
    MosqueStatus,
    Volunteer,
    VolunteerRegistrationStatus,
    CertificationStatus,
)
from mosqueconnect.modules.auth.dependencies import get_current_imam
from mosqueconnect.schemas.certification import (
    CertificationResponse,
    CertificationListResponse,
    CertificationReviewResponse,
)
from mosqueconnect.schemas.common import ReviewRequest
from mosqueconnect.schemas.mosque import MosqueResponse, MosqueListResponse
from mosqueconnect.schemas.volunteer import VolunteerResponse, VolunteerListResponse
from mosqueconnect.services.review_workflow import review_volunteer
from mosqueconnect.api.v1.endpoints.mosques import owned_mosque_ids
from mosqueconnect.api.v1.endpoints.admin.volunteers import volunteer_query
from mosqueconnect.api.v1.endpoints.admin.halal_certifications import (
    certification_query,
    apply_certification_review,
)
from mosqueconnect.utils.pagination import paginate
from mosqueconnect.utils.queries import get_or_404

router = APIRouter()


@router.get("/mosques", response_model=MosqueListResponse)
async def my_mosques(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[MosqueStatus] = None,
    current_user: User = Depends(get_current_imam),
    db: AsyncSession = Depends(get_db)
):
    """Mosques led by the calling imam, every status"""
    query = select(Mosque).where(Mosque.imam_id == current_user.id)
    if status:
        query = query.where(Mosque.status == status)
    query = query.order_by(Mosque.created_at.desc())

    mosques, pagination = await paginate(db, query, page, limit)
    return MosqueListResponse(
        mosques=[MosqueResponse.model_validate(m) for m in mosques],
        pagination=pagination,
    )


# ==================== Volunteers ====================

@router.get("/volunteers", response_model=VolunteerListResponse)
async def list_mosque_volunteers(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[VolunteerRegistrationStatus] = None,
    search: Optional[str] = None,
    current_user: User = Depends(get_current_imam),
    db: AsyncSession = Depends(get_db)
):
    """Volunteers registered for the imam's mosques (all volunteers for admins)"""
    mosque_ids = None
    if current_user.role != UserRole.ADMIN:
        mosque_ids = await owned_mosque_ids(db, current_user)

    volunteers, pagination = await paginate(db, volunteer_query(status, search, mosque_ids), page, limit)
    return VolunteerListResponse(
        volunteers=[VolunteerResponse.model_validate(v) for v in volunteers],
        pagination=pagination,
    )


@router.patch("/volunteers/{volunteer_id}", response_model=VolunteerResponse)
async def review_mosque_volunteer(
    volunteer_id: str,
    body: ReviewRequest,
    request: Request,
    current_user: User = Depends(get_current_imam),
    db: AsyncSession = Depends(get_db)
):
    """Approve or reject a volunteer registered for one of the imam's mosques"""
    volunteer = await get_or_404(db, Volunteer, volunteer_id, "Volunteer")

    if current_user.role != UserRole.ADMIN:
        mosque_ids = await owned_mosque_ids(db, current_user)
        if volunteer.mosque_id is None or str(volunteer.mosque_id) not in mosque_ids:
            raise AuthorizationError("You can only review volunteers registered for your mosques")

    volunteer = await review_volunteer(db, volunteer, body.status, current_user, notes=body.notes, request=request)
    await db.refresh(volunteer)
    return volunteer


# ==================== Halal certification ====================

@router.get("/halal-certification-requests", response_model=CertificationListResponse)
async def list_certification_requests(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status: Optional[CertificationStatus] = None,
    search: Optional[str] = None,
    current_user: User = Depends(get_current_imam),
    db: AsyncSession = Depends(get_db)
):
    certifications, pagination = await paginate(db, certification_query(status, search), page, limit)
    return CertificationListResponse(
        certifications=[CertificationResponse.model_validate(c) for c in certifications],
        pagination=pagination,
    )


@router.patch("/halal-certification-requests/{request_id}", response_model=CertificationReviewResponse)
async def review_certification_request(
    request_id: str,
    body: ReviewRequest,
    request: Request,
    current_user: User = Depends(get_current_imam),
    db: AsyncSession = Depends(get_db)
):
    return await apply_certification_review(db, request_id, body, current_user, request)
