"""
Admin Halal Certification endpoints.

Certifications move pending -> under_review -> approved | rejected. Approval
marks the business as halal certified until the certificate's expiry date.
"""
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional

from mosqueconnect.core.database import get_db
from mosqueconnect.models import User, HalalCertification, CertificationStatus
from mosqueconnect.modules.auth.dependencies import get_current_admin
from mosqueconnect.schemas.certification import (
    CertificationResponse,
    CertificationListResponse,
    CertificationReviewResponse,
)
from mosqueconnect.schemas.common import ReviewRequest
from mosqueconnect.services.review_workflow import review_certification
from mosqueconnect.utils.pagination import paginate
from mosqueconnect.utils.queries import get_or_404, search_filter

router = APIRouter()


def certification_query(
    status: Optional[CertificationStatus] = None,
    search: Optional[str] = None,
    business_id: Optional[str] = None,
):
    query = select(HalalCertification)
    if status:
        query = query.where(HalalCertification.status == status)
    if business_id:
        query = query.where(HalalCertification.business_id == business_id)
    if search:
        query = query.where(search_filter(search, [
            HalalCertification.business_name,
            HalalCertification.city,
            HalalCertification.contact_name,
        ]))
    return query.order_by(HalalCertification.request_date.desc())


async def apply_certification_review(
    db: AsyncSession,
    certification_id: str,
    body: ReviewRequest,
    reviewer: User,
    request: Request,
) -> CertificationReviewResponse:
    """Shared by the admin and imam review endpoints"""
    certification = await get_or_404(db, HalalCertification, certification_id, "Halal certification")
    certification = await review_certification(
        db, certification, body.status, reviewer, notes=body.notes, request=request
    )
    await db.refresh(certification)
    label = certification.status.value.replace("_", " ")
    return CertificationReviewResponse(
        message=f"Certification {label}",
        certification=CertificationResponse.model_validate(certification),
    )


@router.get("", response_model=CertificationListResponse)
async def list_certifications(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[CertificationStatus] = None,
    business_id: Optional[str] = None,
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    query = certification_query(status, search, business_id)
    certifications, pagination = await paginate(db, query, page, limit)
    return CertificationListResponse(
        certifications=[CertificationResponse.model_validate(c) for c in certifications],
        pagination=pagination,
    )


@router.get("/{certification_id}", response_model=CertificationResponse)
async def get_certification(
    certification_id: str,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    return await get_or_404(db, HalalCertification, certification_id, "Halal certification")


@router.patch("/{certification_id}", response_model=CertificationReviewResponse)
async def review_certification_request(
    certification_id: str,
    body: ReviewRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Move a certification request to under_review, approved or rejected"""
    return await apply_certification_review(db, certification_id, body, current_admin, request)
