"""
Volunteer marketplace.

- applications: a user applies to volunteer at a mosque; the mosque's imam
  (or an admin) reviews it and the applicant may withdraw it
- needs: openings posted by a mosque that users apply to
- offers: users advertise their availability and imams register interest
"""
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from typing import Optional
import enum

from mosqueconnect.core.database import get_db
from mosqueconnect.core.exceptions import (
    AuthorizationError,
    ConflictError,
    ResourceNotFoundError,
    ValidationError,
)
from mosqueconnect.core.logging_config import logger
from mosqueconnect.models import (
    User,
    UserRole,
    Mosque,
    MosqueStatus,
    VolunteerApplication,
    ApplicationStatus,
    VolunteerCategory,
    Priority,
    VolunteerNeed,
    VolunteerNeedApplicant,
    NeedStatus,
    VolunteerOffer,
    VolunteerOfferInterest,
    VolunteerOfferStatus,
)
from mosqueconnect.modules.auth.dependencies import get_current_user, get_current_imam
from mosqueconnect.schemas.common import MessageResponse
from mosqueconnect.schemas.volunteer import (
    ApplicationCreate,
    ApplicationUpdate,
    ApplicationResponse,
    ApplicationListResponse,
    NeedCreate,
    NeedUpdate,
    NeedResponse,
    NeedListResponse,
    NeedApply,
    ApplicantStatusUpdate,
    VolunteerOfferCreate,
    VolunteerOfferResponse,
    VolunteerOfferListResponse,
    InterestCreate,
)
from mosqueconnect.services.review_workflow import respond_to_application, withdraw_application
from mosqueconnect.api.v1.endpoints.mosques import owned_mosque_ids
from mosqueconnect.utils.pagination import paginate
from mosqueconnect.utils.queries import get_or_404, search_filter

router = APIRouter()


async def manages_mosque(db: AsyncSession, user: User, mosque_id: str) -> bool:
    if user.role == UserRole.ADMIN:
        return True
    if user.role != UserRole.IMAM:
        return False
    return str(mosque_id) in await owned_mosque_ids(db, user)


async def get_approved_mosque(db: AsyncSession, mosque_id: str) -> Mosque:
    mosque = await get_or_404(db, Mosque, mosque_id, "Mosque")
    if mosque.status != MosqueStatus.APPROVED:
        raise ValidationError("Mosque is not accepting volunteers", field="mosque_id")
    return mosque


# ==================== Applications ====================

@router.get("/applications", response_model=ApplicationListResponse)
async def list_applications(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    status_filter: Optional[ApplicationStatus] = Query(None, alias="status"),
    mosque_id: Optional[str] = None,
    category: Optional[VolunteerCategory] = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Applications visible to the caller (own, own mosques', or all for admins)"""
    query = select(VolunteerApplication)

    if current_user.role == UserRole.IMAM:
        mosque_ids = await owned_mosque_ids(db, current_user)
        query = query.where(or_(
            VolunteerApplication.mosque_id.in_(mosque_ids),
            VolunteerApplication.user_id == current_user.id,
        ))
    elif current_user.role != UserRole.ADMIN:
        query = query.where(VolunteerApplication.user_id == current_user.id)

    if status_filter:
        query = query.where(VolunteerApplication.status == status_filter)
    if mosque_id:
        query = query.where(VolunteerApplication.mosque_id == mosque_id)
    if category:
        query = query.where(VolunteerApplication.category == category)
    query = query.order_by(VolunteerApplication.created_at.desc())

    applications, pagination = await paginate(db, query, page, limit)
    return ApplicationListResponse(
        applications=[ApplicationResponse.model_validate(a) for a in applications],
        pagination=pagination,
    )


@router.post("/applications", response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED)
async def create_application(
    data: ApplicationCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Apply to volunteer at a mosque"""
    await get_approved_mosque(db, data.mosque_id)

    open_application = await db.scalar(
        select(VolunteerApplication.id).where(
            VolunteerApplication.user_id == current_user.id,
            VolunteerApplication.mosque_id == data.mosque_id,
            VolunteerApplication.status.in_([ApplicationStatus.PENDING, ApplicationStatus.REVIEWED]),
        )
    )
    if open_application:
        raise ValidationError("You already have an open application for this mosque", field="mosque_id")

    fields = data.model_dump()
    fields["contact_email"] = fields.get("contact_email") or current_user.email
    fields["contact_phone"] = fields.get("contact_phone") or current_user.phone

    application = VolunteerApplication(**fields, user_id=current_user.id)
    db.add(application)
    await db.commit()
    await db.refresh(application)

    logger.info(f"Volunteer application {application.id} submitted to mosque {data.mosque_id}")
    return application


async def get_visible_application(db: AsyncSession, user: User, application_id: str) -> VolunteerApplication:
    application = await get_or_404(db, VolunteerApplication, application_id, "Application")
    if str(application.user_id) == str(user.id) or await manages_mosque(db, user, application.mosque_id):
        return application
    raise AuthorizationError("Not authorized to access this application")


@router.get("/applications/{application_id}", response_model=ApplicationResponse)
async def get_application(
    application_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await get_visible_application(db, current_user, application_id)


@router.patch("/applications/{application_id}", response_model=ApplicationResponse)
async def update_application(
    application_id: str,
    update: ApplicationUpdate,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Withdraw (applicant) or review (mosque imam / admin) an application"""
    application = await get_or_404(db, VolunteerApplication, application_id, "Application")

    if update.status == ApplicationStatus.WITHDRAWN:
        if str(application.user_id) != str(current_user.id):
            raise AuthorizationError("Only the applicant can withdraw an application")
        return await withdraw_application(db, application)

    if not await manages_mosque(db, current_user, application.mosque_id):
        raise AuthorizationError("Only the mosque's imam or an admin can review this application")

    return await respond_to_application(
        db,
        application,
        update.status,
        current_user,
        message=update.message,
        notes=update.notes,
        request=request,
    )


# ==================== Needs ====================

async def get_manageable_need(db: AsyncSession, user: User, need_id: str) -> VolunteerNeed:
    need = await get_or_404(db, VolunteerNeed, need_id, "Volunteer need")
    if not await manages_mosque(db, user, need.mosque_id):
        raise AuthorizationError("Only the mosque's imam or an admin can manage this need")
    return need


@router.get("/needs", response_model=NeedListResponse)
async def list_needs(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status_filter: NeedStatus = Query(NeedStatus.ACTIVE, alias="status"),
    category: Optional[VolunteerCategory] = None,
    urgency: Optional[Priority] = None,
    mosque_id: Optional[str] = None,
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db)
):
    """Open volunteer needs"""
    query = select(VolunteerNeed).where(VolunteerNeed.status == status_filter)
    if category:
        query = query.where(VolunteerNeed.category == category)
    if urgency:
        query = query.where(VolunteerNeed.urgency == urgency)
    if mosque_id:
        query = query.where(VolunteerNeed.mosque_id == mosque_id)
    if search:
        query = query.where(search_filter(search, [VolunteerNeed.title, VolunteerNeed.description]))
    query = query.order_by(VolunteerNeed.created_at.desc())

    needs, pagination = await paginate(db, query, page, limit)
    return NeedListResponse(
        needs=[NeedResponse.model_validate(n) for n in needs],
        pagination=pagination,
    )


@router.post("/needs", response_model=NeedResponse, status_code=status.HTTP_201_CREATED)
async def create_need(
    data: NeedCreate,
    current_user: User = Depends(get_current_imam),
    db: AsyncSession = Depends(get_db)
):
    """Post a volunteer need for a mosque the caller manages"""
    await get_or_404(db, Mosque, data.mosque_id, "Mosque")
    if not await manages_mosque(db, current_user, data.mosque_id):
        raise AuthorizationError("You can only post needs for your own mosque")

    need = VolunteerNeed(**data.model_dump(), posted_by=current_user.id, applicants=[])
    db.add(need)
    await db.commit()
    await db.refresh(need)

    logger.info(f"Volunteer need {need.id} posted for mosque {data.mosque_id}")
    return need


@router.get("/needs/{need_id}", response_model=NeedResponse)
async def get_need(
    need_id: str,
    db: AsyncSession = Depends(get_db)
):
    return await get_or_404(db, VolunteerNeed, need_id, "Volunteer need")


@router.put("/needs/{need_id}", response_model=NeedResponse)
async def update_need(
    need_id: str,
    updates: NeedUpdate,
    current_user: User = Depends(get_current_imam),
    db: AsyncSession = Depends(get_db)
):
    need = await get_manageable_need(db, current_user, need_id)

    for field, value in updates.model_dump(exclude_unset=True).items():
        setattr(need, field, value)
    if need.start_date and need.end_date and need.end_date < need.start_date:
        raise ValidationError("end_date must not be before start_date", field="end_date")
    need.refresh_filled()

    await db.commit()
    await db.refresh(need)
    return need


@router.delete("/needs/{need_id}", response_model=MessageResponse)
async def delete_need(
    need_id: str,
    current_user: User = Depends(get_current_imam),
    db: AsyncSession = Depends(get_db)
):
    need = await get_manageable_need(db, current_user, need_id)
    await db.delete(need)
    await db.commit()
    return MessageResponse(message="Volunteer need deleted successfully")


@router.post("/needs/{need_id}/apply", response_model=NeedResponse, status_code=status.HTTP_201_CREATED)
async def apply_to_need(
    need_id: str,
    data: NeedApply,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Apply to a need; one application per user"""
    need = await get_or_404(db, VolunteerNeed, need_id, "Volunteer need")

    if need.status != NeedStatus.ACTIVE:
        raise ValidationError("This volunteer need is no longer accepting applications")
    if need.has_applicant(current_user.id):
        raise ValidationError("You have already applied for this opportunity")

    need.applicants.append(VolunteerNeedApplicant(user_id=current_user.id, **data.model_dump()))
    await db.commit()
    await db.refresh(need)

    logger.info(f"User {current_user.id} applied to volunteer need {need.id}")
    return need


@router.patch("/needs/{need_id}/applicants/{applicant_id}", response_model=NeedResponse)
async def update_applicant(
    need_id: str,
    applicant_id: str,
    update: ApplicantStatusUpdate,
    current_user: User = Depends(get_current_imam),
    db: AsyncSession = Depends(get_db)
):
    """Accept or reject an applicant; the need is marked filled once enough are accepted"""
    need = await get_manageable_need(db, current_user, need_id)

    applicant = next((a for a in need.applicants if str(a.id) == str(applicant_id)), None)
    if applicant is None:
        raise ResourceNotFoundError("Applicant", applicant_id)

    applicant.status = update.status
    need.refresh_filled()

    await db.commit()
    await db.refresh(need)
    return need


# ==================== Offers ====================

class OfferScope(str, enum.Enum):
    GENERAL = "general"
    MOSQUE_SPECIFIC = "mosque-specific"


async def create_volunteer_offer(db: AsyncSession, user: User, data: VolunteerOfferCreate) -> VolunteerOffer:
    """Shared by /volunteers/offers and /user/volunteer/offers"""
    if user.role != UserRole.USER:
        raise AuthorizationError("Only community members can post volunteer offers")
    if data.target_mosque_id:
        await get_approved_mosque(db, data.target_mosque_id)

    fields = data.model_dump()
    fields["contact_email"] = fields.get("contact_email") or user.email
    offer = VolunteerOffer(
        **fields,
        user_id=user.id,
        is_general_offer=data.target_mosque_id is None,
        interests=[],
    )
    db.add(offer)
    await db.commit()
    await db.refresh(offer)

    logger.info(f"Volunteer offer {offer.id} posted by user {user.id}")
    return offer


@router.get("/offers", response_model=VolunteerOfferListResponse)
async def list_volunteer_offers(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    type: Optional[OfferScope] = None,
    mosque_id: Optional[str] = None,
    category: Optional[VolunteerCategory] = None,
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db)
):
    """Active volunteer offers"""
    query = select(VolunteerOffer).where(VolunteerOffer.status == VolunteerOfferStatus.ACTIVE)
    if type == OfferScope.GENERAL:
        query = query.where(VolunteerOffer.is_general_offer.is_(True))
    elif type == OfferScope.MOSQUE_SPECIFIC:
        query = query.where(VolunteerOffer.is_general_offer.is_(False))
    if mosque_id:
        query = query.where(VolunteerOffer.target_mosque_id == mosque_id)
    if category:
        query = query.where(VolunteerOffer.category == category)
    if search:
        query = query.where(search_filter(search, [VolunteerOffer.title, VolunteerOffer.description]))
    query = query.order_by(VolunteerOffer.created_at.desc())

    offers, pagination = await paginate(db, query, page, limit)
    return VolunteerOfferListResponse(
        offers=[VolunteerOfferResponse.model_validate(o) for o in offers],
        pagination=pagination,
    )


@router.post("/offers", response_model=VolunteerOfferResponse, status_code=status.HTTP_201_CREATED)
async def post_volunteer_offer(
    data: VolunteerOfferCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await create_volunteer_offer(db, current_user, data)


@router.post("/offers/{offer_id}/interest", response_model=VolunteerOfferResponse, status_code=status.HTTP_201_CREATED)
async def express_interest(
    offer_id: str,
    data: InterestCreate,
    current_user: User = Depends(get_current_imam),
    db: AsyncSession = Depends(get_db)
):
    """Register a mosque's interest in a volunteer offer"""
    offer = await get_or_404(db, VolunteerOffer, offer_id, "Volunteer offer")
    await get_or_404(db, Mosque, data.mosque_id, "Mosque")

    if not await manages_mosque(db, current_user, data.mosque_id):
        raise AuthorizationError("You can only express interest on behalf of your own mosque")
    if offer.status != VolunteerOfferStatus.ACTIVE:
        raise ValidationError("This volunteer offer is no longer active")
    if any(str(i.mosque_id) == str(data.mosque_id) for i in offer.interests):
        raise ConflictError("Interest already registered for this mosque", code="INTEREST_EXISTS")

    offer.interests.append(VolunteerOfferInterest(mosque_id=data.mosque_id))
    await db.commit()
    await db.refresh(offer)
    return offer
