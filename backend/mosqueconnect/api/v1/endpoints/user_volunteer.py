"""
The signed-in user's own volunteering: profile, status, applications,
offers and an activity timeline. Also hosts POST /volunteer/register.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from datetime import datetime, timedelta
from typing import Optional, List

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
    VolunteerStatus,
    Mosque,
    Volunteer,
    VolunteerProfile,
    VolunteerApplication,
    ApplicationStatus,
    VolunteerRegistrationStatus,
    VolunteerOffer,
    VolunteerOfferStatus,
)
from mosqueconnect.modules.auth.dependencies import get_current_user
from mosqueconnect.schemas.common import MessageResponse
from mosqueconnect.schemas.volunteer import (
    VolunteerRegister,
    VolunteerResponse,
    ApplicationResponse,
    ApplicationListResponse,
    VolunteerOfferCreate,
    VolunteerOfferUpdate,
    VolunteerOfferResponse,
    VolunteerOfferListResponse,
    VolunteerProfileData,
    VolunteerProfileEnvelope,
    VolunteerStatusUpdate,
    VolunteerStatusResponse,
    ActivityEntry,
    VolunteerActivityResponse,
)
from mosqueconnect.api.v1.endpoints.volunteers import create_volunteer_offer
from mosqueconnect.utils.pagination import paginate, paginate_list
from mosqueconnect.utils.queries import get_or_404

router = APIRouter()
registration_router = APIRouter()

# Each accepted application is credited with a fixed number of hours
HOURS_PER_ACCEPTED_APPLICATION = 10
EDIT_THRESHOLD = timedelta(seconds=1)


# ==================== Registration ====================

@registration_router.post("/register", response_model=VolunteerResponse, status_code=status.HTTP_201_CREATED)
async def register_volunteer(
    data: VolunteerRegister,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Register as a volunteer; the registration waits for review"""
    if current_user.role != UserRole.USER:
        raise AuthorizationError("Only community members can register as volunteers")
    if current_user.volunteer_status in (VolunteerStatus.PENDING, VolunteerStatus.ACTIVE):
        raise ConflictError("You are already registered as a volunteer", code="ALREADY_VOLUNTEER")

    if data.mosque_id:
        await get_or_404(db, Mosque, data.mosque_id, "Mosque")

    fields = data.model_dump()
    volunteer = Volunteer(**fields, user_id=current_user.id)
    db.add(volunteer)
    current_user.volunteer_status = VolunteerStatus.PENDING

    await db.commit()
    await db.refresh(volunteer)

    logger.info(f"Volunteer registration {volunteer.id} submitted by user {current_user.id}")
    return volunteer


# ==================== Profile ====================

async def get_or_create_profile(db: AsyncSession, user: User) -> VolunteerProfile:
    result = await db.execute(select(VolunteerProfile).where(VolunteerProfile.user_id == user.id))
    profile = result.scalar_one_or_none()
    if profile is None:
        profile = VolunteerProfile(
            user_id=user.id,
            skills=[],
            availability={},
            contact_preferences={},
            certificates=[],
            bio="",
            experience="",
        )
        db.add(profile)
        await db.flush()
    return profile


@router.get("/profile", response_model=VolunteerProfileEnvelope)
async def get_profile(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    profile = await get_or_create_profile(db, current_user)
    await db.commit()
    return VolunteerProfileEnvelope(profile=VolunteerProfileData.model_validate(profile))


@router.put("/profile", response_model=VolunteerProfileEnvelope)
async def update_profile(
    data: VolunteerProfileData,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    profile = await get_or_create_profile(db, current_user)
    for field, value in data.model_dump().items():
        setattr(profile, field, value)

    await db.commit()
    await db.refresh(profile)
    return VolunteerProfileEnvelope(
        profile=VolunteerProfileData.model_validate(profile),
        message="Volunteer profile updated successfully",
    )


# ==================== Status ====================

async def build_status(db: AsyncSession, user: User) -> VolunteerStatusResponse:
    counts = dict((await db.execute(
        select(VolunteerApplication.status, func.count(VolunteerApplication.id))
        .where(VolunteerApplication.user_id == user.id)
        .group_by(VolunteerApplication.status)
    )).all())
    accepted = counts.get(ApplicationStatus.ACCEPTED, 0)

    active_offers = await db.scalar(
        select(func.count(VolunteerOffer.id)).where(
            VolunteerOffer.user_id == user.id,
            VolunteerOffer.status == VolunteerOfferStatus.ACTIVE,
        )
    ) or 0

    return VolunteerStatusResponse(
        status=user.volunteer_status,
        active_since=user.volunteer_active_since,
        total_applications=sum(counts.values()),
        accepted_applications=accepted,
        total_hours=accepted * HOURS_PER_ACCEPTED_APPLICATION,
        active_offers=active_offers,
    )


@router.get("/status", response_model=VolunteerStatusResponse)
async def get_status(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await build_status(db, current_user)


async def has_approved_registration(db: AsyncSession, user: User) -> bool:
    """An approved registration or an accepted application"""
    approved = await db.scalar(
        select(func.count(Volunteer.id)).where(
            Volunteer.user_id == user.id,
            Volunteer.status == VolunteerRegistrationStatus.APPROVED,
        )
    )
    if approved:
        return True
    accepted = await db.scalar(
        select(func.count(VolunteerApplication.id)).where(
            VolunteerApplication.user_id == user.id,
            VolunteerApplication.status == ApplicationStatus.ACCEPTED,
        )
    )
    return bool(accepted)


@router.patch("/status", response_model=VolunteerStatusResponse)
async def update_status(
    data: VolunteerStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Switch volunteering on or off"""
    if data.status not in (VolunteerStatus.ACTIVE, VolunteerStatus.INACTIVE):
        raise ValidationError("Status must be 'active' or 'inactive'", field="status")
    if current_user.volunteer_status == VolunteerStatus.PENDING or not await has_approved_registration(db, current_user):
        raise ConflictError("Volunteer registration has not been approved", code="VOLUNTEER_NOT_APPROVED")

    current_user.volunteer_status = data.status
    if data.status == VolunteerStatus.ACTIVE:
        current_user.volunteer_active_since = datetime.utcnow()

    await db.commit()
    logger.info(f"User {current_user.id} set volunteer status to {data.status.value}")
    return await build_status(db, current_user)


# ==================== Applications ====================

@router.get("/applications", response_model=ApplicationListResponse)
async def my_applications(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Optional[ApplicationStatus] = Query(None, alias="status"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    query = select(VolunteerApplication).where(VolunteerApplication.user_id == current_user.id)
    if status_filter:
        query = query.where(VolunteerApplication.status == status_filter)
    query = query.order_by(VolunteerApplication.created_at.desc())

    applications, pagination = await paginate(db, query, page, limit)
    return ApplicationListResponse(
        applications=[ApplicationResponse.model_validate(a) for a in applications],
        pagination=pagination,
    )


# ==================== Offers ====================

async def get_own_offer(db: AsyncSession, user: User, offer_id: str) -> VolunteerOffer:
    offer = await get_or_404(db, VolunteerOffer, offer_id, "Volunteer offer")
    if str(offer.user_id) != str(user.id):
        raise ResourceNotFoundError("Volunteer offer", offer_id)
    return offer


@router.get("/offers", response_model=VolunteerOfferListResponse)
async def my_offers(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Optional[VolunteerOfferStatus] = Query(None, alias="status"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    query = select(VolunteerOffer).where(VolunteerOffer.user_id == current_user.id)
    if status_filter:
        query = query.where(VolunteerOffer.status == status_filter)
    query = query.order_by(VolunteerOffer.created_at.desc())

    offers, pagination = await paginate(db, query, page, limit)
    return VolunteerOfferListResponse(
        offers=[VolunteerOfferResponse.model_validate(o) for o in offers],
        pagination=pagination,
    )


@router.post("/offers", response_model=VolunteerOfferResponse, status_code=status.HTTP_201_CREATED)
async def create_my_offer(
    data: VolunteerOfferCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await create_volunteer_offer(db, current_user, data)


@router.get("/offers/{offer_id}", response_model=VolunteerOfferResponse)
async def get_my_offer(
    offer_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await get_own_offer(db, current_user, offer_id)


@router.put("/offers/{offer_id}", response_model=VolunteerOfferResponse)
async def update_my_offer(
    offer_id: str,
    updates: VolunteerOfferUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    offer = await get_own_offer(db, current_user, offer_id)
    for field, value in updates.model_dump(exclude_unset=True).items():
        setattr(offer, field, value)

    await db.commit()
    await db.refresh(offer)
    return offer


@router.delete("/offers/{offer_id}", response_model=MessageResponse)
async def delete_my_offer(
    offer_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    offer = await get_own_offer(db, current_user, offer_id)
    await db.delete(offer)
    await db.commit()
    return MessageResponse(message="Volunteer offer deleted successfully")


# ==================== Activity ====================

def application_events(application: VolunteerApplication, mosque_name: str) -> List[ActivityEntry]:
    meta = {
        "application_id": str(application.id),
        "mosque_id": str(application.mosque_id),
        "mosque_name": mosque_name,
        "category": application.category.value,
    }
    events = [ActivityEntry(
        type="application_submitted",
        title="Application Submitted",
        description=f"Applied to volunteer at {mosque_name} for {application.category.value}",
        created_at=application.created_at,
        metadata={**meta, "status": application.status.value},
    )]
    if application.status in (ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED) and application.responded_at:
        verb = application.status.value
        events.append(ActivityEntry(
            type=f"application_{verb}",
            title=f"Application {verb.capitalize()}",
            description=f"Your volunteer application to {mosque_name} was {verb}",
            created_at=application.responded_at,
            metadata=meta,
        ))
    return events


def offer_events(offer: VolunteerOffer) -> List[ActivityEntry]:
    meta = {
        "offer_id": str(offer.id),
        "title": offer.title,
        "category": offer.category.value,
        "status": offer.status.value,
    }
    events = [ActivityEntry(
        type="offer_created",
        title="Volunteer Offer Created",
        description=f"Created volunteer offer: {offer.title}",
        created_at=offer.created_at,
        metadata=meta,
    )]
    # Column defaults stamp created_at and updated_at separately
    if offer.updated_at and offer.updated_at - offer.created_at >= EDIT_THRESHOLD:
        events.append(ActivityEntry(
            type="offer_updated",
            title="Volunteer Offer Updated",
            description=f"Updated volunteer offer: {offer.title}",
            created_at=offer.updated_at,
            metadata=meta,
        ))
    return events


@router.get("/activity", response_model=VolunteerActivityResponse)
async def my_activity(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Timeline of the caller's applications and offers, newest first"""
    rows = (await db.execute(
        select(VolunteerApplication, Mosque.name)
        .outerjoin(Mosque, Mosque.id == VolunteerApplication.mosque_id)
        .where(VolunteerApplication.user_id == current_user.id)
    )).all()
    offers = (await db.execute(
        select(VolunteerOffer).where(VolunteerOffer.user_id == current_user.id)
    )).scalars().all()

    activity: List[ActivityEntry] = []
    for application, mosque_name in rows:
        activity.extend(application_events(application, mosque_name or "Unknown Mosque"))
    for offer in offers:
        activity.extend(offer_events(offer))
    activity.sort(key=lambda entry: entry.created_at, reverse=True)

    items, pagination = paginate_list(activity, page, limit)
    return VolunteerActivityResponse(activity=items, pagination=pagination)
