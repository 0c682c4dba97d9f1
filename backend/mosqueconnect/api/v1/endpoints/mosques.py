"""
Mosque directory endpoints.

Anonymous callers and plain users only ever see approved mosques. Imams and
admins can list every status and filter by it.
"""
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, update
from typing import Optional, List

from mosqueconnect.core.database import get_db
from mosqueconnect.core.exceptions import AuthorizationError, ResourceNotFoundError
from mosqueconnect.core.logging_config import logger
from mosqueconnect.models import (
    User,
    UserRole,
    Mosque,
    MosqueStatus,
    Volunteer,
    VolunteerApplication,
    VolunteerNeed,
    VolunteerNeedApplicant,
    VolunteerOffer,
    VolunteerOfferInterest,
)
from mosqueconnect.modules.auth.dependencies import (
    get_optional_user,
    get_current_imam,
    get_current_admin,
)
from mosqueconnect.schemas.common import MessageResponse
from mosqueconnect.schemas.mosque import MosqueCreate, MosqueUpdate, MosqueResponse, MosqueListResponse
from mosqueconnect.services.activity_logger import log_admin_action
from mosqueconnect.utils.pagination import paginate
from mosqueconnect.utils.queries import get_or_404, json_contains, search_filter

router = APIRouter()

STAFF_ROLES = {UserRole.IMAM, UserRole.ADMIN}


def can_manage(user: Optional[User], mosque: Mosque) -> bool:
    if user is None:
        return False
    return user.role == UserRole.ADMIN or str(mosque.imam_id) == str(user.id)


def apply_mosque_filters(
    query,
    status_filter: Optional[MosqueStatus] = None,
    city: Optional[str] = None,
    state: Optional[str] = None,
    name: Optional[str] = None,
    services: Optional[str] = None,
):
    if status_filter:
        query = query.where(Mosque.status == status_filter)
    if city:
        query = query.where(search_filter(city, [Mosque.city]))
    if state:
        query = query.where(search_filter(state, [Mosque.state]))
    if name:
        query = query.where(search_filter(name, [Mosque.name]))
    if services:
        for service in [s.strip() for s in services.split(",") if s.strip()]:
            query = query.where(json_contains(Mosque.services, service))
    return query


async def delete_mosque_records(db: AsyncSession, mosque: Mosque) -> None:
    """Delete a mosque with its needs, applications and offer interests (caller commits)"""
    need_ids = select(VolunteerNeed.id).where(VolunteerNeed.mosque_id == mosque.id)
    await db.execute(delete(VolunteerNeedApplicant).where(VolunteerNeedApplicant.need_id.in_(need_ids)))
    for model in (VolunteerNeed, VolunteerApplication, VolunteerOfferInterest):
        await db.execute(delete(model).where(model.mosque_id == mosque.id))

    # Registrations and offers outlive the mosque
    await db.execute(update(Volunteer).where(Volunteer.mosque_id == mosque.id).values(mosque_id=None))
    await db.execute(
        update(VolunteerOffer).where(VolunteerOffer.target_mosque_id == mosque.id).values(target_mosque_id=None)
    )
    await db.delete(mosque)


@router.get("", response_model=MosqueListResponse)
async def list_mosques(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Optional[MosqueStatus] = Query(None, alias="status"),
    city: Optional[str] = None,
    state: Optional[str] = None,
    name: Optional[str] = None,
    services: Optional[str] = Query(None, description="Comma separated service names"),
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    """List mosques"""
    if current_user is None or current_user.role not in STAFF_ROLES:
        status_filter = MosqueStatus.APPROVED

    query = apply_mosque_filters(select(Mosque), status_filter, city, state, name, services)
    query = query.order_by(Mosque.name.asc())

    mosques, pagination = await paginate(db, query, page, limit)
    return MosqueListResponse(
        mosques=[MosqueResponse.model_validate(m) for m in mosques],
        pagination=pagination,
    )


@router.post("", response_model=MosqueResponse, status_code=status.HTTP_201_CREATED)
async def create_mosque(
    mosque_data: MosqueCreate,
    current_user: User = Depends(get_current_imam),
    db: AsyncSession = Depends(get_db)
):
    """Submit a mosque for review; the caller becomes its imam"""
    data = mosque_data.model_dump()
    data["services"] = [s.value for s in mosque_data.services]
    data["prayer_times"] = mosque_data.prayer_times.model_dump(exclude_none=True)

    mosque = Mosque(**data, imam_id=current_user.id, status=MosqueStatus.PENDING, verified=False)
    db.add(mosque)
    await db.commit()
    await db.refresh(mosque)

    logger.info(f"Mosque submitted: {mosque.name} ({mosque.id}) by {current_user.email}")
    return mosque


@router.get("/{mosque_id}", response_model=MosqueResponse)
async def get_mosque(
    mosque_id: str,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    """Get a mosque; unapproved mosques are only visible to their imam and admins"""
    mosque = await get_or_404(db, Mosque, mosque_id, "Mosque")
    if mosque.status != MosqueStatus.APPROVED and not can_manage(current_user, mosque):
        raise ResourceNotFoundError("Mosque", mosque_id)
    return mosque


@router.put("/{mosque_id}", response_model=MosqueResponse)
async def update_mosque(
    mosque_id: str,
    updates: MosqueUpdate,
    current_user: User = Depends(get_current_imam),
    db: AsyncSession = Depends(get_db)
):
    """Update a mosque (owning imam or admin)"""
    mosque = await get_or_404(db, Mosque, mosque_id, "Mosque")
    if not can_manage(current_user, mosque):
        raise AuthorizationError("Only the mosque's imam or an admin can update it")

    data = updates.model_dump(exclude_unset=True)
    if "services" in data and data["services"] is not None:
        data["services"] = [s.value for s in updates.services]
    if "prayer_times" in data and data["prayer_times"] is not None:
        data["prayer_times"] = updates.prayer_times.model_dump(exclude_none=True)

    for field, value in data.items():
        setattr(mosque, field, value)

    await db.commit()
    await db.refresh(mosque)
    return mosque


@router.delete("/{mosque_id}", response_model=MessageResponse)
async def delete_mosque(
    mosque_id: str,
    request: Request,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Delete a mosque (admin)"""
    mosque = await get_or_404(db, Mosque, mosque_id, "Mosque")
    log_admin_action(
        db,
        admin_id=current_user.id,
        action="DELETE_MOSQUE",
        module="mosques",
        target_id=mosque.id,
        details=f"Deleted mosque {mosque.name}",
        request=request,
    )
    await delete_mosque_records(db, mosque)
    await db.commit()

    logger.info(f"Mosque {mosque_id} deleted by admin {current_user.email}")
    return MessageResponse(message="Mosque deleted successfully")


async def owned_mosque_ids(db: AsyncSession, imam: User) -> List[str]:
    """Ids of the mosques an imam manages"""
    result = await db.execute(select(Mosque.id).where(Mosque.imam_id == imam.id))
    return [str(mosque_id) for mosque_id in result.scalars().all()]
