"""
Admin account management - list, create and remove administrators.
"""
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from mosqueconnect.core.database import get_db
from mosqueconnect.core.exceptions import DuplicateEmailError, ValidationError
from mosqueconnect.core.logging_config import logger
from mosqueconnect.core.security import get_password_hash
from mosqueconnect.models import User, UserRole
from mosqueconnect.modules.auth.dependencies import get_current_admin
from mosqueconnect.schemas.admin import AdminCreate, AdminUsersResponse
from mosqueconnect.schemas.auth import UserResponse
from mosqueconnect.schemas.common import MessageResponse
from mosqueconnect.services.activity_logger import log_admin_action
from mosqueconnect.api.v1.endpoints.auth import find_user_by_email
from mosqueconnect.utils.pagination import paginate
from mosqueconnect.utils.queries import get_or_404

router = APIRouter()


@router.get("", response_model=AdminUsersResponse)
async def list_admins(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    query = select(User).where(User.role == UserRole.ADMIN).order_by(User.created_at.asc())
    admins, pagination = await paginate(db, query, page, limit)
    return AdminUsersResponse(
        users=[UserResponse.model_validate(a) for a in admins],
        pagination=pagination,
    )


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_admin(
    body: AdminCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Create another administrator account"""
    email = body.email.lower()
    if await find_user_by_email(db, email):
        raise DuplicateEmailError(email)

    admin = User(
        name=body.name,
        email=email,
        hashed_password=get_password_hash(body.password),
        role=UserRole.ADMIN,
        phone=body.phone,
    )
    db.add(admin)
    await db.flush()

    log_admin_action(
        db,
        admin_id=current_admin.id,
        action="CREATE_ADMIN",
        module="user_management",
        target_id=admin.id,
        details=f"Created admin account {email}",
        request=request,
    )
    await db.commit()
    await db.refresh(admin)

    logger.info(f"Admin {current_admin.email} created admin account {email}")
    return admin


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_admin(
    user_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Revoke an administrator account (never your own).

    The account is demoted and deactivated rather than deleted so its activity
    log entries keep their author.
    """
    admin = await get_or_404(db, User, user_id, "User")
    if str(admin.id) == str(current_admin.id):
        raise ValidationError("You cannot delete your own account")
    if admin.role != UserRole.ADMIN:
        raise ValidationError("User is not an administrator")

    log_admin_action(
        db,
        admin_id=current_admin.id,
        action="DELETE_ADMIN",
        module="user_management",
        target_id=admin.id,
        details=f"Revoked admin account {admin.email}",
        changes={"role": {"from": UserRole.ADMIN.value, "to": UserRole.USER.value}, "is_active": {"from": True, "to": False}},
        request=request,
    )
    admin.role = UserRole.USER
    admin.is_active = False
    await db.commit()

    logger.info(f"Admin {current_admin.email} revoked admin account {admin.email}")
    return MessageResponse(message="Admin removed successfully")
