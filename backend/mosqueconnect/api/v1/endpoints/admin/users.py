"""
Admin User Management endpoints.
"""
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, and_
from datetime import datetime, timedelta
from typing import Optional

from mosqueconnect.core.database import get_db
from mosqueconnect.core.exceptions import ValidationError
from mosqueconnect.core.logging_config import logger
from mosqueconnect.models import User, UserRole, VolunteerStatus
from mosqueconnect.modules.auth.dependencies import get_current_admin
from mosqueconnect.schemas.admin import AdminUsersResponse, UserStats, RoleUpdate
from mosqueconnect.schemas.auth import UserResponse
from mosqueconnect.services.activity_logger import log_admin_action
from mosqueconnect.api.v1.endpoints.admin.dashboard import count_by
from mosqueconnect.utils.pagination import paginate
from mosqueconnect.utils.queries import get_or_404, search_filter

router = APIRouter()


@router.get("", response_model=AdminUsersResponse)
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    role: Optional[UserRole] = None,
    is_active: Optional[bool] = None,
    volunteer_status: Optional[VolunteerStatus] = None,
    sort_by: str = Query("created_at", pattern="^(created_at|email|name|role|last_login)$"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """List all users with filtering, sorting, and pagination"""
    conditions = []
    if search:
        conditions.append(search_filter(search, [User.email, User.name, User.city]))
    if role:
        conditions.append(User.role == role)
    if is_active is not None:
        conditions.append(User.is_active == is_active)
    if volunteer_status:
        conditions.append(User.volunteer_status == volunteer_status)

    query = select(User)
    if conditions:
        query = query.where(and_(*conditions))

    sort_column = getattr(User, sort_by)
    query = query.order_by(sort_column.desc() if sort_order == "desc" else sort_column.asc())

    users, pagination = await paginate(db, query, page, limit)
    return AdminUsersResponse(
        users=[UserResponse.model_validate(u) for u in users],
        pagination=pagination,
    )


@router.get("/stats", response_model=UserStats)
async def get_user_stats(
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    now = datetime.utcnow()
    today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)

    async def joined_since(start: datetime) -> int:
        return await db.scalar(select(func.count(User.id)).where(User.created_at >= start)) or 0

    return UserStats(
        total_users=await db.scalar(select(func.count(User.id))) or 0,
        active_users=await db.scalar(select(func.count(User.id)).where(User.is_active.is_(True))) or 0,
        by_role=await count_by(db, User.role),
        by_volunteer_status=await count_by(db, User.volunteer_status),
        new_users_today=await joined_since(today_start),
        new_users_this_week=await joined_since(today_start - timedelta(days=7)),
        new_users_this_month=await joined_since(today_start - timedelta(days=30)),
    )


@router.patch("/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: str,
    body: RoleUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Change a user's role"""
    user = await get_or_404(db, User, user_id, "User")
    if str(user.id) == str(current_admin.id):
        raise ValidationError("You cannot change your own role", field="role")

    previous = user.role
    if previous != body.role:
        user.role = body.role
        log_admin_action(
            db,
            admin_id=current_admin.id,
            action="UPDATE_USER_ROLE",
            module="users",
            target_id=user.id,
            details=f"Changed role of {user.email} from {previous.value} to {body.role.value}",
            changes={"role": {"from": previous.value, "to": body.role.value}},
            request=request,
        )
        await db.commit()
        await db.refresh(user)
        logger.info(f"Admin {current_admin.email} changed role of {user.email} to {body.role.value}")

    return user
