"""
Admin Activity Log endpoints.
"""
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_
from datetime import datetime
from typing import Optional

from mosqueconnect.core.database import get_db
from mosqueconnect.models import User, ActivityLog
from mosqueconnect.modules.auth.dependencies import get_current_admin
from mosqueconnect.schemas.admin import ActivityLogCreate, ActivityLogResponse, ActivityLogsResponse
from mosqueconnect.services.activity_logger import log_admin_action
from mosqueconnect.utils.pagination import paginate
from mosqueconnect.utils.queries import search_filter

router = APIRouter()


def to_response(log: ActivityLog) -> ActivityLogResponse:
    return ActivityLogResponse(
        id=str(log.id),
        admin_id=str(log.admin_id),
        admin_name=log.admin.name if log.admin else None,
        admin_email=log.admin.email if log.admin else None,
        action=log.action,
        module=log.module,
        target_id=log.target_id,
        details=log.details,
        changes=log.changes,
        ip_address=log.ip_address,
        user_agent=log.user_agent,
        created_at=log.created_at,
    )


@router.get("", response_model=ActivityLogsResponse)
async def list_activity_logs(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    action: Optional[str] = None,
    module: Optional[str] = None,
    admin_id: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """List activity logs with filtering and pagination"""
    conditions = []
    if action:
        conditions.append(ActivityLog.action == action)
    if module:
        conditions.append(ActivityLog.module == module)
    if admin_id:
        conditions.append(ActivityLog.admin_id == admin_id)
    if start_date:
        conditions.append(ActivityLog.created_at >= start_date)
    if end_date:
        conditions.append(ActivityLog.created_at <= end_date)
    if search:
        conditions.append(search_filter(search, [ActivityLog.action, ActivityLog.module, ActivityLog.details]))

    query = select(ActivityLog)
    if conditions:
        query = query.where(and_(*conditions))
    query = query.order_by(ActivityLog.created_at.desc())

    logs, pagination = await paginate(db, query, page, limit)
    return ActivityLogsResponse(logs=[to_response(log) for log in logs], pagination=pagination)


@router.post("", response_model=ActivityLogResponse, status_code=status.HTTP_201_CREATED)
async def create_activity_log(
    body: ActivityLogCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Record a manual activity log entry for the calling admin"""
    log = log_admin_action(
        db,
        admin_id=current_admin.id,
        action=body.action,
        module=body.module,
        target_id=body.target_id,
        details=body.details,
        changes=body.changes,
        request=request,
    )
    await db.commit()
    await db.refresh(log, attribute_names=["admin"])
    return to_response(log)
