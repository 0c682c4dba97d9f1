"""
Admin/imam activity log.

Entries are added to the caller's session and committed with the change they
describe, so a review and its audit row land in the same transaction.
"""
from typing import Optional, Dict, Any
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from mosqueconnect.models.activity_log import ActivityLog


def log_admin_action(
    db: AsyncSession,
    admin_id: str,
    action: str,
    module: str,
    target_id: Optional[str] = None,
    details: Optional[str] = None,
    changes: Optional[Dict[str, Any]] = None,
    request: Optional[Request] = None,
) -> ActivityLog:
    """Stage an activity log entry on the session (caller commits)"""
    log = ActivityLog(
        admin_id=admin_id,
        action=action,
        module=module,
        target_id=str(target_id) if target_id is not None else None,
        details=details,
        changes=changes,
        ip_address=request.client.host if request and request.client else None,
        user_agent=request.headers.get("user-agent") if request else None,
    )
    db.add(log)
    return log
