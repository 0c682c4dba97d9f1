from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, Callable
import uuid

from mosqueconnect.core.database import get_db
from mosqueconnect.core.logging_config import set_user_id
from mosqueconnect.core.security import decode_token
from mosqueconnect.models.user import User, UserRole

# auto_error=False so a missing header is reported as 401 rather than 403
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def _resolve_user(token: str, db: AsyncSession) -> User:
    payload = decode_token(token)

    if payload.get("type") != "access":
        raise _unauthorized("Invalid token type")

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized("Invalid token payload")

    try:
        uuid.UUID(user_id)
    except ValueError:
        raise _unauthorized("Invalid user ID format")

    user = await db.get(User, user_id)
    if not user:
        raise _unauthorized("User not found")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive"
        )

    set_user_id(str(user.id))
    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Get current authenticated user"""
    if credentials is None:
        raise _unauthorized("Not authenticated")
    return await _resolve_user(credentials.credentials, db)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Optional[User]:
    """Get current user if a valid token was sent, otherwise None"""
    if credentials is None:
        return None
    try:
        return await _resolve_user(credentials.credentials, db)
    except HTTPException:
        return None


def require_roles(*roles: UserRole) -> Callable:
    """Build a dependency that only lets the given roles through"""
    allowed = set(roles)
    label = "/".join(r.value for r in roles)

    async def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"{label.capitalize()} access required"
            )
        return current_user

    return dependency


async def get_current_admin(
    current_user: User = Depends(get_current_user)
) -> User:
    """Get current admin user"""
    if current_user.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return current_user


get_current_imam = require_roles(UserRole.IMAM, UserRole.ADMIN)
get_current_business = require_roles(UserRole.BUSINESS)
