from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from datetime import datetime
import uuid

from mosqueconnect.core.database import get_db
from mosqueconnect.core.exceptions import DuplicateEmailError
from mosqueconnect.core.security import (
    verify_password,
    get_password_hash,
    create_token_pair,
    decode_token
)
from mosqueconnect.core.logging_config import logger, set_user_id
from mosqueconnect.models.user import User
from mosqueconnect.schemas.auth import (
    UserRegister,
    UserLogin,
    UserUpdate,
    RefreshTokenRequest,
    Token,
    LoginResponse,
    UserResponse,
)
from mosqueconnect.modules.auth.dependencies import get_current_user


router = APIRouter()


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def find_user_by_email(db: AsyncSession, email: str):
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalar_one_or_none()


@router.post("/register", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: Request,
    user_data: UserRegister,
    db: AsyncSession = Depends(get_db)
):
    """Register a new user and return a token pair"""
    email = user_data.email.lower()

    if await find_user_by_email(db, email):
        logger.log_auth_event(
            event="register",
            success=False,
            user_email=email,
            reason="Email already registered",
            client_ip=_client_ip(request)
        )
        raise DuplicateEmailError(email)

    user = User(
        name=user_data.name,
        email=email,
        hashed_password=get_password_hash(user_data.password),
        role=user_data.role,
        phone=user_data.phone,
        city=user_data.city,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.log_auth_event(
        event="register",
        success=True,
        user_email=email,
        client_ip=_client_ip(request),
        user_role=user.role.value
    )

    return LoginResponse(**create_token_pair(user), user=UserResponse.model_validate(user))


@router.post("/login", response_model=LoginResponse)
async def login(
    request: Request,
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """Login with email and password"""
    email = credentials.email.lower()
    user = await find_user_by_email(db, email)

    if not user or not verify_password(credentials.password, user.hashed_password):
        logger.log_auth_event(
            event="login",
            success=False,
            user_email=email,
            reason="Invalid credentials",
            client_ip=_client_ip(request)
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    if not user.is_active:
        logger.log_auth_event(
            event="login",
            success=False,
            user_email=email,
            reason="Account inactive",
            client_ip=_client_ip(request)
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive"
        )

    user.last_login = datetime.utcnow()
    await db.commit()
    await db.refresh(user)

    set_user_id(str(user.id))
    logger.log_auth_event(
        event="login",
        success=True,
        user_email=email,
        client_ip=_client_ip(request),
        user_role=user.role.value
    )

    return LoginResponse(**create_token_pair(user), user=UserResponse.model_validate(user))


@router.post("/refresh", response_model=Token)
async def refresh_token(
    body: RefreshTokenRequest,
    db: AsyncSession = Depends(get_db)
):
    """Exchange a refresh token for a new token pair"""
    payload = decode_token(body.refresh_token)

    if payload.get("type") != "refresh":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type"
        )

    user_id = payload.get("sub")
    try:
        uuid.UUID(str(user_id))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload"
        )

    user = await db.get(User, user_id)
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive"
        )

    return Token(**create_token_pair(user))


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    """Get current user information"""
    return current_user


@router.put("/me", response_model=UserResponse)
async def update_current_user(
    updates: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Update the caller's own profile fields"""
    for field, value in updates.model_dump(exclude_unset=True).items():
        setattr(current_user, field, value)

    await db.commit()
    await db.refresh(current_user)
    return current_user
