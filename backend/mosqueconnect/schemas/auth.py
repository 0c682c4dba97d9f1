from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator
from typing import Optional
from datetime import datetime

from mosqueconnect.models.user import UserRole, VolunteerStatus
from mosqueconnect.schemas.common import PartialUpdate

# Roles a user may pick at sign-up; admins are created by other admins
SELF_SERVICE_ROLES = {UserRole.USER, UserRole.IMAM, UserRole.BUSINESS}


class UserRegister(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: UserRole = UserRole.USER
    phone: Optional[str] = Field(None, max_length=30)
    city: Optional[str] = Field(None, max_length=100)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("role")
    @classmethod
    def self_service_role(cls, v: UserRole) -> UserRole:
        if v not in SELF_SERVICE_ROLES:
            raise ValueError("Role must be one of: user, imam, business")
        return v


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    role: UserRole
    phone: Optional[str] = None
    city: Optional[str] = None
    profile_picture: Optional[str] = None
    is_active: bool
    volunteer_status: VolunteerStatus
    created_at: datetime
    last_login: Optional[datetime] = None


class UserUpdate(PartialUpdate):
    CLEARABLE = frozenset({"phone", "city", "profile_picture"})

    name: Optional[str] = Field(None, min_length=1, max_length=50)
    phone: Optional[str] = Field(None, max_length=30)
    city: Optional[str] = Field(None, max_length=100)
    profile_picture: Optional[str] = Field(None, max_length=500)


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginResponse(Token):
    user: UserResponse
