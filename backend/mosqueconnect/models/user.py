from sqlalchemy import Column, String, Boolean, DateTime, Enum as SQLEnum
from datetime import datetime
import enum

from mosqueconnect.core.database import Base
from mosqueconnect.core.types import GUID, generate_uuid


class UserRole(str, enum.Enum):
    """User roles"""
    USER = "user"
    IMAM = "imam"
    BUSINESS = "business"
    ADMIN = "admin"


class VolunteerStatus(str, enum.Enum):
    """Whether the user currently volunteers"""
    NOT_VOLUNTEER = "not_volunteer"
    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"


class User(Base):
    """User model"""
    __tablename__ = "users"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)

    role = Column(SQLEnum(UserRole), default=UserRole.USER, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Profile fields
    phone = Column(String(30), nullable=True)
    city = Column(String(100), nullable=True)
    profile_picture = Column(String(500), nullable=True)

    volunteer_status = Column(
        SQLEnum(VolunteerStatus),
        default=VolunteerStatus.NOT_VOLUNTEER,
        nullable=False
    )
    volunteer_active_since = Column(DateTime, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<User {self.email}>"
