from sqlalchemy import Column, String, DateTime, Text, ForeignKey, JSON
from sqlalchemy.orm import relationship
from datetime import datetime

from mosqueconnect.core.database import Base
from mosqueconnect.core.types import GUID, generate_uuid


class ActivityLog(Base):
    """Audit log for tracking admin and imam review actions"""
    __tablename__ = "activity_logs"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    admin_id = Column(GUID, ForeignKey("users.id"), nullable=False, index=True)

    # Action details
    action = Column(String(100), nullable=False, index=True)  # e.g. 'APPROVE_MOSQUE', 'UPDATE_USER_ROLE'
    module = Column(String(50), nullable=False, index=True)  # e.g. 'mosques', 'businesses', 'volunteers'
    target_id = Column(String(100), nullable=True)
    details = Column(Text, nullable=True)
    changes = Column(JSON, nullable=True)  # old/new values

    # Request metadata
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    admin = relationship("User", foreign_keys=[admin_id], lazy="joined")

    def __repr__(self):
        return f"<ActivityLog {self.action} by {self.admin_id}>"
