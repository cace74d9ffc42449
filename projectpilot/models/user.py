"""
User model
"""
from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
import uuid

from projectpilot.core.database import Base
from projectpilot.core.db_types import UUID
from projectpilot.core.timeutils import utcnow

USER_ROLES = ("user", "manager", "admin")


class User(Base):
    __tablename__ = "users"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), default='user', nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"

    @property
    def display_name(self):
        return self.name or "Unknown"
