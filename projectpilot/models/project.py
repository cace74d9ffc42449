"""
Project model and membership association
"""
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Table
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid

from projectpilot.core.database import Base
from projectpilot.core.db_types import UUID
from projectpilot.core.timeutils import utcnow

PROJECT_STATUSES = ("planning", "in-progress", "completed", "on-hold")


project_members = Table(
    "project_members",
    Base.metadata,
    Column("project_id", UUID(), ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", UUID(), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Project(Base):
    __tablename__ = "projects"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(20), default='planning', nullable=False)
    owner_id = Column(UUID(), ForeignKey('users.id'), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)

    # Relationships
    owner = relationship("User", foreign_keys=[owner_id])
    members = relationship("User", secondary=project_members)
    tasks = relationship("Task", back_populates="project", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Project(id={self.id}, name={self.name})>"

    @property
    def member_ids(self):
        return [member.id for member in self.members]

    @property
    def team_ids(self):
        """Members plus the owner, without duplicates, owner last"""
        ids = [member_id for member_id in self.member_ids if member_id != self.owner_id]
        ids.append(self.owner_id)
        return ids
