"""
Task model
"""
from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid

from projectpilot.core.database import Base
from projectpilot.core.db_types import UUID
from projectpilot.core.timeutils import utcnow

TASK_STATUSES = ("todo", "in-progress", "review", "completed")
TASK_PRIORITIES = ("low", "medium", "high")


class Task(Base):
    __tablename__ = "tasks"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), default='todo', nullable=False)
    priority = Column(String(20), default='medium', nullable=False)
    due_date = Column(DateTime(timezone=True), nullable=True)
    project_id = Column(UUID(), ForeignKey('projects.id', ondelete='CASCADE'), nullable=False, index=True)
    assigned_to = Column(UUID(), ForeignKey('users.id'), nullable=True)
    created_by = Column(UUID(), ForeignKey('users.id'), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)

    # Relationships
    project = relationship("Project", back_populates="tasks")
    assignee = relationship("User", foreign_keys=[assigned_to])
    creator = relationship("User", foreign_keys=[created_by])

    def __repr__(self):
        return f"<Task(id={self.id}, title={self.title})>"
