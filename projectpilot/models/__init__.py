"""
Database models
"""
from projectpilot.models.user import User
from projectpilot.models.project import Project, project_members
from projectpilot.models.task import Task

__all__ = ["User", "Project", "project_members", "Task"]
