"""
Main API router for v1 endpoints
"""
import time

from fastapi import APIRouter

from projectpilot.config import settings
from projectpilot.api.v1.endpoints import ai, health, projects, tasks, users

api_router = APIRouter(prefix="/v1")


@api_router.get("/")
async def api_root():
    """API v1 root endpoint"""
    return {
        "success": True,
        "data": {
            "message": f"{settings.app_name} v1",
            "version": settings.app_version,
            "endpoints": {
                "users": "/api/v1/users",
                "projects": "/api/v1/projects",
                "tasks": "/api/v1/tasks",
                "ai": "/api/v1/ai",
                "health": "/api/v1/healthz",
                "readiness": "/api/v1/readyz",
            }
        },
        "timestamp": time.time()
    }


api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(projects.router, prefix="/projects", tags=["Projects"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])
api_router.include_router(ai.router, prefix="/ai", tags=["AI Predictions"])
api_router.include_router(health.router, tags=["Health"])
