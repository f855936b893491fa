"""
API v1 router initialization and setup.
"""
from fastapi import APIRouter
from .endpoints import admins, reports, users

api_router = APIRouter()

api_router.include_router(
    reports.router,
    prefix="/reports",
    tags=["reports"]
)

api_router.include_router(
    admins.router,
    prefix="/admins",
    tags=["admins"]
)

api_router.include_router(
    users.router,
    prefix="/users",
    tags=["users"]
)
