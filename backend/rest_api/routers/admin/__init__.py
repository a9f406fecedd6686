"""
Admin API router - combines all admin sub-routers.

- forum_moderation: reported posts, restore, permanent moderation

All routes are prefixed with /api/admin and require the admin role.
"""

from fastapi import APIRouter

from .forum_moderation import router as forum_moderation_router


router = APIRouter(prefix="/api/admin")

router.include_router(forum_moderation_router)

__all__ = ["router"]
