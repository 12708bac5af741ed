# routers/__init__.py

from fastapi import APIRouter

from .auth import router as auth_router
from .members import router as members_router
from .buyers import router as buyers_router
from .sellers import router as sellers_router
from .orders import router as orders_router
from .feedback import router as feedback_router
from .reports import router as reports_router
from .featured_sellers import router as featured_sellers_router
from .cover_images import router as cover_images_router
from .activity import router as activity_router
from .admins import router as admins_router
from .health import router as health_router


# Every dashboard router; mounted by main.create_app()
api_router = APIRouter()

api_router.include_router(auth_router)

# Screens
api_router.include_router(members_router)
api_router.include_router(buyers_router)
api_router.include_router(sellers_router)
api_router.include_router(orders_router)
api_router.include_router(feedback_router)
api_router.include_router(reports_router)
api_router.include_router(featured_sellers_router)
api_router.include_router(cover_images_router)

# Super admin
api_router.include_router(activity_router)
api_router.include_router(admins_router)

api_router.include_router(health_router)

__all__ = ["api_router"]
