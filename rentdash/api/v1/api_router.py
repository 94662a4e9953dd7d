from fastapi import APIRouter

from rentdash.api.v1.health import router as health_router
from rentdash.api.v1.notifications.router import router as notifications_router
from rentdash.api.v1.sms.router import router as sms_router

api_router = APIRouter()
api_router.include_router(health_router, prefix="/health", tags=["health"])
api_router.include_router(sms_router, prefix="/sms", tags=["sms"])
api_router.include_router(notifications_router, prefix="/notifications")  # Tags are defined in the router itself
