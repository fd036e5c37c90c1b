from fastapi import APIRouter

from app.hotelport.routers.auth import router as auth_router
from app.hotelport.routers.health import router as health_router
from app.hotelport.routers.metrics import router as metrics_router
from app.hotelport.routers.pending_actions import router as pending_actions_router
from app.hotelport.routers.permissions import router as permissions_router
from app.hotelport.routers.roles import router as roles_router
from app.hotelport.routers.user_access import router as user_access_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(metrics_router, tags=["ops"])
api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(permissions_router, tags=["permissions"])
api_router.include_router(pending_actions_router, tags=["pending-actions"])
api_router.include_router(user_access_router, tags=["user-access"])
api_router.include_router(roles_router, tags=["roles"])
