"""Central API router aggregating all domain routers."""

from fastapi import APIRouter

from neighborwatch.area.router import router as area_router
from neighborwatch.chat.router import finder_router as chat_finder_router
from neighborwatch.chat.router import public_router as chat_public_router
from neighborwatch.chat.router import router as found_chat_router
from neighborwatch.device.router import phone_router as phone_device_router
from neighborwatch.device.router import router as device_router
from neighborwatch.event.router import public_router as event_public_router
from neighborwatch.event.router import router as event_router
from neighborwatch.group.router import router as group_router
from neighborwatch.health.router import router as health_router
from neighborwatch.user.router import router as user_router

api_router = APIRouter()

api_router.include_router(health_router)
api_router.include_router(user_router)
api_router.include_router(area_router)
api_router.include_router(event_public_router)
api_router.include_router(event_router)
api_router.include_router(group_router)
api_router.include_router(device_router)
api_router.include_router(phone_device_router)
api_router.include_router(found_chat_router)
api_router.include_router(chat_finder_router)
api_router.include_router(chat_public_router)
