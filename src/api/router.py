from fastapi import APIRouter

from src.api.auth.router import router as auth_router
from src.api.health.router import router as health_router
from src.api.keys.router import router as keys_router

# V1 API router
v1_router = APIRouter(prefix="/v1")

# Include domain routers
v1_router.include_router(auth_router)
v1_router.include_router(keys_router)

# Main API router
api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(v1_router)
