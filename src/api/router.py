from fastapi import APIRouter

from src.api.analysis.router import router as analysis_router
from src.api.carbon.router import router as carbon_router
from src.api.health.router import router as health_router
from src.api.uploads.router import router as uploads_router

# V1 API router
v1_router = APIRouter(prefix="/v1")

# Include domain routers
v1_router.include_router(analysis_router)
v1_router.include_router(carbon_router)
v1_router.include_router(uploads_router)

# Main API router
api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(v1_router)
