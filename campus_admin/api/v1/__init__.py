"""API v1 routes aggregation"""

from fastapi import APIRouter

from .admin import router as admin_router

# Create v1 router
api_router = APIRouter()

api_router.include_router(admin_router, prefix="/admin")

# Export router
router = api_router
