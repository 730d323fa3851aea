"""Admin API router"""

from fastapi import APIRouter
from .router import router as admin_router

router = APIRouter()
router.include_router(admin_router)
