"""Health check endpoint"""

from datetime import datetime, timezone

from fastapi import APIRouter

from campus_admin.core.config import settings

router = APIRouter()

@router.get("/health")
async def health_check():
    """Basic health check"""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
