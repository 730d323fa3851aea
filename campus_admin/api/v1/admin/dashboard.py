"""Admin dashboard endpoint"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from google.cloud.firestore import AsyncClient

from campus_admin.core.database import get_db
from campus_admin.core.security import CallerContext
from campus_admin.services.dashboard_service import DashboardService
from .dependencies import require_admin

router = APIRouter()

@router.get("")
async def get_dashboard(
    current_admin: CallerContext = Depends(require_admin),
    db: AsyncClient = Depends(get_db),
):
    """Get admin dashboard statistics"""
    dashboard = await DashboardService(db).get_dashboard(current_admin)
    return {**dashboard, "timestamp": datetime.now(timezone.utc).isoformat()}
