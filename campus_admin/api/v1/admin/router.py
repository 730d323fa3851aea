"""Admin API router"""

from fastapi import APIRouter

from .admins import router as admins_router
from .audit_logs import router as audit_logs_router
from .dashboard import router as dashboard_router
from .reports import router as reports_router
from .study_rooms import router as study_rooms_router
from .users import router as users_router

router = APIRouter()

router.include_router(dashboard_router, prefix="/dashboard", tags=["Admin Dashboard"])
router.include_router(admins_router, prefix="/admins", tags=["Admin Accounts"])
router.include_router(users_router, prefix="/users", tags=["Admin Users"])
router.include_router(reports_router, prefix="/reports", tags=["Admin Reports"])
router.include_router(audit_logs_router, prefix="/audit-logs", tags=["Admin Audit Logs"])
router.include_router(study_rooms_router, prefix="/study-rooms", tags=["Admin Study Rooms"])
