"""Admin dashboard statistics"""

import logging
from typing import Any, Dict

from google.cloud.firestore import AsyncClient, FieldFilter

from campus_admin.core import collections
from campus_admin.core.constants import ReportStatus
from campus_admin.core.security import CallerContext
from campus_admin.services.audit_service import AuditService

logger = logging.getLogger(__name__)

class DashboardService:

    def __init__(self, db: AsyncClient):
        self.db = db
        self.audit = AuditService(db)

    async def _count(self, query) -> int:
        count = 0
        async for _ in query.stream():
            count += 1
        return count

    async def get_dashboard(self, caller: CallerContext) -> Dict[str, Any]:
        users = self.db.collection(collections.USERS)
        reports = self.db.collection(collections.REPORTS)

        stats = {
            "totalUsers": await self._count(users),
            "totalBanned": await self._count(
                users.where(filter=FieldFilter("isBanned", "==", True))
            ),
            "totalReports": await self._count(reports),
            "pendingReports": await self._count(
                reports.where(filter=FieldFilter("status", "==", ReportStatus.PENDING.value))
            ),
            "totalAdmins": await self._count(self.db.collection(collections.ADMINS)),
            "totalRooms": await self._count(self.db.collection(collections.STUDY_ROOMS)),
        }
        logger.info(f"Dashboard stats fetched: {stats}")

        admin_doc = await self.db.collection(collections.ADMINS).document(caller.uid).get()
        admin_data = (admin_doc.to_dict() or {}) if admin_doc.exists else {}

        return {
            "stats": stats,
            "recentActions": await self.audit.get_recent(limit=10),
            "admin": {
                "uid": caller.uid,
                "role": caller.role,
                "status": caller.status,
                "name": caller.name,
                "email": caller.email or "N/A",
                "promotedAt": admin_data.get("promotedAt"),
            },
        }
