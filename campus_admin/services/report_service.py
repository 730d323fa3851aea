"""Abuse report workflow"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from google.cloud.firestore import AsyncClient, FieldFilter, Query

from campus_admin.core import collections
from campus_admin.core.constants import (
    REPORT_SEVERITIES,
    REPORT_STATUSES,
    AuditAction,
    ReportSeverity,
    ReportStatus,
)
from campus_admin.core.exceptions import BadRequestException, NotFoundException
from campus_admin.core.security import CallerContext
from campus_admin.services.audit_service import AuditService
from campus_admin.utils.pagination import paginate

logger = logging.getLogger(__name__)

def _created_at(data: Dict[str, Any]) -> Optional[str]:
    if data.get("timestampISO"):
        return data["timestampISO"]
    timestamp = data.get("timestamp")
    if isinstance(timestamp, datetime):
        return timestamp.isoformat()
    if timestamp:
        return str(timestamp)
    return None

def serialize_report(report_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """Normalized admin-facing view of a report"""
    return {
        "id": data.get("id") or report_id,
        "type": data.get("type") or "Unknown",
        "reportedUserId": data.get("reportedUser") or data.get("reportedUserId") or "Unknown",
        "reason": data.get("description") or data.get("reason") or "",
        "severity": data.get("severity") or ReportSeverity.LOW.value,
        "status": data.get("status") or ReportStatus.PENDING.value,
        "createdAt": _created_at(data),
        "reporterId": data.get("reporterId") or "",
        "reporterName": data.get("reporterName") or "Unknown",
        "reporterEmail": data.get("reporterEmail") or "",
        "location": data.get("location") or "",
        "incidentTime": data.get("incidentTime"),
        "files": data.get("files") or [],
    }

class ReportService:
    """Service for report review and status transitions"""

    def __init__(self, db: AsyncClient):
        self.db = db
        self.audit = AuditService(db)

    def _report_ref(self, report_id: str):
        return self.db.collection(collections.REPORTS).document(report_id)

    async def list_reports(
        self,
        status: Optional[str] = None,
        severity: Optional[str] = None,
        sort: str = "newest",
        search: str = "",
        page: int = 1,
        limit: int = 10,
    ) -> Dict[str, Any]:
        query = self.db.collection(collections.REPORTS)
        if sort == "newest":
            query = query.order_by("timestamp", direction=Query.DESCENDING)
        elif sort == "oldest":
            query = query.order_by("timestamp", direction=Query.ASCENDING)
        if status:
            query = query.where(filter=FieldFilter("status", "==", status))
        if severity:
            query = query.where(filter=FieldFilter("severity", "==", severity))

        reports = [serialize_report(doc.id, doc.to_dict() or {}) async for doc in query.stream()]

        if search:
            needle = search.lower()
            reports = [
                r for r in reports
                if any(
                    needle in str(r[field]).lower()
                    for field in ("type", "reason", "reportedUserId", "reporterName", "location")
                )
            ]

        page_reports, pagination = paginate(reports, page, limit)
        logger.info(f"Fetched {len(page_reports)} reports (page {pagination['page']}/{pagination['pages']})")
        return {
            "reports": page_reports,
            "pagination": pagination,
            "filters": {
                "status": status or "all",
                "severity": severity or "all",
                "sort": sort,
                "search": search,
            },
        }

    async def get_report(self, report_id: str) -> Dict[str, Any]:
        doc = await self._report_ref(report_id).get()
        if not doc.exists:
            raise NotFoundException("Report not found")
        return serialize_report(doc.id, doc.to_dict() or {})

    async def update_status(
        self,
        actor: CallerContext,
        report_id: str,
        status: Optional[str],
        severity: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Move a report through pending -> resolved | dismissed"""
        if status not in REPORT_STATUSES:
            raise BadRequestException("Invalid status", error_code="INVALID_STATUS")

        final_severity = severity if severity in REPORT_SEVERITIES else ReportSeverity.LOW.value
        reason = reason or "No reason provided"

        logger.info(f"Updating report {report_id} status to {status}, severity: {final_severity}")

        doc = await self._report_ref(report_id).get()
        if not doc.exists:
            raise NotFoundException("Report not found")
        previous = (doc.to_dict() or {}).get("status") or ReportStatus.PENDING.value

        updated_at = datetime.now(timezone.utc)
        await self._report_ref(report_id).update({
            "status": status,
            "severity": final_severity,
            "updatedAt": updated_at,
            "updatedBy": actor.uid,
            "updateReason": reason,
        })

        await self.audit.log_admin_action(
            actor,
            AuditAction.UPDATE_REPORT_STATUS.value,
            target_report_id=report_id,
            target_name=f"Report {report_id}",
            changes={
                "field": "status",
                "from": previous,
                "to": status,
                "severity": final_severity,
            },
            reason=reason,
            timestamp=updated_at,
        )

        logger.info(f"Report {report_id} status updated to {status}, severity: {final_severity}")
        return {"status": status, "severity": final_severity, "updatedAt": updated_at}
