"""Report review endpoints"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query
from google.cloud.firestore import AsyncClient

from campus_admin.core.config import settings
from campus_admin.core.database import get_db
from campus_admin.core.security import CallerContext
from campus_admin.services.report_service import ReportService
from .dependencies import require_admin
from .schemas import UpdateReportStatusRequest

router = APIRouter()

@router.get("")
async def list_reports(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=settings.MAX_PAGE_SIZE),
    status: Optional[str] = Query(None, description="pending, resolved, dismissed"),
    severity: Optional[str] = Query(None, description="low, medium, high, critical"),
    sort: str = Query("newest", description="newest, oldest"),
    search: str = Query(""),
    current_admin: CallerContext = Depends(require_admin),
    db: AsyncClient = Depends(get_db),
):
    """Get reports with filters"""
    result = await ReportService(db).list_reports(
        status=status, severity=severity, sort=sort, search=search, page=page, limit=limit
    )
    return {**result, "timestamp": datetime.now(timezone.utc).isoformat()}

@router.get("/{report_id}")
async def get_report(
    report_id: str,
    current_admin: CallerContext = Depends(require_admin),
    db: AsyncClient = Depends(get_db),
):
    return await ReportService(db).get_report(report_id)

@router.put("/{report_id}/status")
async def update_report_status(
    report_id: str,
    body: UpdateReportStatusRequest,
    current_admin: CallerContext = Depends(require_admin),
    db: AsyncClient = Depends(get_db),
):
    """Move a report to pending, resolved or dismissed"""
    await ReportService(db).update_status(
        current_admin,
        report_id,
        status=body.status,
        severity=body.severity,
        reason=body.reason,
    )
    return {"success": True, "message": "Report status updated"}
