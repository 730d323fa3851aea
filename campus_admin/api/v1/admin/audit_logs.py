"""Admin audit log endpoints"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query
from google.cloud.firestore import AsyncClient

from campus_admin.core.config import settings
from campus_admin.core.database import get_db
from campus_admin.core.security import CallerContext
from campus_admin.services.audit_service import AuditService
from .dependencies import require_admin

router = APIRouter()

@router.get("")
async def get_audit_logs(
    adminUid: Optional[str] = Query(None),
    action: Optional[str] = Query(None),
    targetUid: Optional[str] = Query(None),
    days: int = Query(settings.AUDIT_LOG_DEFAULT_DAYS, ge=1),
    search: str = Query(""),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    current_admin: CallerContext = Depends(require_admin),
    db: AsyncClient = Depends(get_db),
):
    """Get admin audit logs"""
    result = await AuditService(db).list_logs(
        admin_uid=adminUid,
        action=action,
        target_uid=targetUid,
        days=days,
        search=search,
        page=page,
        limit=limit,
    )
    return {**result, "timestamp": datetime.now(timezone.utc).isoformat()}

@router.get("/admin/{admin_uid}")
async def get_admin_audit_logs(
    admin_uid: str,
    days: int = Query(settings.AUDIT_LOG_DEFAULT_DAYS, ge=1),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    current_admin: CallerContext = Depends(require_admin),
    db: AsyncClient = Depends(get_db),
):
    """Get one admin's audit logs"""
    result = await AuditService(db).list_admin_logs(admin_uid, days=days, page=page, limit=limit)
    return {**result, "timestamp": datetime.now(timezone.utc).isoformat()}

@router.get("/{log_id}")
async def get_audit_log(
    log_id: str,
    current_admin: CallerContext = Depends(require_admin),
    db: AsyncClient = Depends(get_db),
):
    return await AuditService(db).get_log(log_id)
