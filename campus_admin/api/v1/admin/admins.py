"""Admin account management endpoints - superadmin only"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response

from campus_admin.core.rate_limit import promote_limiter, suspend_limiter
from campus_admin.core.security import CallerContext
from campus_admin.services.admin_service import AdminService
from .dependencies import get_admin_service, require_superadmin
from .schemas import (
    PromoteUserRequest,
    RemoveAdminRequest,
    SuspendAdminRequest,
    UpdateAdminRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()

def _now() -> str:
    return datetime.now(timezone.utc).isoformat()

@router.get("")
async def list_admins(
    current_admin: CallerContext = Depends(require_superadmin),
    service: AdminService = Depends(get_admin_service),
):
    """List all admins"""
    admins = await service.list_admins()
    logger.info(f"Fetched {len(admins)} admins")
    return {"admins": admins, "total": len(admins), "timestamp": _now()}

@router.post("/promote-user")
@promote_limiter
async def promote_user(
    request: Request,
    response: Response,
    body: PromoteUserRequest,
    current_admin: CallerContext = Depends(require_superadmin),
    service: AdminService = Depends(get_admin_service),
):
    """Promote a user to moderator or superadmin"""
    admin = await service.promote(
        current_admin,
        role=body.role,
        uid=body.uid,
        email=body.email,
        permissions=body.permissions,
        reason=body.reason,
    )
    return {
        "success": True,
        "message": f"User {admin['name']} has been promoted to {admin['role']}",
        "admin": admin,
    }

@router.get("/{uid}")
async def get_admin(
    uid: str,
    current_admin: CallerContext = Depends(require_superadmin),
    service: AdminService = Depends(get_admin_service),
):
    """Get single admin info with stats"""
    details = await service.get_admin_details(uid)
    return {**details, "timestamp": _now()}

@router.put("/{uid}")
async def update_admin(
    uid: str,
    body: UpdateAdminRequest,
    current_admin: CallerContext = Depends(require_superadmin),
    service: AdminService = Depends(get_admin_service),
):
    """Update admin role and permissions"""
    await service.update(current_admin, uid, role=body.role, permissions=body.permissions)
    return {"success": True, "message": "Admin updated successfully"}

@router.delete("/{uid}")
async def remove_admin(
    uid: str,
    body: Optional[RemoveAdminRequest] = None,
    current_admin: CallerContext = Depends(require_superadmin),
    service: AdminService = Depends(get_admin_service),
):
    """Remove admin access; the admin record is deleted"""
    removed = await service.remove(current_admin, uid, reason=body.reason if body else None)
    return {
        "success": True,
        "message": "Admin removed successfully",
        "removedAdmin": removed,
    }

@router.put("/{uid}/suspend")
@suspend_limiter
async def suspend_admin(
    request: Request,
    response: Response,
    uid: str,
    body: SuspendAdminRequest,
    current_admin: CallerContext = Depends(require_superadmin),
    service: AdminService = Depends(get_admin_service),
):
    """Suspend admin temporarily"""
    suspended_at = await service.suspend(
        current_admin, uid, duration=body.duration, reason=body.reason
    )
    return {
        "success": True,
        "message": f"Admin suspended for {body.duration or 'an unspecified duration'}",
        "suspendedAt": suspended_at,
    }

@router.put("/{uid}/unsuspend")
@suspend_limiter
async def unsuspend_admin(
    request: Request,
    response: Response,
    uid: str,
    current_admin: CallerContext = Depends(require_superadmin),
    service: AdminService = Depends(get_admin_service),
):
    """Lift an admin suspension"""
    await service.unsuspend(current_admin, uid)
    return {"success": True, "message": "Admin unsuspended successfully"}
