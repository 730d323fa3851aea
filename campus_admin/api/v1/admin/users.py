"""User moderation endpoints"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from google.cloud.firestore import AsyncClient

from campus_admin.core.config import settings
from campus_admin.core.database import get_db
from campus_admin.core.rate_limit import ban_limiter
from campus_admin.core.security import CallerContext
from campus_admin.services.moderation_service import ModerationService
from .dependencies import require_admin
from .schemas import BanUserRequest

router = APIRouter()

@router.get("")
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=settings.MAX_PAGE_SIZE),
    search: str = Query(""),
    status: Optional[str] = Query(None, description="active, banned"),
    sort: str = Query("newest", description="newest, oldest"),
    current_admin: CallerContext = Depends(require_admin),
    db: AsyncClient = Depends(get_db),
):
    """List users with search and ban-status filters"""
    result = await ModerationService(db).list_users(
        search=search, status=status, sort=sort, page=page, limit=limit
    )
    return {**result, "timestamp": datetime.now(timezone.utc).isoformat()}

@router.get("/{uid}")
async def get_user(
    uid: str,
    current_admin: CallerContext = Depends(require_admin),
    db: AsyncClient = Depends(get_db),
):
    """Get single user details"""
    user = await ModerationService(db).get_user(uid)
    return {**user, "timestamp": datetime.now(timezone.utc).isoformat()}

@router.put("/{uid}/ban")
@ban_limiter
async def ban_user(
    request: Request,
    response: Response,
    uid: str,
    body: BanUserRequest,
    current_admin: CallerContext = Depends(require_admin),
    db: AsyncClient = Depends(get_db),
):
    """Ban a user"""
    banned_at = await ModerationService(db).ban(
        current_admin, uid, reason=body.reason, duration=body.duration
    )
    return {
        "success": True,
        "message": f"User {uid} has been banned",
        "bannedAt": banned_at,
    }

@router.put("/{uid}/unban")
@ban_limiter
async def unban_user(
    request: Request,
    response: Response,
    uid: str,
    current_admin: CallerContext = Depends(require_admin),
    db: AsyncClient = Depends(get_db),
):
    """Unban a user"""
    await ModerationService(db).unban(current_admin, uid)
    return {"success": True, "message": f"User {uid} has been unbanned"}
