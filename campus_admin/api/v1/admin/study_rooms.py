"""Study room moderation endpoints"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query
from google.cloud.firestore import AsyncClient

from campus_admin.core.config import settings
from campus_admin.core.database import get_db
from campus_admin.core.security import CallerContext
from campus_admin.services.study_room_service import StudyRoomService
from .dependencies import require_admin

router = APIRouter()

@router.get("")
async def list_rooms(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=settings.MAX_PAGE_SIZE),
    status: Optional[str] = Query(None, description="active, inactive"),
    privacy: Optional[str] = Query(None, description="public, private"),
    search: str = Query(""),
    current_admin: CallerContext = Depends(require_admin),
    db: AsyncClient = Depends(get_db),
):
    """List study rooms with moderation stats"""
    result = await StudyRoomService(db).list_rooms(
        status=status, privacy=privacy, search=search, page=page, limit=limit
    )
    return {**result, "timestamp": datetime.now(timezone.utc).isoformat()}

@router.get("/{room_id}")
async def get_room(
    room_id: str,
    current_admin: CallerContext = Depends(require_admin),
    db: AsyncClient = Depends(get_db),
):
    return await StudyRoomService(db).get_room(room_id)

@router.put("/{room_id}/deactivate")
async def deactivate_room(
    room_id: str,
    current_admin: CallerContext = Depends(require_admin),
    db: AsyncClient = Depends(get_db),
):
    deactivated_at = await StudyRoomService(db).set_active(current_admin, room_id, active=False)
    return {
        "success": True,
        "message": "Room deactivated successfully",
        "deactivatedAt": deactivated_at,
    }

@router.put("/{room_id}/activate")
async def activate_room(
    room_id: str,
    current_admin: CallerContext = Depends(require_admin),
    db: AsyncClient = Depends(get_db),
):
    activated_at = await StudyRoomService(db).set_active(current_admin, room_id, active=True)
    return {
        "success": True,
        "message": "Room activated successfully",
        "activatedAt": activated_at,
    }

@router.delete("/{room_id}")
async def delete_room(
    room_id: str,
    current_admin: CallerContext = Depends(require_admin),
    db: AsyncClient = Depends(get_db),
):
    """Delete a study room permanently"""
    deleted_at = await StudyRoomService(db).delete(current_admin, room_id)
    return {
        "success": True,
        "message": "Room deleted successfully",
        "deletedAt": deleted_at,
    }
