"""Study room moderation"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from google.cloud.firestore import AsyncClient

from campus_admin.core import collections
from campus_admin.core.constants import AuditAction
from campus_admin.core.exceptions import NotFoundException
from campus_admin.core.security import CallerContext
from campus_admin.services.audit_service import AuditService
from campus_admin.services.profile_service import ProfileService
from campus_admin.utils.pagination import paginate

logger = logging.getLogger(__name__)

def serialize_room(room_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """Normalized admin-facing view of a study room, creator not yet resolved"""
    return {
        "id": data.get("id") or room_id,
        "name": data.get("name") or "Untitled Room",
        "description": data.get("description") or "",
        "creator": data.get("creator"),
        "creatorName": None,
        "creatorEmail": None,
        "participants": data.get("participants") or [],
        "privacy": data.get("privacy") or "public",
        # Rooms written before the flag existed count as active
        "isActive": data.get("isActive") is not False,
        "createdAt": data.get("createdAt"),
        "sessionDate": data.get("sessionDate"),
        "sessionTime": data.get("sessionTime"),
    }

class StudyRoomService:
    """List, activate, deactivate and delete study rooms"""

    def __init__(self, db: AsyncClient):
        self.db = db
        self.audit = AuditService(db)
        self.profiles = ProfileService(db)

    def _room_ref(self, room_id: str):
        return self.db.collection(collections.STUDY_ROOMS).document(room_id)

    async def _require_room(self, room_id: str) -> Dict[str, Any]:
        doc = await self._room_ref(room_id).get()
        if not doc.exists:
            raise NotFoundException("Room not found")
        return doc.to_dict() or {}

    async def _resolve_creator(self, creator_uid: Optional[str]) -> Tuple[str, str]:
        """Creator name and email; ("Unknown", "") when the profile is unavailable"""
        if not creator_uid:
            return "Unknown", ""
        try:
            profile = await self.profiles.get_profile(creator_uid)
        except Exception as e:
            logger.warning(f"Could not fetch room creator {creator_uid}: {e}")
            return "Unknown", ""
        if profile is None:
            logger.warning(f"Room creator {creator_uid} not found")
            return "Unknown", ""
        return profile.get("name") or "Unknown", profile.get("email") or ""

    async def enrich_rooms(self, rooms: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        creators = await asyncio.gather(*(self._resolve_creator(room["creator"]) for room in rooms))
        return [
            {**room, "creatorName": name, "creatorEmail": email}
            for room, (name, email) in zip(rooms, creators)
        ]

    async def list_rooms(
        self,
        status: Optional[str] = None,
        privacy: Optional[str] = None,
        search: str = "",
        page: int = 1,
        limit: int = 10,
    ) -> Dict[str, Any]:
        """Rooms with status, privacy and search filters plus collection-wide stats"""
        rooms = [
            serialize_room(doc.id, doc.to_dict() or {})
            async for doc in self.db.collection(collections.STUDY_ROOMS).stream()
        ]

        stats = {
            "totalRooms": len(rooms),
            "activeRooms": sum(1 for room in rooms if room["isActive"]),
            "publicRooms": sum(1 for room in rooms if room["privacy"] == "public"),
            "privateRooms": sum(1 for room in rooms if room["privacy"] == "private"),
        }

        # Search covers creator names, so enrichment runs before filtering
        rooms = await self.enrich_rooms(rooms)

        if status == "active":
            rooms = [room for room in rooms if room["isActive"]]
        elif status == "inactive":
            rooms = [room for room in rooms if not room["isActive"]]
        if privacy in ("public", "private"):
            rooms = [room for room in rooms if room["privacy"] == privacy]
        if search:
            needle = search.lower()
            rooms = [
                room for room in rooms
                if any(
                    needle in (room[field] or "").lower()
                    for field in ("name", "creatorName", "description")
                )
            ]

        page_rooms, pagination = paginate(rooms, page, limit)
        logger.info(f"Fetched {len(page_rooms)} rooms (page {pagination['page']}/{pagination['pages']})")
        return {
            "rooms": page_rooms,
            "pagination": pagination,
            "stats": stats,
            "filters": {
                "status": status or "all",
                "privacy": privacy or "all",
                "search": search,
            },
        }

    async def get_room(self, room_id: str) -> Dict[str, Any]:
        room = serialize_room(room_id, await self._require_room(room_id))
        name, email = await self._resolve_creator(room["creator"])
        return {**room, "creatorName": name, "creatorEmail": email}

    async def set_active(self, actor: CallerContext, room_id: str, active: bool) -> datetime:
        verb = "activate" if active else "deactivate"
        logger.info(f"{verb.capitalize()}ing room {room_id}...")
        room = await self._require_room(room_id)
        changed_at = datetime.now(timezone.utc)

        if active:
            update = {"isActive": True, "activatedAt": changed_at, "activatedBy": actor.uid}
            action = AuditAction.ACTIVATE_STUDY_ROOM.value
        else:
            update = {"isActive": False, "deactivatedAt": changed_at, "deactivatedBy": actor.uid}
            action = AuditAction.DEACTIVATE_STUDY_ROOM.value

        await self._room_ref(room_id).update(update)

        await self.audit.log_admin_action(
            actor,
            action,
            target_room_id=room_id,
            target_name=room.get("name") or "Untitled Room",
            changes={"field": "isActive", "from": not active, "to": active},
            reason=f"Room {verb}d by admin",
            timestamp=changed_at,
        )
        logger.info(f"Room {room_id} {verb}d")
        return changed_at

    async def delete(self, actor: CallerContext, room_id: str) -> datetime:
        logger.info(f"Deleting room {room_id}...")
        room = await self._require_room(room_id)
        deleted_at = datetime.now(timezone.utc)

        await self._room_ref(room_id).delete()

        await self.audit.log_admin_action(
            actor,
            AuditAction.DELETE_STUDY_ROOM.value,
            target_room_id=room_id,
            target_name=room.get("name") or "Untitled Room",
            changes={"field": "status", "from": "active", "to": "deleted"},
            reason="Room permanently deleted by admin",
            timestamp=deleted_at,
        )
        logger.info(f"Room {room_id} deleted")
        return deleted_at
