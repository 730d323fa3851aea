"""User moderation: ban and unban with the secondary ban marker"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from google.cloud.firestore import AsyncClient, FieldFilter, Query

from campus_admin.core import collections
from campus_admin.core.constants import AuditAction
from campus_admin.core.exceptions import BadRequestException, NotFoundException
from campus_admin.core.security import CallerContext
from campus_admin.services.audit_service import AuditService
from campus_admin.services.profile_service import ProfileService
from campus_admin.utils.pagination import paginate

logger = logging.getLogger(__name__)

def serialize_user(uid: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """Normalized admin-facing view of a user profile"""
    return {
        "uid": uid,
        "name": data.get("name") or "Unknown",
        "email": data.get("email") or "",
        "program": data.get("program") or "Unknown",
        "createdAt": data.get("createdAt"),
        "isBanned": bool(data.get("isBanned")),
        "bannedAt": data.get("bannedAt"),
        "bannedReason": data.get("bannedReason"),
        "bannedBy": data.get("bannedBy"),
        "photo": data.get("photo"),
        "studentNumber": data.get("studentNumber"),
        "yearLevel": data.get("yearLevel"),
    }

class ModerationService:
    """Service for end-user moderation actions"""

    def __init__(self, db: AsyncClient):
        self.db = db
        self.audit = AuditService(db)
        self.profiles = ProfileService(db)

    async def _require_profile(self, uid: str) -> Dict[str, Any]:
        profile = await self.profiles.get_profile(uid)
        if profile is None:
            raise NotFoundException("User not found")
        return profile

    async def list_users(
        self,
        search: str = "",
        status: Optional[str] = None,
        sort: str = "newest",
        page: int = 1,
        limit: int = 10,
    ) -> Dict[str, Any]:
        """Users with search and ban-status filtering"""
        query = self.db.collection(collections.USERS)
        if sort == "newest":
            query = query.order_by("createdAt", direction=Query.DESCENDING)
        elif sort == "oldest":
            query = query.order_by("createdAt", direction=Query.ASCENDING)
        if status == "banned":
            query = query.where(filter=FieldFilter("isBanned", "==", True))

        users: List[Dict[str, Any]] = [
            serialize_user(doc.id, doc.to_dict() or {}) async for doc in query.stream()
        ]

        if search:
            needle = search.lower()
            users = [
                u for u in users
                if needle in u["name"].lower() or needle in u["email"].lower()
            ]
        if status == "active":
            users = [u for u in users if not u["isBanned"]]

        page_users, pagination = paginate(users, page, limit)
        return {
            "users": page_users,
            "pagination": pagination,
            "filters": {"status": status or "all", "search": search, "sort": sort},
        }

    async def get_user(self, uid: str) -> Dict[str, Any]:
        return serialize_user(uid, await self._require_profile(uid))

    async def ban(
        self,
        actor: CallerContext,
        uid: str,
        reason: Optional[str],
        duration: Optional[str] = None,
    ) -> datetime:
        """
        Mark a user banned.

        Both the profile flag and the ban marker are written before the audit
        entry. There is no rollback: if the marker write fails after the
        profile update, the error surfaces and an operator reconciles.
        """
        if not reason or not reason.strip():
            raise BadRequestException("Reason is required", error_code="REASON_REQUIRED")

        logger.info(f"Banning user {uid}...")
        profile = await self._require_profile(uid)
        was_banned = bool(profile.get("isBanned"))
        banned_at = datetime.now(timezone.utc)
        duration = duration or "permanent"

        await self.db.collection(collections.USERS).document(uid).update({
            "isBanned": True,
            "bannedAt": banned_at,
            "bannedReason": reason,
            "bannedBy": actor.uid,
        })

        try:
            await self.db.collection(collections.BANNED_USERS).document(uid).set({
                "uid": uid,
                "bannedAt": banned_at,
                "bannedReason": reason,
                "bannedBy": actor.uid,
                "status": "active",
                "duration": duration,
            })
        except Exception:
            logger.error(f"User {uid} flagged banned but ban record write failed")
            raise

        await self.audit.log_admin_action(
            actor,
            AuditAction.BAN_USER.value,
            target_uid=uid,
            target_name=profile.get("name") or "User",
            target_email=profile.get("email"),
            changes={"field": "isBanned", "from": was_banned, "to": True},
            reason=reason,
            duration=duration,
            timestamp=banned_at,
        )

        logger.info(f"User {uid} banned successfully")
        return banned_at

    async def unban(self, actor: CallerContext, uid: str) -> None:
        """
        Clear a ban. Unbanning a user who was never banned succeeds; the
        audit entry then records ``from: false``.
        """
        logger.info(f"Unbanning user {uid}...")
        profile = await self._require_profile(uid)
        was_banned = bool(profile.get("isBanned"))

        await self.db.collection(collections.USERS).document(uid).update({
            "isBanned": False,
            "bannedAt": None,
            "bannedReason": None,
            "bannedBy": None,
        })

        try:
            await self.db.collection(collections.BANNED_USERS).document(uid).delete()
        except Exception:
            logger.error(f"User {uid} flag cleared but ban record delete failed")
            raise

        await self.audit.log_admin_action(
            actor,
            AuditAction.UNBAN_USER.value,
            target_uid=uid,
            target_name=profile.get("name") or "User",
            target_email=profile.get("email"),
            changes={"field": "isBanned", "from": was_banned, "to": False},
            reason="Admin unbanned user",
        )

        if not was_banned:
            logger.info(f"User {uid} was not banned; unban recorded as no-op")
        logger.info(f"User {uid} unbanned successfully")
