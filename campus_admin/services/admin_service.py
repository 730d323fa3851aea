"""Admin role store, authorization checks and admin lifecycle"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from google.cloud.firestore import AsyncClient

from campus_admin.core import collections
from campus_admin.core.constants import (
    ADMIN_ROLES,
    LEGACY_REMOVED_STATUS,
    AdminRole,
    AdminStatus,
    AuditAction,
)
from campus_admin.core.exceptions import (
    AdminSuspendedException,
    AlreadyAdminException,
    BadRequestException,
    DependencyFailureException,
    ForbiddenException,
    NotFoundException,
)
from campus_admin.core.security import CallerContext, CallerIdentity, IdentityVerifier
from campus_admin.services.audit_service import AuditService
from campus_admin.services.profile_service import ProfileService

logger = logging.getLogger(__name__)

class AdminService:
    """Service class for admin record operations"""

    def __init__(self, db: AsyncClient, identity: Optional[IdentityVerifier] = None):
        self.db = db
        self.identity = identity
        self.audit = AuditService(db)
        self.profiles = ProfileService(db)

    def _admin_ref(self, uid: str):
        return self.db.collection(collections.ADMINS).document(uid)

    async def get_record(self, uid: str) -> Optional[Dict[str, Any]]:
        """Return the admin record, None when the subject is not an admin"""
        doc = await self._admin_ref(uid).get()
        if not doc.exists:
            return None
        return doc.to_dict() or {}

    async def _require_record(self, uid: str) -> Dict[str, Any]:
        record = await self.get_record(uid)
        if record is None:
            raise NotFoundException("Admin not found")
        return record

    # ===== Authorization gate =====

    async def authorize(self, identity: CallerIdentity) -> CallerContext:
        """
        Stage 1: admin in good standing.

        Claims are only a first-pass hint; the admin record is authoritative,
        so a caller whose record was deleted is rejected even while their
        token still carries the admin claim.
        """
        if not identity.has_admin_claim:
            logger.warning(f"User does not have admin custom claims: {identity.uid}")
            raise ForbiddenException("Admin access required", error_code="ADMIN_REQUIRED")

        record = await self.get_record(identity.uid)
        if record is None:
            logger.warning(f"Admin claim without admin record for {identity.uid}")
            raise ForbiddenException("Admin access required", error_code="ADMIN_REQUIRED")

        status = record.get("status") or AdminStatus.ACTIVE.value
        if status == AdminStatus.SUSPENDED.value:
            logger.warning(f"Admin account is suspended: {identity.uid}")
            raise AdminSuspendedException()
        if status == LEGACY_REMOVED_STATUS:
            logger.warning(f"Admin access has been revoked: {identity.uid}")
            raise ForbiddenException("Admin access has been revoked", error_code="ADMIN_REVOKED")

        context = CallerContext(
            uid=identity.uid,
            email=record.get("email") or identity.email,
            name=record.get("name") or record.get("email") or identity.name or identity.email or "Unknown",
            role=record.get("role") or AdminRole.MODERATOR.value,
            status=status,
        )
        logger.info(f"Admin access granted: {context.uid} ({context.role})")
        return context

    async def require_superadmin(self, caller: CallerContext) -> CallerContext:
        """
        Stage 2: superadmin only.

        Re-reads the record on every call so a demotion applies to the very
        next request.
        """
        record = await self.get_record(caller.uid)
        if record is None:
            logger.warning(f"Admin document not found for {caller.uid}")
            raise ForbiddenException("Admin access required", error_code="ADMIN_REQUIRED")

        role = record.get("role") or AdminRole.MODERATOR.value
        if role != AdminRole.SUPERADMIN.value:
            logger.warning(f"Access denied - {caller.uid} is {role}, not superadmin")
            raise ForbiddenException(
                "Only superadmins can access this resource",
                error_code="SUPERADMIN_REQUIRED",
            )
        return caller

    # ===== Reads =====

    async def list_admins(self) -> List[Dict[str, Any]]:
        """Every admin record"""
        return [
            {"uid": doc.id, **(doc.to_dict() or {})}
            async for doc in self.db.collection(collections.ADMINS).stream()
        ]

    async def _resolve_promoter_name(self, promoter_uid: Optional[str]) -> str:
        if not promoter_uid:
            return "N/A"
        try:
            promoter = await self.get_record(promoter_uid)
            if promoter is not None:
                return promoter.get("name") or "Unknown Admin"
            profile = await self.profiles.get_profile(promoter_uid)
            if profile is not None:
                return profile.get("name") or "Unknown User"
        except Exception as e:
            logger.warning(f"Could not resolve promotedBy {promoter_uid}: {e}")
            return "Unknown Admin"
        return "N/A"

    async def get_admin_details(self, uid: str) -> Dict[str, Any]:
        """Single admin view with provenance and recent actions"""
        record = await self._require_record(uid)

        try:
            recent_actions = await self.audit.get_recent(limit=10, admin_uid=uid)
        except Exception as e:
            logger.warning(f"Could not fetch audit logs for admin {uid}: {e}")
            recent_actions = []

        actions_count = record.get("actionsCount") or 0
        return {
            "uid": uid,
            "name": record.get("name") or "Unknown",
            "email": record.get("email") or "N/A",
            "role": record.get("role") or AdminRole.MODERATOR.value,
            "status": record.get("status") or AdminStatus.ACTIVE.value,
            "promotedAt": record.get("promotedAt"),
            "promotedBy": await self._resolve_promoter_name(record.get("promotedBy")),
            "permissions": record.get("permissions") or {},
            "lastActive": record.get("lastActive"),
            "loginCount": record.get("loginCount") or 0,
            "actionsCount": actions_count,
            "recentActions": recent_actions,
            "stats": {
                "totalActions": actions_count,
                "lastActive": record.get("lastActive"),
            },
        }

    # ===== Lifecycle =====

    async def promote(
        self,
        actor: CallerContext,
        role: Optional[str],
        uid: Optional[str] = None,
        email: Optional[str] = None,
        permissions: Optional[Dict[str, Any]] = None,
        reason: Optional[str] = None,
    ) -> Dict[str, Any]:
        """NO_RECORD (or non-active record) -> ACTIVE"""
        if not uid and not email:
            raise BadRequestException("uid or email is required")
        if not role:
            raise BadRequestException("role is required")
        if role not in ADMIN_ROLES:
            raise BadRequestException("Invalid role", error_code="INVALID_ROLE")

        logger.info(f"Promoting user {uid or email} to {role}...")

        if email and not uid:
            uid = await self.identity.lookup_uid_by_email(email)
            if uid is None:
                raise NotFoundException("User with this email not found")
            logger.info(f"Resolved email {email} to UID {uid}")

        profile = await self.profiles.get_profile(uid)
        if profile is None:
            raise NotFoundException("User not found in database")

        existing = await self.get_record(uid)
        if existing is not None and (existing.get("status") or AdminStatus.ACTIVE.value) == AdminStatus.ACTIVE.value:
            raise AlreadyAdminException()
        if existing is not None:
            logger.info(f"Overwriting {existing.get('status')} admin record for {uid}")

        user_name = profile.get("name") or "Unknown"
        user_email = profile.get("email") or email or "N/A"
        promoted_at = datetime.now(timezone.utc)

        await self._admin_ref(uid).set({
            "uid": uid,
            "email": user_email,
            "name": user_name,
            "role": role,
            "status": AdminStatus.ACTIVE.value,
            "promotedBy": actor.uid,
            "promotedAt": promoted_at,
            "permissions": permissions or {},
            "lastActive": None,
            "loginCount": 0,
            "actionsCount": 0,
        })

        try:
            await self.identity.set_admin_claims(
                uid, admin=True, superadmin=role == AdminRole.SUPERADMIN.value
            )
        except Exception as e:
            logger.error(f"Admin record written but claim assertion failed for {uid}: {e}")
            raise DependencyFailureException("Failed to grant admin access")
        logger.info(f"Firebase custom claim set for {uid}")

        await self.audit.log_admin_action(
            actor,
            AuditAction.PROMOTE_ADMIN.value,
            target_uid=uid,
            target_name=user_name,
            target_email=user_email,
            changes={"field": "role", "from": "user", "to": role},
            reason=reason,
            timestamp=promoted_at,
        )

        logger.info(f"User {uid} promoted to {role}")
        return {
            "uid": uid,
            "name": user_name,
            "email": user_email,
            "role": role,
            "promotedAt": promoted_at,
        }

    async def update(
        self,
        actor: CallerContext,
        uid: str,
        role: Optional[str] = None,
        permissions: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Partial edit of role and permissions"""
        if role is not None and role not in ADMIN_ROLES:
            raise BadRequestException("Invalid role", error_code="INVALID_ROLE")

        logger.info(f"Updating admin {uid}...")
        record = await self._require_record(uid)

        update_data: Dict[str, Any] = {}
        if role:
            update_data["role"] = role
        if permissions is not None:
            update_data["permissions"] = permissions

        if update_data:
            await self._admin_ref(uid).update(update_data)

        await self.audit.log_admin_action(
            actor,
            AuditAction.UPDATE_ADMIN.value,
            target_uid=uid,
            target_name=record.get("name") or "Unknown",
            changes={
                "from": {
                    "role": record.get("role"),
                    "permissions": record.get("permissions"),
                },
                "to": {
                    "role": update_data.get("role", record.get("role")),
                    "permissions": update_data.get("permissions", record.get("permissions")),
                },
            },
            reason="Admin updated",
        )
        logger.info(f"Admin {uid} updated")

    async def suspend(
        self,
        actor: CallerContext,
        uid: str,
        duration: Optional[str],
        reason: Optional[str],
    ) -> datetime:
        """ACTIVE -> SUSPENDED; re-applying overwrites the suspension metadata"""
        logger.info(f"Suspending admin {uid}...")
        record = await self._require_record(uid)
        previous = record.get("status") or AdminStatus.ACTIVE.value
        suspended_at = datetime.now(timezone.utc)

        await self._admin_ref(uid).update({
            "status": AdminStatus.SUSPENDED.value,
            "suspendedAt": suspended_at,
            "suspendedReason": reason,
            "suspendedDuration": duration,
        })

        await self.audit.log_admin_action(
            actor,
            AuditAction.SUSPEND_ADMIN.value,
            target_uid=uid,
            target_name=record.get("name") or "Admin",
            target_email=record.get("email") or "N/A",
            changes={"field": "status", "from": previous, "to": AdminStatus.SUSPENDED.value},
            reason=reason,
            duration=duration,
            timestamp=suspended_at,
        )
        logger.info(f"Admin {uid} suspended for {duration}")
        return suspended_at

    async def unsuspend(self, actor: CallerContext, uid: str) -> None:
        """SUSPENDED -> ACTIVE"""
        logger.info(f"Unsuspending admin {uid}...")
        record = await self._require_record(uid)
        previous = record.get("status") or AdminStatus.ACTIVE.value

        await self._admin_ref(uid).update({
            "status": AdminStatus.ACTIVE.value,
            "suspendedAt": None,
            "suspendedReason": None,
            "suspendedDuration": None,
        })

        await self.audit.log_admin_action(
            actor,
            AuditAction.UNSUSPEND_ADMIN.value,
            target_uid=uid,
            target_name=record.get("name") or "Admin",
            target_email=record.get("email") or "N/A",
            changes={"field": "status", "from": previous, "to": AdminStatus.ACTIVE.value},
            reason="Admin unsuspended",
        )
        logger.info(f"Admin {uid} unsuspended")

    async def remove(
        self,
        actor: CallerContext,
        uid: str,
        reason: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        ACTIVE|SUSPENDED -> NO_RECORD.

        The audit entry is written first so it survives whatever happens
        afterwards. Claim revocation is best-effort; the record is deleted
        regardless so a later promotion starts from a clean slate.
        """
        logger.info(f"Removing admin {uid}...")
        record = await self._require_record(uid)
        previous = record.get("status") or AdminStatus.ACTIVE.value

        await self.audit.log_admin_action(
            actor,
            AuditAction.REMOVE_ADMIN.value,
            target_uid=uid,
            target_name=record.get("name") or "Unknown",
            target_email=record.get("email") or "N/A",
            changes={"field": "status", "from": previous, "to": LEGACY_REMOVED_STATUS},
            reason=reason or "Admin removed",
        )

        claims_revoked = True
        try:
            await self.identity.set_admin_claims(uid, admin=False, superadmin=False)
            logger.info(f"Firebase custom claim removed for {uid}")
        except Exception as e:
            claims_revoked = False
            logger.error(f"Claim revocation failed for {uid}, deleting record anyway: {e}")

        try:
            await self._admin_ref(uid).delete()
        except Exception:
            if claims_revoked:
                logger.error(f"Claims revoked but record delete failed for {uid}")
            else:
                logger.error(f"Claim revocation and record delete both failed for {uid}")
            raise

        logger.info(f"Admin {uid} removed")
        return {
            "uid": uid,
            "name": record.get("name") or "Unknown",
            "email": record.get("email") or "N/A",
            "role": record.get("role") or AdminRole.MODERATOR.value,
            "claimsRevoked": claims_revoked,
        }
