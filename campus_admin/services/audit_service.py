"""Audit ledger: append-only admin action log with enriched reads"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from google.cloud.firestore import AsyncClient, FieldFilter, Query

from campus_admin.core import collections
from campus_admin.core.exceptions import NotFoundException
from campus_admin.core.security import CallerContext
from campus_admin.services.profile_service import ProfileService
from campus_admin.utils.pagination import paginate

logger = logging.getLogger(__name__)

class AuditService:
    """Service for logging and reading admin actions"""

    def __init__(self, db: AsyncClient):
        self.db = db
        self.profiles = ProfileService(db)

    async def log_admin_action(
        self,
        actor: CallerContext,
        action: str,
        *,
        target_uid: Optional[str] = None,
        target_report_id: Optional[str] = None,
        target_room_id: Optional[str] = None,
        target_name: Optional[str] = None,
        target_email: Optional[str] = None,
        changes: Optional[Dict[str, Any]] = None,
        reason: Optional[str] = None,
        duration: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> str:
        """Append one immutable entry and return its id"""
        entry: Dict[str, Any] = {
            "timestamp": timestamp or datetime.now(timezone.utc),
            "adminUid": actor.uid,
            "adminName": actor.name or "Unknown",
            "action": action,
            "targetName": target_name,
            "changes": changes or {},
            "reason": reason,
            "status": "completed",
        }
        if target_uid is not None:
            entry["targetUid"] = target_uid
        if target_report_id is not None:
            entry["targetReportId"] = target_report_id
        if target_room_id is not None:
            entry["targetRoomId"] = target_room_id
        if target_email is not None:
            entry["targetEmail"] = target_email
        if duration is not None:
            entry["duration"] = duration

        _, ref = await self.db.collection(collections.AUDIT_LOGS).add(entry)
        logger.info(f"Audit entry {ref.id} recorded: {action} by {actor.uid}")
        return ref.id

    # ===== Read path =====

    async def fetch_since(self, days: int) -> List[Dict[str, Any]]:
        """Primary fetch: every entry inside the trailing window, newest first"""
        start = datetime.now(timezone.utc) - timedelta(days=days)
        query = (
            self.db.collection(collections.AUDIT_LOGS)
            .where(filter=FieldFilter("timestamp", ">=", start))
            .order_by("timestamp", direction=Query.DESCENDING)
        )
        return [{"id": doc.id, **(doc.to_dict() or {})} async for doc in query.stream()]

    async def get_recent(
        self,
        limit: int = 10,
        admin_uid: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Most recent raw entries, optionally for one admin"""
        query = self.db.collection(collections.AUDIT_LOGS)
        if admin_uid:
            query = query.where(filter=FieldFilter("adminUid", "==", admin_uid))
        query = query.order_by("timestamp", direction=Query.DESCENDING).limit(limit)
        return [{"id": doc.id, **(doc.to_dict() or {})} async for doc in query.stream()]

    @staticmethod
    def filter_logs(
        logs: List[Dict[str, Any]],
        admin_uid: Optional[str] = None,
        action: Optional[str] = None,
        target_uid: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """In-memory pass applied after the time-window fetch"""
        if admin_uid:
            logs = [log for log in logs if log.get("adminUid") == admin_uid]
        if action:
            logs = [log for log in logs if log.get("action") == action]
        if target_uid:
            logs = [log for log in logs if log.get("targetUid") == target_uid]
        if search:
            needle = search.lower()
            logs = [
                log for log in logs
                if any(
                    needle in str(log.get(field) or "").lower()
                    for field in ("adminName", "targetName", "reason", "action")
                )
            ]
        return logs

    async def list_logs(
        self,
        admin_uid: Optional[str] = None,
        action: Optional[str] = None,
        target_uid: Optional[str] = None,
        days: int = 30,
        search: str = "",
        page: int = 1,
        limit: int = 20,
    ) -> Dict[str, Any]:
        """Filtered, paginated, enriched audit entries"""
        logs = await self.fetch_since(days)
        logs = self.filter_logs(logs, admin_uid, action, target_uid, search)

        page_logs, pagination = paginate(logs, page, limit)
        page_logs = await self.enrich_logs(page_logs)

        logger.info(
            f"Fetched {len(page_logs)} audit logs (page {pagination['page']}/{pagination['pages']})"
        )
        return {
            "logs": page_logs,
            "pagination": pagination,
            "filters": {
                "adminUid": admin_uid or "all",
                "action": action or "all",
                "targetUid": target_uid or "all",
                "days": days,
                "search": search,
            },
        }

    async def list_admin_logs(
        self,
        admin_uid: str,
        days: int = 30,
        page: int = 1,
        limit: int = 20,
    ) -> Dict[str, Any]:
        """One admin's entries inside the trailing window"""
        logs = self.filter_logs(await self.fetch_since(days), admin_uid=admin_uid)
        page_logs, pagination = paginate(logs, page, limit)
        return {
            "adminUid": admin_uid,
            "logs": await self.enrich_logs(page_logs),
            "pagination": pagination,
            "filters": {"days": days},
        }

    async def get_log(self, log_id: str) -> Dict[str, Any]:
        """Single enriched entry"""
        doc = await self.db.collection(collections.AUDIT_LOGS).document(log_id).get()
        if not doc.exists:
            raise NotFoundException("Log not found")

        log = {"id": doc.id, **(doc.to_dict() or {})}
        log["affectedUserName"] = await self.get_affected_user_name(log)
        return log

    # ===== Enrichment =====

    async def get_report_creator_name(self, report_id: str) -> Optional[str]:
        """Display name of whoever filed a report, None when unresolvable"""
        try:
            doc = await self.db.collection(collections.REPORTS).document(report_id).get()
        except Exception as e:
            logger.warning(f"Could not fetch report {report_id}: {e}")
            return None

        if not doc.exists:
            return None
        data = doc.to_dict() or {}
        reporter_id = data.get("reporterId") or data.get("createdBy") or data.get("createdByUid")
        if not reporter_id:
            return None
        return await self.profiles.get_display_name(reporter_id)

    async def get_affected_user_name(self, log: Dict[str, Any]) -> str:
        """
        Human-readable name of whoever an entry affected.

        Branches on the target key the entry carries. Lookups never fail the
        read: a deleted or unreachable identity degrades to the stored
        ``targetName`` and finally to ``"N/A"``.
        """
        stored = log.get("targetName")

        if log.get("targetUid"):
            name = await self.profiles.get_display_name(log["targetUid"])
            return name or stored or "N/A"

        if log.get("targetReportId"):
            name = await self.get_report_creator_name(log["targetReportId"])
            return name or stored or "N/A"

        return stored or "N/A"

    async def enrich_logs(self, logs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Attach ``affectedUserName`` to each entry; the stored entries are untouched"""
        names = await asyncio.gather(*(self.get_affected_user_name(log) for log in logs))
        return [{**log, "affectedUserName": name} for log, name in zip(logs, names)]
