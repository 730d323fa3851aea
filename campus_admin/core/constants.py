"""Closed vocabularies shared by the admin control plane"""

from enum import Enum

class AdminRole(str, Enum):
    MODERATOR = "moderator"
    SUPERADMIN = "superadmin"

class AdminStatus(str, Enum):
    """
    Statuses an admin record can hold while it exists.

    Removal deletes the record, so there is no "removed" member. Records
    written by older deployments may still carry ``status: removed``; the
    authorization gate rejects those as revoked.
    """
    ACTIVE = "active"
    SUSPENDED = "suspended"

LEGACY_REMOVED_STATUS = "removed"

class ReportStatus(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"

class ReportSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

class AuditAction(str, Enum):
    PROMOTE_ADMIN = "promote_admin"
    UPDATE_ADMIN = "update_admin"
    SUSPEND_ADMIN = "suspend_admin"
    UNSUSPEND_ADMIN = "unsuspend_admin"
    REMOVE_ADMIN = "remove_admin"
    BAN_USER = "ban_user"
    UNBAN_USER = "unban_user"
    UPDATE_REPORT_STATUS = "update_report_status"
    DEACTIVATE_STUDY_ROOM = "deactivate_study_room"
    ACTIVATE_STUDY_ROOM = "activate_study_room"
    DELETE_STUDY_ROOM = "delete_study_room"

ADMIN_ROLES = {role.value for role in AdminRole}
REPORT_STATUSES = {status.value for status in ReportStatus}
REPORT_SEVERITIES = {severity.value for severity in ReportSeverity}
