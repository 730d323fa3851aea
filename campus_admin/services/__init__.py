"""Business logic services for the admin control plane"""

from .admin_service import AdminService
from .audit_service import AuditService
from .dashboard_service import DashboardService
from .moderation_service import ModerationService
from .profile_service import ProfileService
from .report_service import ReportService
from .study_room_service import StudyRoomService

__all__ = [
    "AdminService",
    "AuditService",
    "DashboardService",
    "ModerationService",
    "ProfileService",
    "ReportService",
    "StudyRoomService",
]
