"""Firestore collection names.

Firestore creates collections on first write, so these constants are the
only place the layout of the store is spelled out.
"""

ADMINS = "admins"
USERS = "users"
BANNED_USERS = "bannedUsers"
AUDIT_LOGS = "auditLogs"
REPORTS = "reports"
STUDY_ROOMS = "study-groups"
