"""User profile lookups against the shared users collection"""

import logging
from typing import Any, Dict, Optional

from google.cloud.firestore import AsyncClient

from campus_admin.core import collections

logger = logging.getLogger(__name__)

class ProfileService:
    """Read-only access to user profiles owned by the profile subsystem"""

    def __init__(self, db: AsyncClient):
        self.db = db

    async def get_profile(self, uid: str) -> Optional[Dict[str, Any]]:
        """Return the profile document, None when absent"""
        if not uid:
            return None
        doc = await self.db.collection(collections.USERS).document(uid).get()
        if not doc.exists:
            return None
        return doc.to_dict() or {}

    async def get_display_name(self, uid: str) -> Optional[str]:
        """
        Best-effort display name for a subject.

        Never raises: lookup failures are logged and reported as None so that
        read paths can fall back to stored values.
        """
        try:
            profile = await self.get_profile(uid)
        except Exception as e:
            logger.warning(f"Could not fetch user {uid}: {e}")
            return None

        if not profile:
            return None
        return profile.get("name") or profile.get("email") or None
