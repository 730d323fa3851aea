"""Firebase configuration and initialization"""

import json
import logging
import os
from typing import Any, Dict, Optional

import firebase_admin
from firebase_admin import credentials

from campus_admin.core.config import settings

logger = logging.getLogger(__name__)

# Initialize Firebase Admin SDK lazily
firebase_app: Optional[firebase_admin.App] = None

def _service_account_from_env() -> Optional[Dict[str, Any]]:
    """Build a service account dict from individual env vars"""
    if not (
        settings.FIREBASE_PROJECT_ID
        and settings.FIREBASE_CLIENT_EMAIL
        and settings.FIREBASE_PRIVATE_KEY
    ):
        return None

    # Private keys pasted into env files usually carry escaped newlines
    private_key = settings.FIREBASE_PRIVATE_KEY.replace("\\n", "\n")
    return {
        "type": "service_account",
        "project_id": settings.FIREBASE_PROJECT_ID,
        "client_email": settings.FIREBASE_CLIENT_EMAIL,
        "private_key": private_key,
        "token_uri": "https://oauth2.googleapis.com/token",
    }

def load_credentials() -> Optional[credentials.Base]:
    """Resolve service account credentials from settings"""
    if settings.FIREBASE_CREDENTIALS_JSON:
        try:
            cred_dict = json.loads(settings.FIREBASE_CREDENTIALS_JSON)
        except json.JSONDecodeError as e:
            raise ValueError(f"FIREBASE_CREDENTIALS_JSON is not valid JSON: {e}") from e
        logger.info("Loaded Firebase service account from FIREBASE_CREDENTIALS_JSON")
        return credentials.Certificate(cred_dict)

    cred_dict = _service_account_from_env()
    if cred_dict:
        logger.info("Loaded Firebase service account from individual env vars")
        return credentials.Certificate(cred_dict)

    if settings.FIREBASE_CREDENTIALS_PATH:
        if not os.path.exists(settings.FIREBASE_CREDENTIALS_PATH):
            raise ValueError(
                f"Firebase credentials not found at {settings.FIREBASE_CREDENTIALS_PATH}"
            )
        logger.info("Loaded Firebase service account from credentials file")
        return credentials.Certificate(settings.FIREBASE_CREDENTIALS_PATH)

    return None

def initialize_firebase() -> firebase_admin.App:
    """Initialize Firebase Admin SDK"""
    global firebase_app

    if firebase_app:
        return firebase_app

    try:
        cred = load_credentials()
    except ValueError as e:
        if settings.is_production:
            raise
        logger.warning(f"Firebase credentials unusable, falling back to defaults: {e}")
        cred = None

    options = {}
    if settings.FIREBASE_PROJECT_ID:
        options["projectId"] = settings.FIREBASE_PROJECT_ID

    if cred is None:
        if settings.is_production:
            raise ValueError("Firebase credentials not configured")
        logger.warning(
            "Firebase service account not provided, using application default credentials"
        )

    firebase_app = firebase_admin.initialize_app(cred, options or None)
    logger.info("Firebase Admin SDK initialized successfully")
    return firebase_app
