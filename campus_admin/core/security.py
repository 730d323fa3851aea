"""
Identity verification for inbound bearer tokens
Wraps Firebase Auth: token verification, email lookup and admin custom claims
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.concurrency import run_in_threadpool
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from firebase_admin import auth

from .exceptions import InternalServerException, UnauthorizedException
from .firebase import initialize_firebase

logger = logging.getLogger(__name__)

# Security scheme; missing headers are reported by us, not by FastAPI
security = HTTPBearer(auto_error=False)

@dataclass(frozen=True)
class CallerIdentity:
    """Verified caller, built once per request from the decoded token"""
    uid: str
    email: Optional[str] = None
    name: Optional[str] = None
    is_admin_claim: bool = False
    is_superadmin_claim: bool = False

    @property
    def has_admin_claim(self) -> bool:
        return self.is_admin_claim or self.is_superadmin_claim

@dataclass(frozen=True)
class CallerContext:
    """Admin in good standing, resolved from the admin record"""
    uid: str
    email: Optional[str]
    name: str
    role: str
    status: str

    @property
    def is_superadmin(self) -> bool:
        return self.role == "superadmin"

class IdentityVerifier:
    """Firebase Auth backed identity provider"""

    def __init__(self, app=None):
        self._app = app

    @property
    def app(self):
        if self._app is None:
            self._app = initialize_firebase()
        return self._app

    async def verify(self, token: str) -> CallerIdentity:
        """Verify an ID token and return the caller identity"""
        try:
            decoded = await run_in_threadpool(auth.verify_id_token, token, self.app)
        except auth.ExpiredIdTokenError:
            raise UnauthorizedException("Token expired", error_code="TOKEN_EXPIRED")
        except (auth.RevokedIdTokenError, auth.InvalidIdTokenError):
            raise UnauthorizedException("Invalid token", error_code="INVALID_TOKEN")
        except ValueError:
            raise UnauthorizedException("Invalid token format", error_code="MALFORMED_TOKEN")
        except Exception as e:
            logger.error(f"Identity verifier failure: {type(e).__name__}: {e}")
            raise InternalServerException("Authentication failed")

        return identity_from_claims(decoded)

    async def lookup_uid_by_email(self, email: str) -> Optional[str]:
        """Resolve an email address to a subject id, None when unknown"""
        try:
            user = await run_in_threadpool(auth.get_user_by_email, email, self.app)
        except auth.UserNotFoundError:
            return None
        return user.uid

    async def set_admin_claims(self, uid: str, admin: bool, superadmin: bool = False) -> None:
        """Replace the admin capability claims on a subject"""
        claims = {"admin": admin, "superadmin": superadmin}
        await run_in_threadpool(auth.set_custom_user_claims, uid, claims, self.app)

def identity_from_claims(decoded: Dict[str, Any]) -> CallerIdentity:
    """Build a caller identity out of a decoded token payload"""
    firebase_claims = decoded.get("firebase") or {}
    return CallerIdentity(
        uid=decoded.get("uid") or decoded.get("sub"),
        email=decoded.get("email"),
        name=decoded.get("name") or decoded.get("displayName"),
        is_admin_claim=bool(decoded.get("admin") or firebase_claims.get("admin")),
        is_superadmin_claim=bool(decoded.get("superadmin")),
    )

_verifier = IdentityVerifier()

def get_identity_verifier() -> IdentityVerifier:
    """Dependency returning the process-wide identity verifier"""
    return _verifier

async def get_caller_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> CallerIdentity:
    """Extract and verify the caller from the bearer token"""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedException("No token provided", error_code="NO_TOKEN")

    return await verifier.verify(credentials.credentials.strip())
