"""
Admin authorization dependencies

Two-stage gate: ``require_admin`` confirms an admin in good standing and
returns the caller context that every handler receives explicitly;
``require_superadmin`` additionally re-reads the admin record's role.
"""

from fastapi import Depends, Request
from google.cloud.firestore import AsyncClient

from campus_admin.core.database import get_db
from campus_admin.core.security import (
    CallerContext,
    CallerIdentity,
    IdentityVerifier,
    get_caller_identity,
    get_identity_verifier,
)
from campus_admin.services.admin_service import AdminService

async def require_admin(
    request: Request,
    identity: CallerIdentity = Depends(get_caller_identity),
    db: AsyncClient = Depends(get_db),
) -> CallerContext:
    """Stage 1: verified identity with an active admin record"""
    caller = await AdminService(db).authorize(identity)
    # Rate limit key for the moderation throttles
    request.state.admin_uid = caller.uid
    return caller

async def require_superadmin(
    caller: CallerContext = Depends(require_admin),
    db: AsyncClient = Depends(get_db),
) -> CallerContext:
    """Stage 2: admin record role is superadmin"""
    return await AdminService(db).require_superadmin(caller)

def get_admin_service(
    db: AsyncClient = Depends(get_db),
    identity: IdentityVerifier = Depends(get_identity_verifier),
) -> AdminService:
    return AdminService(db, identity)
