"""Admin control plane request schemas"""

from pydantic import BaseModel, Field
from typing import Optional, Dict, Any

class PromoteUserRequest(BaseModel):
    uid: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = Field(None, description="moderator, superadmin")
    permissions: Optional[Dict[str, Any]] = None
    reason: Optional[str] = None

class UpdateAdminRequest(BaseModel):
    role: Optional[str] = Field(None, description="moderator, superadmin")
    permissions: Optional[Dict[str, Any]] = None

class RemoveAdminRequest(BaseModel):
    reason: Optional[str] = None

class SuspendAdminRequest(BaseModel):
    duration: Optional[str] = Field(None, description="e.g. 24h, 7d, 30d")
    reason: Optional[str] = None

class BanUserRequest(BaseModel):
    # Required by the service; kept optional here so a missing reason
    # is reported as "Reason is required" rather than a schema error
    reason: Optional[str] = None
    duration: Optional[str] = Field(None, description="Defaults to permanent")

class UpdateReportStatusRequest(BaseModel):
    status: Optional[str] = Field(None, description="pending, resolved, dismissed")
    severity: Optional[str] = Field(None, description="low, medium, high, critical")
    reason: Optional[str] = None
