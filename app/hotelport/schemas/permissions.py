from typing import Literal

from pydantic import BaseModel, Field

from app.hotelport.core.permissions import AccessLevel, ModuleType, PermissionAction, PermissionLevel


class PermissionValue(BaseModel):
    permission_level: PermissionLevel
    access_level: AccessLevel


class ModulePermissionSummary(BaseModel):
    module: ModuleType
    permission: PermissionValue | None = Field(default=None, description="Role permission as configured.")
    effective_access_level: AccessLevel = Field(..., description="Access level enforced at check time.")
    allowed_actions: list[PermissionAction] = Field(default_factory=list)
    accessible_ids: Literal["all"] | list[str] = Field(
        default_factory=list,
        description="`all` for unrestricted access, otherwise the explicit id list.",
    )
    description: str


class MyPermissionsResponse(BaseModel):
    user_id: str
    role: str
    is_external: bool
    is_super_admin: bool
    modules: list[ModulePermissionSummary]
    trace_id: str | None = None


class AccessCheckResponse(BaseModel):
    property_id: str
    allowed: bool = True
    trace_id: str | None = None
