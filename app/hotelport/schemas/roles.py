from pydantic import BaseModel, Field

from app.hotelport.schemas.permissions import PermissionValue


class RolePermissionsPayload(BaseModel):
    portfolio: PermissionValue | None = None
    property: PermissionValue | None = None
    audit: PermissionValue | None = None
    user: PermissionValue | None = None
    system_settings: PermissionValue | None = None
    bank_details: PermissionValue | None = None


class RoleCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    is_external: bool = False
    can_access_mis: bool = False
    permissions: RolePermissionsPayload = Field(default_factory=RolePermissionsPayload)


class RoleUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    is_external: bool | None = None
    can_access_mis: bool | None = None
    permissions: RolePermissionsPayload | None = None


class RoleResponse(BaseModel):
    id: str
    name: str
    description: str | None
    is_external: bool
    can_access_mis: bool
    permissions: dict[str, PermissionValue | None]
    warnings: list[str] = Field(default_factory=list)
    trace_id: str | None = None
