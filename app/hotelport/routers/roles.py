from fastapi import APIRouter, Depends, Request, status

from app.hotelport.core.deps import get_audit_service, require_permission
from app.hotelport.core.permissions import MODULE_PERMISSION_FIELDS, PermissionAction, ModuleType
from app.hotelport.db.session import get_db
from app.hotelport.schemas.roles import RoleCreateRequest, RoleResponse, RoleUpdateRequest
from app.hotelport.services.roles import RoleService

router = APIRouter()


def _role_response(request: Request, role, warnings: list[str]) -> RoleResponse:
    return RoleResponse(
        id=str(role.id),
        name=role.name,
        description=role.description,
        is_external=role.is_external,
        can_access_mis=role.can_access_mis,
        permissions={module.value: getattr(role, column) for module, column in MODULE_PERMISSION_FIELDS.items()},
        warnings=warnings,
        trace_id=getattr(request.state, "trace_id", "") or None,
    )


@router.post("/roles", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
async def create_role(
    request: Request,
    payload: RoleCreateRequest,
    current_user=Depends(require_permission(ModuleType.SYSTEM_SETTINGS, PermissionAction.CREATE)),
    audit_service=Depends(get_audit_service),
    db=Depends(get_db),
):
    role, warnings = RoleService(db, audit_service=audit_service).create_role(
        current_user,
        name=payload.name,
        description=payload.description,
        is_external=payload.is_external,
        can_access_mis=payload.can_access_mis,
        permissions=payload.permissions.model_dump(mode="json", exclude_unset=True),
    )
    return _role_response(request, role, warnings)


@router.patch("/roles/{role_id}", response_model=RoleResponse)
async def update_role(
    request: Request,
    role_id: str,
    payload: RoleUpdateRequest,
    current_user=Depends(require_permission(ModuleType.SYSTEM_SETTINGS, PermissionAction.UPDATE)),
    audit_service=Depends(get_audit_service),
    db=Depends(get_db),
):
    role, warnings = RoleService(db, audit_service=audit_service).update_role(
        current_user,
        role_id,
        name=payload.name,
        description=payload.description,
        is_external=payload.is_external,
        can_access_mis=payload.can_access_mis,
        permissions=payload.permissions.model_dump(mode="json", exclude_unset=True) if payload.permissions else None,
    )
    return _role_response(request, role, warnings)
