from fastapi import APIRouter, Depends, Request

from app.hotelport.core.deps import get_current_user, require_permission
from app.hotelport.core.permissions import (
    ModuleType,
    PermissionAction,
    allowed_actions,
    effective_access_level,
    is_user_super_admin,
    permission_description,
)
from app.hotelport.db.session import get_db
from app.hotelport.schemas.permissions import (
    AccessCheckResponse,
    ModulePermissionSummary,
    MyPermissionsResponse,
    PermissionValue,
)
from app.hotelport.services.access_control import PermissionService, role_permissions_for

router = APIRouter()


@router.get("/me/permissions", response_model=MyPermissionsResponse)
async def my_permissions(request: Request, current_user=Depends(get_current_user), db=Depends(get_db)):
    service = PermissionService(db)
    role = role_permissions_for(current_user)
    modules = []
    for module in ModuleType:
        permission = role.for_module(module)
        modules.append(
            ModulePermissionSummary(
                module=module,
                permission=PermissionValue(**permission.to_dict()) if permission else None,
                effective_access_level=effective_access_level(module, permission),
                allowed_actions=allowed_actions(permission.permission_level) if permission else [],
                accessible_ids=service.get_accessible_resource_ids(current_user, module),
                description=permission_description(permission),
            )
        )
    return MyPermissionsResponse(
        user_id=str(current_user.id),
        role=role.name,
        is_external=role.is_external,
        is_super_admin=is_user_super_admin(role),
        modules=modules,
        trace_id=getattr(request.state, "trace_id", "") or None,
    )


@router.get("/properties/{property_id}/access-check", response_model=AccessCheckResponse)
async def property_access_check(
    request: Request,
    property_id: str,
    _current_user=Depends(require_permission(ModuleType.PROPERTY, PermissionAction.READ, "property_id")),
):
    return AccessCheckResponse(property_id=property_id, trace_id=getattr(request.state, "trace_id", "") or None)
