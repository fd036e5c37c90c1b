from fastapi import APIRouter, Depends, Request

from app.hotelport.core.deps import get_audit_service, require_permission
from app.hotelport.core.permissions import ModuleType, PermissionAction
from app.hotelport.db.session import get_db
from app.hotelport.schemas.access import AccessMutationRequest, ReplaceAccessRequest, UserAccessResponse
from app.hotelport.services.access_control import PermissionService

router = APIRouter()

_require_user_update = require_permission(ModuleType.USER, PermissionAction.UPDATE, "user_id")


def _access_response(request: Request, user_id: str, record) -> UserAccessResponse:
    return UserAccessResponse(
        user_id=user_id,
        portfolio_ids=list(record.portfolio_ids or []),
        property_ids=list(record.property_ids or []),
        trace_id=getattr(request.state, "trace_id", "") or None,
    )


@router.post("/users/{user_id}/access/add", response_model=UserAccessResponse)
async def add_access(
    request: Request,
    user_id: str,
    payload: AccessMutationRequest,
    current_user=Depends(_require_user_update),
    audit_service=Depends(get_audit_service),
    db=Depends(get_db),
):
    service = PermissionService(db, audit_service=audit_service)
    record = service.add_access(current_user, user_id, payload.module_type, payload.resource_ids)
    return _access_response(request, user_id, record)


@router.post("/users/{user_id}/access/revoke", response_model=UserAccessResponse)
async def revoke_access(
    request: Request,
    user_id: str,
    payload: AccessMutationRequest,
    current_user=Depends(_require_user_update),
    audit_service=Depends(get_audit_service),
    db=Depends(get_db),
):
    service = PermissionService(db, audit_service=audit_service)
    record = service.revoke_access(current_user, user_id, payload.module_type, payload.resource_ids)
    return _access_response(request, user_id, record)


@router.put("/users/{user_id}/access", response_model=UserAccessResponse)
async def replace_access(
    request: Request,
    user_id: str,
    payload: ReplaceAccessRequest,
    current_user=Depends(_require_user_update),
    audit_service=Depends(get_audit_service),
    db=Depends(get_db),
):
    service = PermissionService(db, audit_service=audit_service)
    record = service.replace_access(
        current_user,
        user_id,
        portfolio_ids=payload.portfolio_ids,
        property_ids=payload.property_ids,
    )
    return _access_response(request, user_id, record)


@router.delete("/users/{user_id}/access", response_model=UserAccessResponse)
async def clear_access(
    request: Request,
    user_id: str,
    current_user=Depends(_require_user_update),
    audit_service=Depends(get_audit_service),
    db=Depends(get_db),
):
    service = PermissionService(db, audit_service=audit_service)
    record = service.clear_access(current_user, user_id)
    return _access_response(request, user_id, record)
