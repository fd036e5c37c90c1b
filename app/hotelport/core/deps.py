from fastapi import Depends, Request
from jose import JWTError
from pydantic import ValidationError

from app.hotelport.core.error_catalog import AppError, ErrorCatalog
from app.hotelport.core.permissions import ModuleType, PermissionAction
from app.hotelport.core.security import TokenData, decode_token, oauth2_scheme
from app.hotelport.db.session import get_db
from app.hotelport.repos.users import UserRepository
from app.hotelport.services.access_control import PermissionService
from app.hotelport.services.audit import AuditService


def get_current_token_data(token: str = Depends(oauth2_scheme)) -> TokenData:
    try:
        payload = decode_token(token)
        return TokenData(**payload)
    except (JWTError, ValidationError, TypeError) as exc:
        raise AppError(ErrorCatalog.INVALID_TOKEN) from exc


def get_audit_service(request: Request, db=Depends(get_db)) -> AuditService:
    return AuditService(db, trace_id=getattr(request.state, "trace_id", "") or None)

def get_current_user(token_data: TokenData = Depends(get_current_token_data), db=Depends(get_db)):
    user_id = token_data.sub
    if not user_id:
        raise AppError(ErrorCatalog.INVALID_TOKEN)

    repo = UserRepository(db)
    user = repo.get_by_id(user_id)
    if user is None:
        raise AppError(ErrorCatalog.INVALID_TOKEN)
    if not user.is_active:
        raise AppError(ErrorCatalog.USER_INACTIVE)
    return user


def require_permission(module: ModuleType, action: PermissionAction, resource_param: str | None = None):
    """Build a route dependency that enforces ``module``/``action`` before the handler runs.

    ``resource_param`` names the path parameter carrying the resource id for
    resource-scoped checks; without it only the level and scope are checked.
    """
    module = ModuleType(module)
    action = PermissionAction(action)

    def dependency(request: Request, user=Depends(get_current_user), db=Depends(get_db)):
        resource_id = None
        if resource_param is not None:
            resource_id = request.path_params.get(resource_param)
            if resource_id is None:
                raise AppError(
                    ErrorCatalog.RESOURCE_ID_REQUIRED,
                    details={"message": f"Missing path parameter: {resource_param}", "field": resource_param},
                )
        PermissionService(db).require_permission(user, module, action, resource_id)
        return user

    return dependency


__all__ = [
    "get_current_token_data",
    "get_current_user",
    "require_permission",
]
