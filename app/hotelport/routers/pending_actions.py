from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.hotelport.core.action_types import PendingActionResourceType, PendingActionStatus, PendingActionType
from app.hotelport.core.deps import get_audit_service, get_current_user, require_permission
from app.hotelport.core.permissions import ModuleType, PermissionAction
from app.hotelport.db.session import get_db
from app.hotelport.repos.pending_actions import PendingActionQueryFilters
from app.hotelport.schemas.pending_actions import (
    AmountConfirmedUpdateRequest,
    PendingActionCreateRequest,
    PendingActionListResponse,
    PendingActionResponse,
    RejectPendingActionRequest,
)
from app.hotelport.services.pending_actions import PendingActionListQuery, PendingActionRequest, PendingActionService

router = APIRouter()


def _str_or_none(value) -> str | None:
    return str(value) if value is not None else None


@router.post("/pending-actions", response_model=PendingActionResponse, status_code=status.HTTP_201_CREATED)
async def create_pending_action(
    payload: PendingActionCreateRequest,
    current_user=Depends(get_current_user),
    audit_service=Depends(get_audit_service),
    db=Depends(get_db),
):
    request = PendingActionRequest(
        resource_type=payload.resource_type.value,
        action_type=payload.action_type.value,
        property_id=_str_or_none(payload.property_id),
        portfolio_id=_str_or_none(payload.portfolio_id),
        audit_id=_str_or_none(payload.audit_id),
        new_portfolio_id=_str_or_none(payload.transfer_data.new_portfolio_id) if payload.transfer_data else None,
        amount_confirmed=payload.audit_update_data.amount_confirmed if payload.audit_update_data else None,
        reason=payload.reason,
    )
    return PendingActionService(db, audit_service=audit_service).create(request, current_user)


@router.get("/pending-actions", response_model=PendingActionListResponse)
async def list_pending_actions(
    status_filter: PendingActionStatus | None = Query(default=None, alias="status"),
    action_type: PendingActionType | None = None,
    resource_type: PendingActionResourceType | None = None,
    requested_user_id: UUID | None = None,
    approval_user_id: UUID | None = None,
    property_id: UUID | None = None,
    portfolio_id: UUID | None = None,
    audit_id: UUID | None = None,
    sort_by: str = Query(default="created_at", pattern="^(created_at|approved_at|status|action_type)$"),
    sort_order: str = Query(default="desc", pattern="^(asc|desc)$"),
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
    current_user=Depends(get_current_user),
    db=Depends(get_db),
):
    filters = PendingActionQueryFilters(
        status=status_filter.value if status_filter else None,
        action_type=action_type.value if action_type else None,
        resource_type=resource_type.value if resource_type else None,
        requested_user_id=_str_or_none(requested_user_id),
        approval_user_id=_str_or_none(approval_user_id),
        property_id=_str_or_none(property_id),
        portfolio_id=_str_or_none(portfolio_id),
        audit_id=_str_or_none(audit_id),
    )
    query = PendingActionListQuery(filters=filters, sort_by=sort_by, sort_order=sort_order, page=page, limit=limit)
    return PendingActionService(db).find_all(query, current_user)


@router.get("/pending-actions/{action_id}", response_model=PendingActionResponse)
async def get_pending_action(action_id: str, current_user=Depends(get_current_user), db=Depends(get_db)):
    return PendingActionService(db).find_one(action_id, current_user)


@router.post("/pending-actions/{action_id}/approve", response_model=PendingActionResponse)
async def approve_pending_action(
    action_id: str,
    current_user=Depends(get_current_user),
    audit_service=Depends(get_audit_service),
    db=Depends(get_db),
):
    return PendingActionService(db, audit_service=audit_service).approve(action_id, current_user)


@router.post("/pending-actions/{action_id}/reject", response_model=PendingActionResponse)
async def reject_pending_action(
    action_id: str,
    payload: RejectPendingActionRequest,
    current_user=Depends(get_current_user),
    audit_service=Depends(get_audit_service),
    db=Depends(get_db),
):
    service = PendingActionService(db, audit_service=audit_service)
    return service.reject(action_id, current_user, payload.rejection_reason)


@router.post(
    "/audits/{audit_id}/amount-confirmed-requests",
    response_model=PendingActionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_amount_confirmed_update(
    audit_id: str,
    payload: AmountConfirmedUpdateRequest,
    current_user=Depends(require_permission(ModuleType.AUDIT, PermissionAction.UPDATE)),
    audit_service=Depends(get_audit_service),
    db=Depends(get_db),
):
    return PendingActionService(db, audit_service=audit_service).request_audit_amount_update(
        audit_id,
        payload.amount_confirmed,
        current_user,
        reason=payload.reason,
    )
