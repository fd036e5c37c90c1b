from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from app.hotelport.core.action_types import PendingActionResourceType, PendingActionStatus, PendingActionType
from app.hotelport.core.config import settings
from app.hotelport.core.error_catalog import AppError, ErrorCatalog
from app.hotelport.core.logging import log_json
from app.hotelport.core.metrics import metrics
from app.hotelport.core.permissions import ModuleType, is_external_user, is_internal_user, is_user_super_admin
from app.hotelport.db.models import PendingAction, as_uuid
from app.hotelport.repos.audits import AuditRecordRepository
from app.hotelport.repos.pending_actions import PendingActionQueryFilters, PendingActionRepository
from app.hotelport.repos.portfolios import PortfolioRepository
from app.hotelport.repos.properties import PropertyRepository
from app.hotelport.repos.users import UserRepository
from app.hotelport.services import notifications
from app.hotelport.services.access_control import PermissionService, role_permissions_for
from app.hotelport.services.action_plans import plan_for
from app.hotelport.services.audit import AuditEventPayload, AuditService
from app.hotelport.services.executors import ActionExecutors

logger = logging.getLogger(__name__)


_PROPERTY_ACTION_TYPES = frozenset(
    {
        PendingActionType.PROPERTY_TRANSFER,
        PendingActionType.PROPERTY_DEACTIVATE,
        PendingActionType.PROPERTY_ACTIVATE,
    }
)


@dataclass(frozen=True)
class PendingActionRequest:
    resource_type: str
    action_type: str
    property_id: str | None = None
    portfolio_id: str | None = None
    audit_id: str | None = None
    new_portfolio_id: str | None = None
    amount_confirmed: Decimal | None = None
    reason: str | None = None


@dataclass(frozen=True)
class PendingActionListQuery:
    filters: PendingActionQueryFilters = PendingActionQueryFilters()
    sort_by: str = "created_at"
    sort_order: str = "desc"
    page: int = 1
    limit: int | None = None


def _round_amount(value) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _require_id(value, label: str) -> str:
    if not value:
        raise AppError(
            ErrorCatalog.RESOURCE_ID_REQUIRED,
            details={"message": f"{label} is required for this action type", "field": label},
        )
    return str(value)


def _audit_update_data(amount_confirmed) -> dict:
    if amount_confirmed is None:
        raise AppError(ErrorCatalog.AUDIT_UPDATE_DATA_REQUIRED)
    amount = _round_amount(amount_confirmed)
    if amount < 0:
        raise AppError(ErrorCatalog.INVALID_AMOUNT_CONFIRMED)
    return {"amount_confirmed": str(amount)}


def _portfolio_ref(portfolio) -> dict | None:
    if portfolio is None:
        return None
    return {"id": str(portfolio.id), "name": portfolio.name}


class PendingActionService:
    """Approval workflow for deferred property, portfolio and audit changes.

    PENDING is the only non-terminal status. Transitions are compare-and-set
    on the status column, so two concurrent decisions on one action cannot
    both succeed; the loser's executor side effects are rolled back with it.
    Notifications are sent after commit and their failures are only logged.
    """

    def __init__(
        self,
        db,
        *,
        permission_service: PermissionService | None = None,
        executors=None,
        notifier=None,
        audit_service: AuditService | None = None,
    ):
        self.db = db
        self.repo = PendingActionRepository(db)
        self.users = UserRepository(db)
        self.properties = PropertyRepository(db)
        self.portfolios = PortfolioRepository(db)
        self.audits = AuditRecordRepository(db)
        self.audit = audit_service or AuditService(db)
        self.permission_service = permission_service or PermissionService(db, audit_service=self.audit)
        self.executors = executors or ActionExecutors(db, self.permission_service)
        self.notifier = notifier or notifications.Notifier()

    def create(self, request: PendingActionRequest, requester) -> dict:
        if not is_internal_user(role_permissions_for(requester)):
            raise AppError(ErrorCatalog.INTERNAL_USER_REQUIRED)

        action_type = PendingActionType(request.action_type)
        if action_type == PendingActionType.PROPERTY_DELETE:
            raise AppError(ErrorCatalog.ACTION_TYPE_RETIRED)

        if action_type in _PROPERTY_ACTION_TYPES:
            if self.properties.get_by_id(_require_id(request.property_id, "property_id")) is None:
                raise AppError(ErrorCatalog.PROPERTY_NOT_FOUND)
        elif action_type == PendingActionType.PORTFOLIO_DEACTIVATE:
            if self.portfolios.get_by_id(_require_id(request.portfolio_id, "portfolio_id")) is None:
                raise AppError(ErrorCatalog.PORTFOLIO_NOT_FOUND)

        transfer_data = None
        if action_type == PendingActionType.PROPERTY_TRANSFER:
            if not request.new_portfolio_id:
                raise AppError(ErrorCatalog.TRANSFER_DATA_REQUIRED)
            if self.portfolios.get_by_id(request.new_portfolio_id) is None:
                raise AppError(ErrorCatalog.PORTFOLIO_NOT_FOUND)
            transfer_data = {"new_portfolio_id": str(request.new_portfolio_id)}

        audit_update_data = None
        if action_type == PendingActionType.AUDIT_UPDATE_AMOUNT_CONFIRMED:
            audit_update_data = _audit_update_data(request.amount_confirmed)
            audit = self._load_audit(_require_id(request.audit_id, "audit_id"))
            self._ensure_amount_open(audit)

        action = PendingAction(
            resource_type=PendingActionResourceType(request.resource_type).value,
            property_id=as_uuid(request.property_id) if request.property_id else None,
            portfolio_id=as_uuid(request.portfolio_id) if request.portfolio_id else None,
            audit_id=as_uuid(request.audit_id) if request.audit_id else None,
            action_type=action_type.value,
            requested_user_id=requester.id,
            transfer_data=transfer_data,
            audit_update_data=audit_update_data,
            reason=request.reason,
            status=PendingActionStatus.PENDING.value,
            created_at=datetime.utcnow(),
        )
        return self._persist_new(action, requester)

    def request_audit_amount_update(self, audit_id, amount_confirmed, requester, *, reason: str | None = None) -> dict:
        audit = self._load_audit(audit_id)

        role = role_permissions_for(requester)
        if is_user_super_admin(role) or not is_external_user(role):
            raise AppError(ErrorCatalog.EXTERNAL_USER_REQUIRED)

        if not self.permission_service.can_access_resource(requester, ModuleType.PROPERTY, str(audit.property_id)):
            raise AppError(
                ErrorCatalog.RESOURCE_NOT_ACCESSIBLE,
                details={"message": "Access denied: You do not have access to the property associated with this audit"},
            )

        self._ensure_amount_open(audit)

        action = PendingAction(
            resource_type=PendingActionResourceType.AUDIT.value,
            audit_id=audit.id,
            action_type=PendingActionType.AUDIT_UPDATE_AMOUNT_CONFIRMED.value,
            requested_user_id=requester.id,
            audit_update_data=_audit_update_data(amount_confirmed),
            reason=reason,
            status=PendingActionStatus.PENDING.value,
            created_at=datetime.utcnow(),
        )
        return self._persist_new(action, requester)

    def find_all(self, query: PendingActionListQuery, user) -> dict:
        self._require_super_admin(user)
        limit = query.limit or settings.PENDING_ACTIONS_DEFAULT_PAGE_SIZE
        limit = max(1, min(limit, settings.PENDING_ACTIONS_MAX_PAGE_SIZE))
        page = max(1, query.page)
        actions, total = self.repo.list_actions(
            query.filters,
            sort_by=query.sort_by,
            sort_order=query.sort_order,
            limit=limit,
            offset=(page - 1) * limit,
        )
        return {
            "data": self._enrich(actions),
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": math.ceil(total / limit) if total else 0,
        }

    def find_one(self, action_id, user) -> dict:
        self._require_super_admin(user)
        action = self.repo.get_by_id(action_id)
        if action is None:
            raise AppError(ErrorCatalog.PENDING_ACTION_NOT_FOUND)
        return self._enrich([action])[0]

    def find_by_property_id(self, property_id) -> list[dict]:
        return self._enrich(self.repo.list_by_property_id(property_id))

    def find_by_portfolio_id(self, portfolio_id) -> list[dict]:
        return self._enrich(self.repo.list_by_portfolio_id(portfolio_id))

    def find_by_audit_id(self, audit_id) -> list[dict]:
        return self._enrich(self.repo.list_by_audit_id(audit_id))

    def approve(self, action_id, approver) -> dict:
        self._require_super_admin(approver)
        action = self._load_pending(action_id, "approve")
        snapshot = self._decision_snapshot(action)

        try:
            plan_for(action).execute(self.executors)
            values = {"approval_user_id": approver.id, "approved_at": datetime.utcnow()}
            if snapshot is not None:
                values["transfer_data"] = snapshot
            self._transition(action, PendingActionStatus.APPROVED, "approve", values)
            self._record_decision(action, approver, "pending_action.approve")
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(action)
        log_json(
            logger,
            {
                "event": "pending_action_approved",
                "pending_action_id": str(action.id),
                "action_type": action.action_type,
                "approval_user_id": str(approver.id),
            },
        )
        metrics.record_decision(action_type=action.action_type, status=action.status)
        self._notify_decision(action)
        return self._enrich([action])[0]

    def reject(self, action_id, approver, rejection_reason: str | None) -> dict:
        self._require_super_admin(approver)
        action = self._load_pending(action_id, "reject")
        if not rejection_reason or not rejection_reason.strip():
            raise AppError(ErrorCatalog.REJECTION_REASON_REQUIRED)
        snapshot = self._decision_snapshot(action)

        try:
            values = {
                "approval_user_id": approver.id,
                "rejection_reason": rejection_reason.strip(),
                "approved_at": datetime.utcnow(),
            }
            if snapshot is not None:
                values["transfer_data"] = snapshot
            self._transition(action, PendingActionStatus.REJECTED, "reject", values)
            self._record_decision(action, approver, "pending_action.reject")
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(action)
        log_json(
            logger,
            {
                "event": "pending_action_rejected",
                "pending_action_id": str(action.id),
                "action_type": action.action_type,
                "approval_user_id": str(approver.id),
            },
        )
        metrics.record_decision(action_type=action.action_type, status=action.status)
        self._notify_decision(action)
        return self._enrich([action])[0]

    def _persist_new(self, action: PendingAction, requester) -> dict:
        self.repo.create(action)
        self.audit.record_event(
            AuditEventPayload(
                user_id=str(requester.id),
                action="pending_action.create",
                entity_type="pending_action",
                entity_id=str(action.id),
                before=None,
                after={"action_type": action.action_type, "status": action.status},
            )
        )
        self.db.commit()
        self.db.refresh(action)
        log_json(
            logger,
            {
                "event": "pending_action_created",
                "pending_action_id": str(action.id),
                "action_type": action.action_type,
                "requested_user_id": str(requester.id),
            },
        )
        return self._enrich([action])[0]

    def _require_super_admin(self, user) -> None:
        if not is_user_super_admin(role_permissions_for(user)):
            raise AppError(ErrorCatalog.SUPER_ADMIN_REQUIRED)

    def _load_audit(self, audit_id):
        audit = self.audits.get_by_id(audit_id)
        if audit is None:
            raise AppError(ErrorCatalog.AUDIT_NOT_FOUND)
        return audit

    def _ensure_amount_open(self, audit) -> None:
        if audit.amount_confirmed is not None:
            raise AppError(ErrorCatalog.AMOUNT_ALREADY_CONFIRMED)
        if self.repo.has_pending_for_audit(audit.id, PendingActionType.AUDIT_UPDATE_AMOUNT_CONFIRMED.value):
            raise AppError(ErrorCatalog.DUPLICATE_PENDING_REQUEST)

    def _load_pending(self, action_id, verb: str) -> PendingAction:
        action = self.repo.get_for_update(action_id)
        if action is None:
            raise AppError(ErrorCatalog.PENDING_ACTION_NOT_FOUND)
        if action.status != PendingActionStatus.PENDING.value:
            raise AppError(
                ErrorCatalog.INVALID_STATUS_TRANSITION,
                details={"message": f"Cannot {verb} action with status: {action.status}", "status": action.status},
            )
        return action

    def _transition(self, action: PendingAction, to_status: PendingActionStatus, verb: str, values: dict) -> None:
        if self.repo.transition_status(action.id, to_status, **values) != 1:
            raise AppError(
                ErrorCatalog.INVALID_STATUS_TRANSITION,
                details={"message": f"Cannot {verb} action: it is no longer pending"},
            )
        self.db.refresh(action)

    def _decision_snapshot(self, action: PendingAction) -> dict | None:
        if action.action_type != PendingActionType.PROPERTY_TRANSFER.value:
            return None
        transfer_data = dict(action.transfer_data or {})
        prop = self.properties.get_by_id(action.property_id) if action.property_id else None
        target = self.portfolios.get_by_id(transfer_data.get("new_portfolio_id")) if transfer_data else None
        transfer_data["portfolio_from"] = _portfolio_ref(prop.portfolio if prop else None)
        transfer_data["portfolio_to"] = _portfolio_ref(target)
        return transfer_data

    def _record_decision(self, action: PendingAction, approver, event: str) -> None:
        self.audit.record_event(
            AuditEventPayload(
                user_id=str(approver.id),
                action=event,
                entity_type="pending_action",
                entity_id=str(action.id),
                before={"status": PendingActionStatus.PENDING.value},
                after={"status": action.status, "action_type": action.action_type},
            )
        )

    def _notify_decision(self, action: PendingAction) -> None:
        try:
            if action.status == PendingActionStatus.APPROVED.value:
                if action.action_type == PendingActionType.PROPERTY_TRANSFER.value:
                    kind = notifications.PROPERTY_TRANSFER_APPROVED
                else:
                    kind = notifications.PENDING_ACTION_APPROVED
            else:
                kind = notifications.PENDING_ACTION_REJECTED
            self.notifier.notify(kind, self._recipients(action), self._notification_payload(action))
        except Exception:
            metrics.increment_notification_failure()
            logger.warning(
                "Failed to send pending action notification",
                exc_info=True,
                extra={"pending_action_id": str(action.id), "action_type": action.action_type},
            )

    def _recipients(self, action: PendingAction) -> list[str]:
        recipients: list[str] = []
        requester = self.users.get_by_id(action.requested_user_id)
        if requester is not None and requester.email:
            recipients.append(requester.email)
        if action.action_type == PendingActionType.PROPERTY_TRANSFER.value:
            transfer_data = action.transfer_data or {}
            for ref in (transfer_data.get("portfolio_from"), transfer_data.get("portfolio_to")):
                portfolio = self.portfolios.get_by_id(ref["id"]) if ref else None
                if portfolio is not None and portfolio.contact_email:
                    recipients.append(portfolio.contact_email)
        return list(dict.fromkeys(recipients))

    def _notification_payload(self, action: PendingAction) -> dict:
        payload = {
            "pending_action_id": str(action.id),
            "action_type": action.action_type,
            "status": action.status,
            "decided_at": action.approved_at.isoformat() if action.approved_at else None,
            "rejection_reason": action.rejection_reason,
        }
        if action.property is not None:
            payload["property"] = {"id": str(action.property.id), "name": action.property.name}
        if action.transfer_data:
            payload["portfolio_from"] = action.transfer_data.get("portfolio_from")
            payload["portfolio_to"] = action.transfer_data.get("portfolio_to")
        return payload

    def _enrich(self, actions: list[PendingAction]) -> list[dict]:
        target_ids = {
            str(action.transfer_data["new_portfolio_id"])
            for action in actions
            if action.action_type == PendingActionType.PROPERTY_TRANSFER.value
            and (action.transfer_data or {}).get("new_portfolio_id")
            and not (action.transfer_data or {}).get("portfolio_to")
        }
        targets = {}
        for portfolio_id in target_ids:
            portfolio = self.portfolios.get_by_id(portfolio_id)
            if portfolio is not None:
                targets[str(portfolio.id)] = _portfolio_ref(portfolio)

        return [self._to_view(action, targets) for action in actions]

    def _to_view(self, action: PendingAction, targets: dict[str, dict]) -> dict:
        live_portfolio = _portfolio_ref(action.property.portfolio) if action.property is not None else None
        transfer_data = dict(action.transfer_data) if action.transfer_data else None

        if action.action_type == PendingActionType.PROPERTY_TRANSFER.value and transfer_data:
            if not (transfer_data.get("portfolio_from") and transfer_data.get("portfolio_to")):
                transfer_data["portfolio_from"] = live_portfolio
                transfer_data["portfolio_to"] = targets.get(str(transfer_data.get("new_portfolio_id")))
            current_portfolio = transfer_data.get("portfolio_from")
        else:
            current_portfolio = live_portfolio

        return {
            "id": str(action.id),
            "resource_type": action.resource_type,
            "property_id": str(action.property_id) if action.property_id else None,
            "portfolio_id": str(action.portfolio_id) if action.portfolio_id else None,
            "audit_id": str(action.audit_id) if action.audit_id else None,
            "action_type": action.action_type,
            "requested_user_id": str(action.requested_user_id),
            "transfer_data": transfer_data,
            "audit_update_data": dict(action.audit_update_data) if action.audit_update_data else None,
            "reason": action.reason,
            "status": action.status,
            "approval_user_id": str(action.approval_user_id) if action.approval_user_id else None,
            "rejection_reason": action.rejection_reason,
            "created_at": action.created_at,
            "approved_at": action.approved_at,
            "current_portfolio": current_portfolio,
        }
