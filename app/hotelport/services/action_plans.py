"""Executable plans for approved pending actions.

Each action type maps to exactly one plan variant. Plans are built from a
stored ``PendingAction`` row and run against an executors object exposing
``transfer_property``, ``deactivate_property``, ``activate_property`` and
``update_audit_amount_confirmed``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Union

from app.hotelport.core.action_types import PendingActionType
from app.hotelport.core.error_catalog import AppError, ErrorCatalog


@dataclass(frozen=True)
class TransferProperty:
    property_id: str
    new_portfolio_id: str

    def execute(self, executors) -> None:
        executors.transfer_property(self.property_id, self.new_portfolio_id)


@dataclass(frozen=True)
class DeactivateProperty:
    property_id: str

    def execute(self, executors) -> None:
        executors.deactivate_property(self.property_id)


@dataclass(frozen=True)
class ActivateProperty:
    property_id: str

    def execute(self, executors) -> None:
        executors.activate_property(self.property_id)


@dataclass(frozen=True)
class UpdateAuditAmountConfirmed:
    audit_id: str
    amount_confirmed: Decimal

    def execute(self, executors) -> None:
        executors.update_audit_amount_confirmed(self.audit_id, self.amount_confirmed)


@dataclass(frozen=True)
class DeactivatePortfolio:
    portfolio_id: str | None

    def execute(self, executors) -> None:
        raise AppError(
            ErrorCatalog.ACTION_TYPE_NOT_IMPLEMENTED,
            details={"message": "Portfolio deactivation is not yet implemented", "action_type": "PORTFOLIO_DEACTIVATE"},
        )


@dataclass(frozen=True)
class DeleteProperty:
    property_id: str | None

    def execute(self, executors) -> None:
        raise AppError(ErrorCatalog.ACTION_TYPE_RETIRED, details={"action_type": "PROPERTY_DELETE"})


ActionPlan = Union[
    TransferProperty,
    DeactivateProperty,
    ActivateProperty,
    UpdateAuditAmountConfirmed,
    DeactivatePortfolio,
    DeleteProperty,
]


def _required(value, label: str) -> str:
    if value is None:
        raise AppError(
            ErrorCatalog.RESOURCE_ID_REQUIRED,
            details={"message": f"{label} is required for this action type", "field": label},
        )
    return str(value)


def _transfer(action) -> TransferProperty:
    new_portfolio_id = (action.transfer_data or {}).get("new_portfolio_id")
    if not new_portfolio_id:
        raise AppError(ErrorCatalog.TRANSFER_DATA_REQUIRED)
    return TransferProperty(_required(action.property_id, "property_id"), str(new_portfolio_id))


def _audit_amount(action) -> UpdateAuditAmountConfirmed:
    amount = (action.audit_update_data or {}).get("amount_confirmed")
    if amount is None:
        raise AppError(ErrorCatalog.AUDIT_UPDATE_DATA_REQUIRED)
    return UpdateAuditAmountConfirmed(_required(action.audit_id, "audit_id"), Decimal(str(amount)))


_PLAN_BUILDERS: dict[PendingActionType, Callable[..., ActionPlan]] = {
    PendingActionType.PROPERTY_TRANSFER: _transfer,
    PendingActionType.PROPERTY_DEACTIVATE: lambda action: DeactivateProperty(
        _required(action.property_id, "property_id")
    ),
    PendingActionType.PROPERTY_ACTIVATE: lambda action: ActivateProperty(_required(action.property_id, "property_id")),
    PendingActionType.AUDIT_UPDATE_AMOUNT_CONFIRMED: _audit_amount,
    PendingActionType.PORTFOLIO_DEACTIVATE: lambda action: DeactivatePortfolio(
        str(action.portfolio_id) if action.portfolio_id else None
    ),
    PendingActionType.PROPERTY_DELETE: lambda action: DeleteProperty(
        str(action.property_id) if action.property_id else None
    ),
}

_unhandled = set(PendingActionType) - set(_PLAN_BUILDERS)
if _unhandled:
    raise RuntimeError(f"Pending action types without a plan: {sorted(t.value for t in _unhandled)}")


def plan_for(action) -> ActionPlan:
    return _PLAN_BUILDERS[PendingActionType(action.action_type)](action)
