from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func, select, update

from app.hotelport.core.action_types import PendingActionStatus
from app.hotelport.db.models import PendingAction, as_uuid


SORTABLE_FIELDS = {
    "created_at": PendingAction.created_at,
    "approved_at": PendingAction.approved_at,
    "status": PendingAction.status,
    "action_type": PendingAction.action_type,
}


@dataclass(frozen=True)
class PendingActionQueryFilters:
    status: str | None = None
    action_type: str | None = None
    resource_type: str | None = None
    requested_user_id: str | None = None
    approval_user_id: str | None = None
    property_id: str | None = None
    portfolio_id: str | None = None
    audit_id: str | None = None


class PendingActionRepository:
    def __init__(self, db):
        self.db = db

    def create(self, action: PendingAction) -> PendingAction:
        self.db.add(action)
        self.db.flush()
        return action

    def get_by_id(self, action_id) -> PendingAction | None:
        try:
            return self.db.get(PendingAction, as_uuid(action_id))
        except ValueError:
            return None

    def get_for_update(self, action_id) -> PendingAction | None:
        try:
            stmt = select(PendingAction).where(PendingAction.id == as_uuid(action_id)).with_for_update()
        except ValueError:
            return None
        return self.db.execute(stmt).scalars().first()

    def transition_status(self, action_id, to_status: PendingActionStatus, **values) -> int:
        """Move a PENDING action to ``to_status``; returns the number of rows changed."""
        stmt = (
            update(PendingAction)
            .where(
                PendingAction.id == as_uuid(action_id),
                PendingAction.status == PendingActionStatus.PENDING.value,
            )
            .values(status=to_status.value, **values)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount

    def has_pending_for_audit(self, audit_id, action_type: str) -> bool:
        stmt = select(func.count()).select_from(PendingAction).where(
            PendingAction.audit_id == as_uuid(audit_id),
            PendingAction.action_type == action_type,
            PendingAction.status == PendingActionStatus.PENDING.value,
        )
        return (self.db.execute(stmt).scalar_one() or 0) > 0

    def list_actions(
        self,
        filters: PendingActionQueryFilters,
        *,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        limit: int | None = None,
        offset: int | None = None,
    ) -> tuple[list[PendingAction], int]:
        stmt = select(PendingAction)
        count_stmt = select(func.count()).select_from(PendingAction)

        for column, value in (
            (PendingAction.status, filters.status),
            (PendingAction.action_type, filters.action_type),
            (PendingAction.resource_type, filters.resource_type),
        ):
            if value:
                stmt = stmt.where(column == value)
                count_stmt = count_stmt.where(column == value)

        for column, value in (
            (PendingAction.requested_user_id, filters.requested_user_id),
            (PendingAction.approval_user_id, filters.approval_user_id),
            (PendingAction.property_id, filters.property_id),
            (PendingAction.portfolio_id, filters.portfolio_id),
            (PendingAction.audit_id, filters.audit_id),
        ):
            if value:
                stmt = stmt.where(column == as_uuid(value))
                count_stmt = count_stmt.where(column == as_uuid(value))

        sort_column = SORTABLE_FIELDS.get(sort_by, PendingAction.created_at)
        ordering = sort_column.asc() if sort_order == "asc" else sort_column.desc()
        stmt = stmt.order_by(ordering, PendingAction.id)

        total = self.db.execute(count_stmt).scalar_one()
        if offset is not None:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return self.db.execute(stmt).scalars().all(), int(total or 0)

    def list_by_property_id(self, property_id) -> list[PendingAction]:
        return self._list_where(PendingAction.property_id == as_uuid(property_id))

    def list_by_portfolio_id(self, portfolio_id) -> list[PendingAction]:
        return self._list_where(PendingAction.portfolio_id == as_uuid(portfolio_id))

    def list_by_audit_id(self, audit_id) -> list[PendingAction]:
        return self._list_where(PendingAction.audit_id == as_uuid(audit_id))

    def _list_where(self, condition) -> list[PendingAction]:
        stmt = select(PendingAction).where(condition).order_by(PendingAction.created_at.desc())
        return self.db.execute(stmt).scalars().all()
