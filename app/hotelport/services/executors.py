import logging
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from app.hotelport.core.error_catalog import AppError, ErrorCatalog
from app.hotelport.core.logging import log_json
from app.hotelport.repos.audits import AuditRecordRepository
from app.hotelport.repos.portfolios import PortfolioRepository
from app.hotelport.repos.properties import PropertyRepository
from app.hotelport.services.access_control import PermissionService

logger = logging.getLogger(__name__)


class ActionExecutors:
    """Applies approved actions to the domain tables.

    Runs inside the approving transaction and never commits.
    """

    def __init__(self, db, permission_service: PermissionService | None = None):
        self.db = db
        self.properties = PropertyRepository(db)
        self.portfolios = PortfolioRepository(db)
        self.audits = AuditRecordRepository(db)
        self.permission_service = permission_service or PermissionService(db)

    def transfer_property(self, property_id: str, new_portfolio_id: str) -> None:
        prop = self.properties.get_for_update(property_id)
        if prop is None:
            raise AppError(ErrorCatalog.PROPERTY_NOT_FOUND)
        portfolio = self.portfolios.get_by_id(new_portfolio_id)
        if portfolio is None:
            raise AppError(ErrorCatalog.PORTFOLIO_NOT_FOUND)
        if str(prop.portfolio_id) == str(portfolio.id):
            raise AppError(ErrorCatalog.PROPERTY_ALREADY_IN_PORTFOLIO)

        previous_portfolio_id = str(prop.portfolio_id)
        prop.portfolio_id = portfolio.id
        prop.updated_at = datetime.utcnow()
        self.db.flush()
        self.permission_service.update_user_access_after_property_transfer(str(prop.id), str(portfolio.id))
        log_json(
            logger,
            {
                "event": "property_transferred",
                "property_id": str(prop.id),
                "from_portfolio_id": previous_portfolio_id,
                "to_portfolio_id": str(portfolio.id),
            },
        )

    def deactivate_property(self, property_id: str) -> None:
        self._set_property_active(property_id, False)

    def activate_property(self, property_id: str) -> None:
        self._set_property_active(property_id, True)

    def update_audit_amount_confirmed(self, audit_id: str, amount: Decimal) -> None:
        audit = self.audits.get_for_update(audit_id)
        if audit is None:
            raise AppError(ErrorCatalog.AUDIT_NOT_FOUND)
        audit.amount_confirmed = Decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        audit.updated_at = datetime.utcnow()
        self.db.flush()

    def _set_property_active(self, property_id: str, is_active: bool) -> None:
        prop = self.properties.get_for_update(property_id)
        if prop is None:
            raise AppError(ErrorCatalog.PROPERTY_NOT_FOUND)
        prop.is_active = is_active
        prop.updated_at = datetime.utcnow()
        self.db.flush()
