from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from app.hotelport.core.action_types import PendingActionResourceType, PendingActionType


class TransferDataRequest(BaseModel):
    new_portfolio_id: UUID


class AuditUpdateDataRequest(BaseModel):
    amount_confirmed: Decimal = Field(..., ge=0)


class PendingActionCreateRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "example": {
                "resource_type": "property",
                "property_id": "3f1c3a10-7d5e-4a3b-9e1b-6b2a7c0e9d11",
                "action_type": "PROPERTY_TRANSFER",
                "transfer_data": {"new_portfolio_id": "a2e4a9d2-1d6f-4a8b-8f0e-5c3b2d1e0f9a"},
                "reason": "Portfolio consolidation",
            }
        }
    }

    resource_type: PendingActionResourceType
    action_type: PendingActionType
    property_id: UUID | None = None
    portfolio_id: UUID | None = None
    audit_id: UUID | None = None
    transfer_data: TransferDataRequest | None = None
    audit_update_data: AuditUpdateDataRequest | None = None
    reason: str | None = Field(default=None, max_length=2000)


class RejectPendingActionRequest(BaseModel):
    rejection_reason: str | None = None


class AmountConfirmedUpdateRequest(BaseModel):
    amount_confirmed: Decimal = Field(..., ge=0)
    reason: str | None = Field(default=None, max_length=2000)


class PortfolioRef(BaseModel):
    id: str
    name: str


class PendingActionResponse(BaseModel):
    id: str
    resource_type: str
    property_id: str | None
    portfolio_id: str | None
    audit_id: str | None
    action_type: str
    requested_user_id: str
    transfer_data: dict | None
    audit_update_data: dict | None
    reason: str | None
    status: str
    approval_user_id: str | None
    rejection_reason: str | None
    created_at: datetime
    approved_at: datetime | None
    current_portfolio: PortfolioRef | None = None


class PendingActionListResponse(BaseModel):
    data: list[PendingActionResponse]
    total: int
    page: int
    limit: int
    total_pages: int
