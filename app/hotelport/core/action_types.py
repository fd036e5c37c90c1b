from enum import Enum


class PendingActionStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class PendingActionType(str, Enum):
    PROPERTY_TRANSFER = "PROPERTY_TRANSFER"
    PROPERTY_DEACTIVATE = "PROPERTY_DEACTIVATE"
    PROPERTY_ACTIVATE = "PROPERTY_ACTIVATE"
    PORTFOLIO_DEACTIVATE = "PORTFOLIO_DEACTIVATE"
    AUDIT_UPDATE_AMOUNT_CONFIRMED = "AUDIT_UPDATE_AMOUNT_CONFIRMED"
    # Retired: kept so historical rows still load.
    PROPERTY_DELETE = "PROPERTY_DELETE"


class PendingActionResourceType(str, Enum):
    PROPERTY = "property"
    PORTFOLIO = "portfolio"
    AUDIT = "audit"
