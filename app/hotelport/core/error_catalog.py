from dataclasses import dataclass
from fastapi import status


@dataclass(frozen=True)
class ErrorDefinition:
    code: str
    message: str
    status_code: int


class ErrorCatalog:
    INVALID_TOKEN = ErrorDefinition("INVALID_TOKEN", "Invalid token", status.HTTP_401_UNAUTHORIZED)
    INVALID_CREDENTIALS = ErrorDefinition(
        "INVALID_CREDENTIALS",
        "Invalid credentials",
        status.HTTP_401_UNAUTHORIZED,
    )
    USER_INACTIVE = ErrorDefinition(
        "USER_INACTIVE",
        "User is inactive",
        status.HTTP_403_FORBIDDEN,
    )
    PERMISSION_DENIED = ErrorDefinition(
        "PERMISSION_DENIED",
        "You do not have permission to perform this action",
        status.HTTP_403_FORBIDDEN,
    )
    RESOURCE_NOT_ACCESSIBLE = ErrorDefinition(
        "RESOURCE_NOT_ACCESSIBLE",
        "Resource not in accessible set",
        status.HTTP_403_FORBIDDEN,
    )
    SUPER_ADMIN_REQUIRED = ErrorDefinition(
        "SUPER_ADMIN_REQUIRED",
        "Only super admins can perform this action",
        status.HTTP_403_FORBIDDEN,
    )
    INTERNAL_USER_REQUIRED = ErrorDefinition(
        "INTERNAL_USER_REQUIRED",
        "Only internal users can create action requests",
        status.HTTP_403_FORBIDDEN,
    )
    EXTERNAL_USER_REQUIRED = ErrorDefinition(
        "EXTERNAL_USER_REQUIRED",
        "Only external users can request amount confirmed updates",
        status.HTTP_400_BAD_REQUEST,
    )
    SELF_MODIFICATION_FORBIDDEN = ErrorDefinition(
        "SELF_MODIFICATION_FORBIDDEN",
        "You cannot modify your own access",
        status.HTTP_403_FORBIDDEN,
    )
    USER_NOT_FOUND = ErrorDefinition("USER_NOT_FOUND", "User not found", status.HTTP_404_NOT_FOUND)
    ROLE_NOT_FOUND = ErrorDefinition("ROLE_NOT_FOUND", "Role not found", status.HTTP_404_NOT_FOUND)
    PENDING_ACTION_NOT_FOUND = ErrorDefinition(
        "PENDING_ACTION_NOT_FOUND",
        "Pending action not found",
        status.HTTP_404_NOT_FOUND,
    )
    PROPERTY_NOT_FOUND = ErrorDefinition("PROPERTY_NOT_FOUND", "Property not found", status.HTTP_404_NOT_FOUND)
    PORTFOLIO_NOT_FOUND = ErrorDefinition("PORTFOLIO_NOT_FOUND", "Portfolio not found", status.HTTP_404_NOT_FOUND)
    AUDIT_NOT_FOUND = ErrorDefinition("AUDIT_NOT_FOUND", "Audit not found", status.HTTP_404_NOT_FOUND)
    INVALID_STATUS_TRANSITION = ErrorDefinition(
        "INVALID_STATUS_TRANSITION",
        "Invalid status transition",
        status.HTTP_400_BAD_REQUEST,
    )
    TRANSFER_DATA_REQUIRED = ErrorDefinition(
        "TRANSFER_DATA_REQUIRED",
        "Transfer data with new_portfolio_id is required for transfer actions",
        status.HTTP_400_BAD_REQUEST,
    )
    AUDIT_UPDATE_DATA_REQUIRED = ErrorDefinition(
        "AUDIT_UPDATE_DATA_REQUIRED",
        "Audit update data with amount_confirmed is required for audit update actions",
        status.HTTP_400_BAD_REQUEST,
    )
    INVALID_AMOUNT_CONFIRMED = ErrorDefinition(
        "INVALID_AMOUNT_CONFIRMED",
        "Amount confirmed must not be negative",
        status.HTTP_400_BAD_REQUEST,
    )
    RESOURCE_ID_REQUIRED = ErrorDefinition(
        "RESOURCE_ID_REQUIRED",
        "Target resource id is required for this action type",
        status.HTTP_400_BAD_REQUEST,
    )
    REJECTION_REASON_REQUIRED = ErrorDefinition(
        "REJECTION_REASON_REQUIRED",
        "Rejection reason is required",
        status.HTTP_400_BAD_REQUEST,
    )
    PARTIAL_ACCESS_NOT_CONFIGURED = ErrorDefinition(
        "PARTIAL_ACCESS_NOT_CONFIGURED",
        "User role does not have partial access for this module",
        status.HTTP_400_BAD_REQUEST,
    )
    PROPERTY_ALREADY_IN_PORTFOLIO = ErrorDefinition(
        "PROPERTY_ALREADY_IN_PORTFOLIO",
        "Property is already in the target portfolio",
        status.HTTP_400_BAD_REQUEST,
    )
    AMOUNT_ALREADY_CONFIRMED = ErrorDefinition(
        "AMOUNT_ALREADY_CONFIRMED",
        "Amount confirmed is already set for this audit",
        status.HTTP_400_BAD_REQUEST,
    )
    DUPLICATE_PENDING_REQUEST = ErrorDefinition(
        "DUPLICATE_PENDING_REQUEST",
        "There is already a pending request for this resource",
        status.HTTP_400_BAD_REQUEST,
    )
    ROLE_NAME_TAKEN = ErrorDefinition("ROLE_NAME_TAKEN", "Role name already exists", status.HTTP_400_BAD_REQUEST)
    ACTION_TYPE_RETIRED = ErrorDefinition(
        "ACTION_TYPE_RETIRED",
        "DELETE actions are no longer supported via pending actions. "
        "Only super admins can delete properties directly.",
        status.HTTP_400_BAD_REQUEST,
    )
    ACTION_TYPE_NOT_IMPLEMENTED = ErrorDefinition(
        "ACTION_TYPE_NOT_IMPLEMENTED",
        "Action type is not yet implemented",
        status.HTTP_400_BAD_REQUEST,
    )
    DB_UNAVAILABLE = ErrorDefinition(
        "DB_UNAVAILABLE",
        "Database unavailable",
        status.HTTP_503_SERVICE_UNAVAILABLE,
    )
    LOCK_TIMEOUT = ErrorDefinition(
        "LOCK_TIMEOUT",
        "Lock wait timeout",
        status.HTTP_409_CONFLICT,
    )
    VALIDATION_ERROR = ErrorDefinition(
        "VALIDATION_ERROR",
        "Validation error",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
    )
    INTERNAL_ERROR = ErrorDefinition(
        "INTERNAL_ERROR",
        "Internal server error",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


class AppError(Exception):
    def __init__(self, error: ErrorDefinition, details: object | None = None):
        self.error = error
        self.details = details
        super().__init__(error.message)

    @property
    def detail_message(self) -> str:
        if isinstance(self.details, dict) and self.details.get("message"):
            return str(self.details["message"])
        return self.error.message
