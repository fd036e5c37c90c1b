from typing import Literal

from pydantic import BaseModel, Field

from app.hotelport.core.permissions import ModuleType


AccessModule = Literal["portfolio", "property", "bank_details"]


class AccessMutationRequest(BaseModel):
    module: AccessModule = Field(..., description="Partial-capable module whose id list is changed.")
    resource_ids: list[str] = Field(..., min_length=1)

    @property
    def module_type(self) -> ModuleType:
        return ModuleType(self.module)


class ReplaceAccessRequest(BaseModel):
    portfolio_ids: list[str] | None = Field(default=None, description="Replace the portfolio list when provided.")
    property_ids: list[str] | None = Field(default=None, description="Replace the property list when provided.")


class UserAccessResponse(BaseModel):
    user_id: str
    portfolio_ids: list[str]
    property_ids: list[str]
    trace_id: str | None = None
