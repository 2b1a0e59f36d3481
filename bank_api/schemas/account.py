"""
Pydantic schemas for Account API requests and responses.
JSON field names are camelCase; snake_case is accepted on input too.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema exposing camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class AccountRequest(CamelModel):
    """Schema for creating or updating an account."""
    account_id: int = Field(..., gt=0, description="Account identifier supplied by the caller")
    customer_name: str = Field(..., min_length=1, max_length=100, description="Account owner name")
    total_balance: Decimal = Field(..., ge=0, max_digits=18, decimal_places=2, description="Account balance")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "accountId": 1001,
                "customerName": "John Doe",
                "totalBalance": 1000.00
            }
        }
    )

    @field_validator("customer_name")
    @classmethod
    def customer_name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Customer name is required")
        return value


class AccountView(CamelModel):
    """Schema for account response."""
    account_id: int
    customer_name: str
    total_balance: Decimal
