"""
Pydantic schemas for account operations.
"""

from pydantic import BaseModel, Field

from bank_service.models.enums import AccountStatus


PIN_PATTERN = r"^[0-9]{4}$"


class AccountCreate(BaseModel):
    """Request to open a new account."""
    # Emptiness is a business rule checked by the service
    name: str | None = Field(default=None, max_length=255)
    pin: str = Field(pattern=PIN_PATTERN, description="Four digits")


class AccountRename(BaseModel):
    """Request to change the name of an account."""
    new_name: str | None = Field(default=None, max_length=255)
    pin: str | None = None


class AccountInfo(BaseModel):
    """What a caller sees after a change to an account."""
    name: str
    balance: float

    model_config = {"from_attributes": True}


class AccountDetails(BaseModel):
    """Full read view of an account."""
    id: int
    account_number: str
    name: str
    balance: float
    status: AccountStatus

    model_config = {"from_attributes": True}
