"""
Pydantic schemas for money movement.

Amounts are optional here on purpose: a missing, zero or
negative amount is a business rule violation answered with
400, not a malformed request.
"""

from decimal import Decimal

from pydantic import BaseModel, Field


class DepositRequest(BaseModel):
    amount: Decimal | None = None


class WithdrawalRequest(BaseModel):
    amount: Decimal | None = None
    pin: str | None = None


class TransferRequest(BaseModel):
    amount: Decimal | None = None
    pin: str | None = None
    # Name of the account that receives the money
    destination_name: str | None = Field(default=None, max_length=255)
