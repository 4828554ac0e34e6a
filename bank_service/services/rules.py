"""
Business rules for account operations.

Each check returns the error describing the violation, or None
when the rule holds. The services decide the order checks run
in and raise the first error they get back; nothing here raises
for an expected validation outcome.
"""

from decimal import Decimal, InvalidOperation

from bank_service.exceptions import (
    AccessError,
    InsufficientFundsError,
    InvalidAmountError,
    NotFoundError,
    ValidationError,
)
from bank_service.models.account import (
    Account,
    MAX_BALANCE_MINOR,
    MINOR_UNITS_PER_UNIT,
)
from bank_service.models.enums import AccountStatus


def to_minor_units(amount: Decimal) -> int:
    """Convert a validated amount to integer cents."""
    return int(Decimal(str(amount)) * MINOR_UNITS_PER_UNIT)


def check_found(account: Account | None, key: int | str) -> NotFoundError | None:
    if account is None:
        if isinstance(key, int):
            return NotFoundError(f"Account with id {key} not found")
        return NotFoundError(f"Account with name '{key}' not found")
    return None


def check_name(name: str | None) -> ValidationError | None:
    if name is None or not name.strip():
        return ValidationError("Account name must not be empty")
    return None


def check_pin(pin_matches: bool) -> AccessError | None:
    if not pin_matches:
        return AccessError("Invalid pin")
    return None


def check_amount(
    amount: Decimal | None, operation: str
) -> InvalidAmountError | None:
    """
    An amount must be present, finite, positive, expressible
    in whole cents and small enough for a balance to hold.
    """
    if amount is None:
        return InvalidAmountError(f"{operation.capitalize()} amount is required")
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        return InvalidAmountError(f"{operation.capitalize()} amount is not a number")
    if not value.is_finite() or value <= 0:
        return InvalidAmountError(
            f"{operation.capitalize()} amount must be positive"
        )
    try:
        whole_cents = value == value.quantize(Decimal("0.01"))
    except InvalidOperation:
        return InvalidAmountError(f"{operation.capitalize()} amount is too large")
    if not whole_cents:
        return InvalidAmountError(
            f"{operation.capitalize()} amount must not be finer than 0.01"
        )
    if to_minor_units(value) > MAX_BALANCE_MINOR:
        return InvalidAmountError(f"{operation.capitalize()} amount is too large")
    return None


def check_sufficient_funds(
    account: Account, amount_minor: int, operation: str
) -> InsufficientFundsError | None:
    if account.balance_minor - amount_minor < 0:
        return InsufficientFundsError(
            f"{operation.capitalize()} amount must not exceed the current balance"
        )
    return None


def check_transition(
    account: Account, new_status: AccountStatus
) -> ValidationError | None:
    if not account.can_transition_to(new_status):
        return ValidationError(
            f"Cannot transition from {account.status.value} "
            f"to {new_status.value}"
        )
    return None


def check_credit_fits(
    account: Account, amount_minor: int, operation: str
) -> InvalidAmountError | None:
    if account.balance_minor + amount_minor > MAX_BALANCE_MINOR:
        return InvalidAmountError(
            f"{operation.capitalize()} would exceed the maximum account balance"
        )
    return None
