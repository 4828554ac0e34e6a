"""Business logic services."""

from bank_service.services.account_service import AccountService
from bank_service.services.transaction_service import TransactionService
from bank_service.services.pin_service import PinHasher

__all__ = ["AccountService", "TransactionService", "PinHasher"]
