"""
Transaction service — deposits, withdrawals, and transfers.

Each operation checks its rules in a fixed order and raises the
first violation:

    deposit:   account exists -> amount valid -> balance fits
    withdraw:  account exists -> pin -> amount valid -> funds
    transfer:  account exists -> pin -> destination exists ->
               not the same account -> amount valid -> funds ->
               credited balance fits

The pin is always checked before anything about the amount, so a
caller with the wrong pin learns nothing about the balance.

A transfer holds both account locks, taken in id order, and
writes both balances in a single commit: either both change or
neither does.
"""

from sqlalchemy.orm import Session

from bank_service.config import Settings
from bank_service.exceptions import NotFoundError, ValidationError
from bank_service.logging_config import get_logger, log_rejection
from bank_service.models.account import Account
from bank_service.schemas.transaction import (
    DepositRequest,
    WithdrawalRequest,
    TransferRequest,
)
from bank_service.services.account_service import AccountService
from bank_service.services.locks import AccountLockRegistry
from bank_service.services.pin_service import PinHasher
from bank_service.services.rules import (
    check_amount,
    check_credit_fits,
    check_sufficient_funds,
    to_minor_units,
)

logger = get_logger(__name__)


class TransactionService:

    def __init__(
        self,
        db: Session,
        pin_hasher: PinHasher | None = None,
        locks: AccountLockRegistry | None = None,
        settings: Settings | None = None,
    ):
        self.db = db
        self.account_service = AccountService(db, pin_hasher, locks, settings)
        self.locks = self.account_service.locks

    def _validated_amount(self, amount, operation: str, account_id: int) -> int:
        error = check_amount(amount, operation)
        if error:
            raise log_rejection(
                logger, f"{operation}_rejected", error, account_id=account_id
            )
        return to_minor_units(amount)

    def deposit(self, account_id: int, request: DepositRequest) -> Account:
        """
        Add money to an account.

        No pin is required to deposit.
        """
        with self.locks.hold(account_id), self.account_service.unit_of_work():
            account = self.account_service.get_for_update(account_id)
            amount_minor = self._validated_amount(request.amount, "deposit", account_id)
            error = check_credit_fits(account, amount_minor, "deposit")
            if error:
                raise log_rejection(logger, "deposit_rejected", error, account_id=account_id)

            account.balance_minor += amount_minor

        logger.info(
            "deposit_completed",
            account_id=account_id,
            amount=str(request.amount),
            balance=str(account.balance),
        )
        return account

    def withdraw(self, account_id: int, request: WithdrawalRequest) -> Account:
        """Take money out of an account. Requires the account's pin."""
        with self.locks.hold(account_id), self.account_service.unit_of_work():
            account = self.account_service.get_for_update(account_id)
            self.account_service.verify_pin(account, request.pin, "withdraw_rejected")
            amount_minor = self._validated_amount(request.amount, "withdraw", account_id)

            error = check_sufficient_funds(account, amount_minor, "withdraw")
            if error:
                raise log_rejection(logger, "withdraw_rejected", error, account_id=account_id)

            account.balance_minor -= amount_minor

        logger.info(
            "withdraw_completed",
            account_id=account_id,
            amount=str(request.amount),
            balance=str(account.balance),
        )
        return account

    def transfer(self, account_id: int, request: TransferRequest) -> Account:
        """
        Move money from account_id to the account named
        request.destination_name.

        Returns the debited account.
        """
        account = self.account_service.get_account(account_id)
        self.account_service.verify_pin(account, request.pin, "transfer_rejected")
        destination = self.account_service.get_account_by_name(request.destination_name)

        if destination.id == account.id:
            raise log_rejection(
                logger,
                "transfer_rejected",
                ValidationError("Cannot transfer to the same account"),
                account_id=account_id,
            )

        amount_minor = self._validated_amount(request.amount, "transfer", account_id)

        with self.locks.hold(account.id, destination.id), \
                self.account_service.unit_of_work():
            # Re-read both rows under the locks; either may have
            # changed since the checks above.
            debited = self.account_service.get_for_update(account.id)
            credited = self.account_service.get_for_update(destination.id)
            if not credited.is_active or credited.name != request.destination_name:
                raise log_rejection(
                    logger,
                    "transfer_rejected",
                    NotFoundError(
                        f"Account with name '{request.destination_name}' not found"
                    ),
                    account_id=account_id,
                )

            error = check_sufficient_funds(debited, amount_minor, "transfer")
            if error:
                raise log_rejection(logger, "transfer_rejected", error, account_id=account_id)
            error = check_credit_fits(credited, amount_minor, "transfer")
            if error:
                raise log_rejection(logger, "transfer_rejected", error, account_id=account_id)

            debited.balance_minor -= amount_minor
            credited.balance_minor += amount_minor

        logger.info(
            "transfer_completed",
            account_id=account_id,
            destination_id=credited.id,
            amount=str(request.amount),
            balance=str(debited.balance),
        )
        return debited
