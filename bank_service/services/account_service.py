"""
Account service — manages accounts and their lifecycle.

Creating, renaming, reading, listing, deactivating and deleting
accounts all go through this service. Money movement lives in
TransactionService, which builds on the helpers defined here.

Every change to an existing account runs while holding that
account's lock, and the service commits before the lock is
released. The caller never has to commit.
"""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bank_service.config import Settings, get_settings
from bank_service.exceptions import DuplicateNameError, ValidationError
from bank_service.logging_config import get_logger, log_rejection
from bank_service.models.account import Account, format_account_number
from bank_service.models.enums import AccountStatus
from bank_service.repositories.account_repository import AccountRepository
from bank_service.schemas.account import AccountCreate, AccountRename
from bank_service.services.locks import AccountLockRegistry, account_locks
from bank_service.services.pin_service import PinHasher
from bank_service.services.rules import (
    check_found,
    check_name,
    check_pin,
    check_transition,
)

logger = get_logger(__name__)


class AccountService:

    def __init__(
        self,
        db: Session,
        pin_hasher: PinHasher | None = None,
        locks: AccountLockRegistry | None = None,
        settings: Settings | None = None,
    ):
        self.db = db
        self.repository = AccountRepository(db)
        self.pin_hasher = pin_hasher or PinHasher()
        self.locks = locks or account_locks
        self.settings = settings or get_settings()

    # --- Shared helpers ---

    @contextmanager
    def unit_of_work(self, name: str | None = None) -> Iterator[None]:
        """
        Commit everything staged inside the block, or nothing.

        When name is given, a unique-index violation means another
        request claimed that name between our check and our write,
        and is reported as DuplicateNameError.
        """
        try:
            yield
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            if name is None:
                raise
            raise log_rejection(
                logger,
                "account_name_conflict",
                DuplicateNameError(f"Account name '{name}' is already in use"),
                name=name,
            ) from None
        except Exception:
            self.db.rollback()
            raise

    def get_for_update(self, account_id: int) -> Account:
        """Load an account for modification. Call with its lock held."""
        account = self.repository.get_by_id(
            account_id,
            include_deleted=not self.settings.HIDE_DEACTIVATED_ACCOUNTS,
            for_update=True,
        )
        error = check_found(account, account_id)
        if error:
            raise log_rejection(logger, "account_lookup_failed", error, account_id=account_id)
        return account

    def verify_pin(self, account: Account, pin: str | None, event: str) -> None:
        """Raise AccessError unless the pin matches the account's digest."""
        error = check_pin(self.pin_hasher.verify(pin, account.pin_digest))
        if error:
            raise log_rejection(logger, event, error, account_id=account.id)

    # --- Operations ---

    def create_account(self, request: AccountCreate) -> Account:
        """
        Open a new account with a zero balance.

        The account number is derived from the id the database
        assigns, so it is set right after the first flush.
        """
        name = request.name
        error = check_name(name)
        if error:
            raise log_rejection(logger, "account_create_rejected", error)

        if self.repository.exists_by_name(name):
            raise log_rejection(
                logger,
                "account_create_rejected",
                DuplicateNameError(f"Account name '{name}' is already in use"),
                name=name,
            )

        account = Account(
            name=name,
            pin_digest=self.pin_hasher.hash(request.pin),
            balance_minor=0,
            status=AccountStatus.ACTIVE,
        )
        with self.unit_of_work(name=name):
            self.repository.save(account)
            account.account_number = format_account_number(
                self.settings.BANK_BRANCH_CODE, account.id
            )

        logger.info(
            "account_created",
            account_id=account.id,
            account_number=account.account_number,
            name=name,
        )
        return account

    def rename_account(self, account_id: int, request: AccountRename) -> Account:
        """
        Change the name of an account.

        The pin is checked before anything about the new name, so a
        caller without the pin cannot probe which names are taken.
        """
        new_name = request.new_name
        with self.locks.hold(account_id), self.unit_of_work(name=new_name):
            account = self.get_for_update(account_id)
            self.verify_pin(account, request.pin, "account_rename_rejected")

            error = check_name(new_name)
            if error:
                raise log_rejection(
                    logger, "account_rename_rejected", error, account_id=account_id
                )
            if self.repository.exists_by_name(new_name, exclude_id=account.id):
                raise log_rejection(
                    logger,
                    "account_rename_rejected",
                    DuplicateNameError(f"Account name '{new_name}' is already in use"),
                    account_id=account_id,
                )

            old_name = account.name
            account.name = new_name

        logger.info(
            "account_renamed",
            account_id=account_id,
            old_name=old_name,
            new_name=new_name,
        )
        return account

    def get_account(self, account_id: int) -> Account:
        """Get an account by id."""
        account = self.repository.get_by_id(
            account_id,
            include_deleted=not self.settings.HIDE_DEACTIVATED_ACCOUNTS,
        )
        error = check_found(account, account_id)
        if error:
            raise log_rejection(logger, "account_lookup_failed", error, account_id=account_id)
        return account

    def get_account_by_name(self, name: str | None) -> Account:
        """Get the active account holding a name."""
        account = self.repository.get_by_name(name) if name is not None else None
        error = check_found(account, name if name is not None else "")
        if error:
            raise log_rejection(logger, "account_lookup_failed", error, name=name)
        return account

    def list_accounts(
        self, page: int | None = None, page_size: int | None = None
    ) -> list[Account]:
        """
        List accounts ordered by id.

        Deactivated accounts are included unless
        HIDE_DEACTIVATED_ACCOUNTS is set. Pagination applies only
        when both page (0-based) and page_size are given.
        """
        offset = limit = None
        if page is not None and page_size is not None:
            offset, limit = page * page_size, page_size
        return self.repository.list_all(
            include_deleted=not self.settings.HIDE_DEACTIVATED_ACCOUNTS,
            offset=offset,
            limit=limit,
        )

    def delete_account(self, account_id: int) -> None:
        """
        Remove an account permanently.

        Whatever balance the account holds is destroyed with it,
        unless ALLOW_DELETE_WITH_BALANCE is turned off.
        """
        with self.locks.hold(account_id), self.unit_of_work():
            account = self.get_for_update(account_id)
            if account.balance_minor:
                if not self.settings.ALLOW_DELETE_WITH_BALANCE:
                    raise log_rejection(
                        logger,
                        "account_delete_rejected",
                        ValidationError(
                            f"Account {account_id} still holds a balance of "
                            f"{account.balance}"
                        ),
                        account_id=account_id,
                    )
                logger.warning(
                    "account_deleted_with_balance",
                    account_id=account_id,
                    balance=str(account.balance),
                )
            self.repository.delete(account)

        logger.info("account_deleted", account_id=account_id)

    def delete_account_by_name(self, name: str) -> None:
        self.delete_account(self.get_account_by_name(name).id)

    def deactivate_account(self, account_id: int) -> None:
        """Soft delete: the record stays, its status becomes DELETED."""
        with self.locks.hold(account_id), self.unit_of_work():
            account = self.get_for_update(account_id)
            error = check_transition(account, AccountStatus.DELETED)
            if error:
                raise log_rejection(
                    logger, "account_deactivate_rejected", error, account_id=account_id
                )
            account.status = AccountStatus.DELETED

        logger.info("account_deactivated", account_id=account_id)

    def deactivate_account_by_name(self, name: str) -> None:
        self.deactivate_account(self.get_account_by_name(name).id)
