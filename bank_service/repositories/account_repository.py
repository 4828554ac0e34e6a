"""
Account repository — the only code that queries the accounts table.

The repository has no business rules. It fetches, checks for
existence, saves and deletes. It never commits: the services
own the transaction boundary.
"""

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from bank_service.models.account import Account
from bank_service.models.enums import AccountStatus


class AccountRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(
        self,
        account_id: int,
        include_deleted: bool = True,
        for_update: bool = False,
    ) -> Account | None:
        """
        Fetch an account by primary key.

        Rows are always re-read from the database, replacing any copy
        the session already holds. for_update additionally issues
        SELECT ... FOR UPDATE where the database supports it.
        """
        query = select(Account).where(Account.id == account_id).execution_options(
            populate_existing=True
        )
        if not include_deleted:
            query = query.where(Account.status == AccountStatus.ACTIVE)
        if for_update:
            query = query.with_for_update()
        return self.db.execute(query).scalar_one_or_none()

    def get_by_name(self, name: str) -> Account | None:
        """Fetch the active account holding a name."""
        return self.db.execute(
            select(Account).where(
                Account.name == name,
                Account.status == AccountStatus.ACTIVE,
            ).execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def exists_by_id(self, account_id: int, include_deleted: bool = True) -> bool:
        query = select(func.count()).select_from(Account).where(
            Account.id == account_id
        )
        if not include_deleted:
            query = query.where(Account.status == AccountStatus.ACTIVE)
        return self.db.execute(query).scalar() > 0

    def exists_by_name(self, name: str, exclude_id: int | None = None) -> bool:
        """True if an active account other than exclude_id holds the name."""
        query = select(func.count()).select_from(Account).where(
            Account.name == name,
            Account.status == AccountStatus.ACTIVE,
        )
        if exclude_id is not None:
            query = query.where(Account.id != exclude_id)
        return self.db.execute(query).scalar() > 0

    def list_all(
        self,
        include_deleted: bool = True,
        offset: int | None = None,
        limit: int | None = None,
    ) -> list[Account]:
        """Return accounts ordered by id, optionally sliced."""
        query = (
            select(Account)
            .order_by(Account.id)
            .execution_options(populate_existing=True)
        )
        if not include_deleted:
            query = query.where(Account.status == AccountStatus.ACTIVE)
        if offset is not None:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return list(self.db.execute(query).scalars().all())

    def save(self, account: Account) -> Account:
        """Stage an account and flush so generated columns are populated."""
        self.db.add(account)
        self.db.flush()
        return account

    def delete(self, account: Account) -> None:
        self.db.delete(account)
        self.db.flush()
