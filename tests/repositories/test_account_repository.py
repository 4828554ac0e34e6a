"""
Tests for the account repository.

The repository is a plain persistence boundary; these tests pin
down its lookup semantics, in particular how deactivated
accounts are treated.
"""

from bank_service.models.account import Account
from bank_service.models.enums import AccountStatus
from bank_service.repositories.account_repository import AccountRepository


def add_account(repository, name, status=AccountStatus.ACTIVE, balance_minor=0):
    account = repository.save(Account(
        name=name,
        pin_digest="digest",
        balance_minor=balance_minor,
        status=status,
    ))
    repository.db.commit()
    return account


class TestLookups:

    def test_get_by_id(self, db_session):
        repository = AccountRepository(db_session)
        account = add_account(repository, "alice")

        assert repository.get_by_id(account.id).name == "alice"
        assert repository.get_by_id(999) is None

    def test_get_by_id_can_exclude_deleted(self, db_session):
        repository = AccountRepository(db_session)
        account = add_account(repository, "alice", status=AccountStatus.DELETED)

        assert repository.get_by_id(account.id) is not None
        assert repository.get_by_id(account.id, include_deleted=False) is None

    def test_get_by_name_only_matches_active(self, db_session):
        repository = AccountRepository(db_session)
        add_account(repository, "alice", status=AccountStatus.DELETED)
        active = add_account(repository, "alice")

        assert repository.get_by_name("alice").id == active.id
        assert repository.get_by_name("bob") is None

    def test_get_by_id_rereads_the_row(self, db_session, session_factory):
        repository = AccountRepository(db_session)
        account = add_account(repository, "alice")

        other = session_factory()
        try:
            other.get(Account, account.id).balance_minor = 500
            other.commit()
        finally:
            other.close()

        assert repository.get_by_id(account.id, for_update=True).balance_minor == 500


class TestExistence:

    def test_exists_by_id(self, db_session):
        repository = AccountRepository(db_session)
        account = add_account(repository, "alice", status=AccountStatus.DELETED)

        assert repository.exists_by_id(account.id) is True
        assert repository.exists_by_id(account.id, include_deleted=False) is False
        assert repository.exists_by_id(999) is False

    def test_exists_by_name(self, db_session):
        repository = AccountRepository(db_session)
        account = add_account(repository, "alice")
        add_account(repository, "ghost", status=AccountStatus.DELETED)

        assert repository.exists_by_name("alice") is True
        assert repository.exists_by_name("alice", exclude_id=account.id) is False
        assert repository.exists_by_name("ghost") is False


class TestListAndDelete:

    def test_list_all_ordered_and_sliced(self, db_session):
        repository = AccountRepository(db_session)
        for name in ("a", "b", "c"):
            add_account(repository, name)

        assert [a.name for a in repository.list_all()] == ["a", "b", "c"]
        assert [a.name for a in repository.list_all(offset=1, limit=1)] == ["b"]

    def test_delete(self, db_session):
        repository = AccountRepository(db_session)
        account = add_account(repository, "alice")
        account_id = account.id

        repository.delete(account)
        db_session.commit()

        assert repository.get_by_id(account_id) is None
