"""
Concurrency tests.

Each worker thread gets its own session, like concurrent HTTP
requests would. The per-account locks must make the outcome
independent of how the threads interleave.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest

from bank_service.exceptions import InsufficientFundsError, NotFoundError
from bank_service.schemas.transaction import (
    DepositRequest,
    WithdrawalRequest,
    TransferRequest,
)
from bank_service.services.account_service import AccountService
from bank_service.services.locks import AccountLockRegistry
from bank_service.services.transaction_service import TransactionService


WORKERS = 8


def run_in_own_session(session_factory, operation):
    session = session_factory()
    try:
        return operation(TransactionService(session))
    finally:
        session.close()


def balance_of(db_session, account_id) -> Decimal:
    return AccountService(db_session).get_account(account_id).balance


class TestConcurrentDeposits:

    def test_no_lost_updates(self, db_session, session_factory, open_account):
        account = open_account("alice", "1234")
        deposits = 40

        def deposit(_):
            return run_in_own_session(
                session_factory,
                lambda service: service.deposit(
                    account.id, DepositRequest(amount=Decimal("2.50"))
                ),
            )

        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            list(pool.map(deposit, range(deposits)))

        assert balance_of(db_session, account.id) == Decimal("2.50") * deposits


class TestConcurrentWithdrawals:

    def test_never_overdraws(self, db_session, session_factory, open_account):
        account = open_account("alice", "1234")
        TransactionService(db_session).deposit(
            account.id, DepositRequest(amount=Decimal("100"))
        )

        def withdraw(_):
            try:
                run_in_own_session(
                    session_factory,
                    lambda service: service.withdraw(
                        account.id,
                        WithdrawalRequest(amount=Decimal("10"), pin="1234"),
                    ),
                )
                return True
            except InsufficientFundsError:
                return False

        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            results = list(pool.map(withdraw, range(20)))

        assert results.count(True) == 10
        assert balance_of(db_session, account.id) == Decimal("0.00")


class TestConcurrentTransfers:

    def test_opposing_transfers_do_not_deadlock(
        self, db_session, session_factory, open_account
    ):
        alice = open_account("alice", "1234")
        bob = open_account("bob", "1111")
        setup = TransactionService(db_session)
        setup.deposit(alice.id, DepositRequest(amount=Decimal("1000")))
        setup.deposit(bob.id, DepositRequest(amount=Decimal("1000")))

        def alice_to_bob(_):
            return run_in_own_session(
                session_factory,
                lambda service: service.transfer(alice.id, TransferRequest(
                    amount=Decimal("1"), pin="1234", destination_name="bob",
                )),
            )

        def bob_to_alice(_):
            return run_in_own_session(
                session_factory,
                lambda service: service.transfer(bob.id, TransferRequest(
                    amount=Decimal("2"), pin="1111", destination_name="alice",
                )),
            )

        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            futures = [pool.submit(alice_to_bob, i) for i in range(20)]
            futures += [pool.submit(bob_to_alice, i) for i in range(20)]
            for future in futures:
                future.result(timeout=60)

        alice_balance = balance_of(db_session, alice.id)
        bob_balance = balance_of(db_session, bob.id)
        assert alice_balance == Decimal("1020.00")
        assert bob_balance == Decimal("980.00")
        assert alice_balance + bob_balance == Decimal("2000.00")


class TestAccountLockRegistry:

    def test_locks_released_after_block(self):
        locks = AccountLockRegistry()
        with locks.hold(1, 2):
            pass
        # Would block forever if either lock were still held
        with locks.hold(2, 1):
            pass

    def test_same_id_given_twice_is_taken_once(self):
        locks = AccountLockRegistry()
        with locks.hold(3, 3):
            pass

    def test_hold_excludes_other_threads(self):
        locks = AccountLockRegistry()
        entered = threading.Event()

        def contender():
            with locks.hold(7):
                entered.set()

        with locks.hold(7):
            worker = threading.Thread(target=contender)
            worker.start()
            assert not entered.wait(timeout=0.2)

        worker.join(timeout=5)
        assert entered.is_set()

    def test_released_when_block_raises(self):
        locks = AccountLockRegistry()
        try:
            with locks.hold(5):
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        with locks.hold(5):
            pass

    def test_registry_empty_after_hold(self):
        locks = AccountLockRegistry()
        with locks.hold(1, 2):
            assert set(locks._locks) == {1, 2}
        assert locks._locks == {}

    def test_registry_empty_after_block_raises(self):
        locks = AccountLockRegistry()
        with pytest.raises(RuntimeError):
            with locks.hold(4, 9):
                raise RuntimeError("boom")
        assert locks._locks == {}

    def test_entry_kept_while_another_thread_waits(self):
        locks = AccountLockRegistry()
        entered = threading.Event()

        def contender():
            with locks.hold(7):
                entered.set()

        with locks.hold(7):
            worker = threading.Thread(target=contender)
            worker.start()
            deadline = time.monotonic() + 5
            while locks._locks[7].users < 2 and time.monotonic() < deadline:
                time.sleep(0.01)
            assert locks._locks[7].users == 2

        worker.join(timeout=5)
        assert entered.is_set()
        assert locks._locks == {}

    def test_unknown_accounts_leave_no_locks_behind(self, db_session):
        locks = AccountLockRegistry()
        service = TransactionService(db_session, locks=locks)

        for account_id in range(1000, 1050):
            with pytest.raises(NotFoundError):
                service.deposit(account_id, DepositRequest(amount=Decimal("1")))

        assert locks._locks == {}
