"""
Customer account model.

An account is a named balance protected by a pin. The balance
is stored in minor units (cents) as an integer so that repeated
deposits and withdrawals never accumulate rounding drift.

The account has a state machine governing its lifecycle.
Invalid state transitions are rejected.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    BigInteger, CheckConstraint, DateTime, Index, String, text,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column

from bank_service.models.base import Base
from bank_service.models.enums import AccountStatus


# Valid state transitions for the account state machine.
# Hard delete removes the row from any state and is not a transition.
VALID_TRANSITIONS: dict[AccountStatus, set[AccountStatus]] = {
    AccountStatus.ACTIVE: {AccountStatus.DELETED},
    AccountStatus.DELETED: set(),  # Terminal state
}

MINOR_UNITS_PER_UNIT = 100

# Largest value the BigInteger balance column can hold
MAX_BALANCE_MINOR = 2**63 - 1

ACCOUNT_NUMBER_WIDTH = 7


def format_account_number(branch_code: str, account_id: int) -> str:
    """Branch code followed by the zero-padded account id."""
    return f"{branch_code}{account_id:0{ACCOUNT_NUMBER_WIDTH}d}"


class Account(Base):
    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint("balance_minor >= 0", name="ck_accounts_balance_non_negative"),
        # Names are unique among active accounts only
        Index(
            "uq_accounts_active_name",
            "name",
            unique=True,
            sqlite_where=text("status = 'ACTIVE'"),
            postgresql_where=text("status = 'ACTIVE'"),
        ),
        # Never reuse the id of a deleted account: it is part of the account number
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    # Set right after the id is assigned, never recomputed
    account_number: Mapped[str | None] = mapped_column(
        String(32), unique=True, nullable=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    balance_minor: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0
    )
    pin_digest: Mapped[str] = mapped_column(String(128), nullable=False)
    status: Mapped[AccountStatus] = mapped_column(
        SAEnum(
            AccountStatus,
            name="account_status_enum",
            create_constraint=True,
        ),
        nullable=False,
        default=AccountStatus.ACTIVE,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    @property
    def balance(self) -> Decimal:
        """Balance in major units with two decimal places."""
        return (Decimal(self.balance_minor) / MINOR_UNITS_PER_UNIT).quantize(
            Decimal("0.01")
        )

    @property
    def is_active(self) -> bool:
        return self.status == AccountStatus.ACTIVE

    def can_transition_to(self, new_status: AccountStatus) -> bool:
        """Check if a state transition is valid."""
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    def __repr__(self) -> str:
        return f"<Account {self.account_number} {self.name!r} ({self.status.value})>"
