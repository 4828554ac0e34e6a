"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from bank_service.models.base import Base
from bank_service.models.enums import AccountStatus
from bank_service.models.account import Account

__all__ = [
    "Base",
    "AccountStatus",
    "Account",
]
