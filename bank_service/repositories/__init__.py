"""Persistence boundary for accounts."""

from bank_service.repositories.account_repository import AccountRepository

__all__ = ["AccountRepository"]
