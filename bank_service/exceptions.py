"""
Domain errors for account operations.

Every error is raised where it is detected and reaches the
caller unchanged. Each class carries the HTTP status the API
layer answers with, so the mapping lives next to the meaning.

All errors subclass ValueError: code that only cares that a
business rule was violated can keep catching ValueError.
"""


class AccountError(ValueError):
    """Base class for every business rule violation."""

    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(AccountError):
    """No account matches the requested id or name."""

    status_code = 404


class AccessError(AccountError):
    """The supplied pin does not verify against the stored digest."""

    status_code = 403


class DuplicateNameError(AccountError):
    """The requested name is held by another active account."""


class InvalidAmountError(AccountError):
    """Amount is missing, zero, negative or finer than one cent."""


class InsufficientFundsError(AccountError):
    """The debit would drive the balance below zero."""


class ValidationError(AccountError):
    """A required field is missing or the request is not allowed in this state."""
