"""
Shared enumerations for database models.

Using Python enums mapped to database enums ensures that
only valid values can be stored. An invalid status is caught
at the database level, not just in Python validation.
"""

import enum


class AccountStatus(str, enum.Enum):
    """Lifecycle of a customer account."""
    ACTIVE = "ACTIVE"
    DELETED = "DELETED"
