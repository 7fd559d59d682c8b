"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure, plus the value types that cross them.
Adapters implement these protocols.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol


class ReasonCode(str, Enum):
    """
    Stable, language-independent validation failure codes.

    Values double as translation keys in the message catalogs.
    """

    USERNAME_NULL = "username_null"
    USERNAME_SIZE = "username_size"
    EMAIL_NULL = "email_null"
    EMAIL_INVALID = "email_invalid"
    EMAIL_INUSE = "email_inuse"
    PASSWORD_NULL = "password_null"
    PASSWORD_SIZE = "password_size"
    PASSWORD_PATTERN = "password_pattern"


class DeliveryResult(Enum):
    """Outcome of an activation email send attempt."""

    SENT = "sent"
    FAILED = "failed"


@dataclass(frozen=True)
class Account:
    """
    Stored account record.

    Lifecycle (forward-only):
    - created disabled with an activation token
    - activated once: enabled, token cleared

    No transition leaves the activated state.
    """

    id: int
    username: str
    email: str
    password_hash: str
    enabled: bool
    activation_token: str | None
    created_at: datetime | None = None
    activated_at: datetime | None = None


class AccountRepository(Protocol):
    """Port interface for account persistence."""

    def find_by_email(self, email: str) -> Account | None:
        """
        Look up an account by exact (case-sensitive) email match.

        Args:
            email: Email address as submitted

        Returns:
            The stored account, or None
        """
        ...

    def find_by_activation_token(self, token: str) -> Account | None:
        """
        Look up a disabled account holding the given activation token.

        Enabled accounts never match, so a used token behaves
        exactly like an unknown one.
        """
        ...

    def create_account(
        self, username: str, email: str, password_hash: str, activation_token: str
    ) -> Account | None:
        """
        Insert a new disabled account.

        The enabled flag is not a parameter: every created account starts
        disabled. Email uniqueness is enforced by the storage layer so
        concurrent inserts for the same address cannot both succeed.

        Args:
            username: Display handle
            email: Email address (stored verbatim)
            password_hash: bcrypt hashed password
            activation_token: Single-use activation token

        Returns:
            The created account, or None if the email is already taken
        """
        ...

    def delete_account(self, account_id: int) -> bool:
        """
        Delete a still-disabled account (compensating action).

        Returns:
            True if a row was deleted
        """
        ...

    def activate(self, token: str) -> Account | None:
        """
        Atomically enable the disabled account holding this token and clear the token.

        Returns:
            The activated account, or None if no disabled account holds the token
        """
        ...


class ActivationMailer(Protocol):
    """Port interface for activation email delivery."""

    def send_account_activation(self, email: str, token: str) -> DeliveryResult:
        """
        Send the activation token to an email address.

        Transport rejections, timeouts and connection failures are
        reported as DeliveryResult.FAILED rather than raised.
        Every adapter bounds its own send with a timeout fixed at
        construction; a call never blocks indefinitely.

        Args:
            email: Recipient email address
            token: Activation token
        """
        ...
