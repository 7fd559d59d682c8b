"""
Registration domain service - account registration and activation.

This module contains the core business logic for user self-registration
with email-based activation.

Account Lifecycle (Forward-Only Transitions)
============================================

States:
- DISABLED: Initial state after registration (activation token present)
- ENABLED:  Terminal state after successful activation (token cleared)

Valid Transitions:
    DISABLED -> ENABLED   (activation with the matching token)

Invalid Transitions (never allowed):
    ENABLED -> any        (ENABLED is terminal)

Registration is a two-phase operation:

1. Create: validate, hash, generate token, persist a disabled account.
   The result is a PendingRegistration.
2. Deliver: send the activation email for the pending registration.
   Any delivery failure deletes the pending account before the error
   leaves the service, so a failed send never leaves an account that
   occupies the email address without a way to activate it.

Note: Atomicity of the create and activate transitions is enforced at the
repository level (unique email constraint, single-statement activation).
"""

import logging
from dataclasses import dataclass

from .credentials import (
    DEFAULT_BCRYPT_COST,
    DEFAULT_TOKEN_LENGTH,
    generate_activation_token,
    hash_password,
)
from .exceptions import EmailDeliveryError, InvalidTokenError, ValidationError
from .ports import AccountRepository, ActivationMailer, DeliveryResult, ReasonCode
from .validation import RegistrationCandidate, RegistrationValidator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingRegistration:
    """A persisted, still-disabled account whose activation email is not yet sent."""

    account_id: int
    email: str
    activation_token: str


@dataclass
class RegistrationService:
    """
    Domain service for user registration.

    Orchestrates the registration flow: field validation, password hashing,
    token generation, persistence, activation email delivery and rollback.
    """

    repository: AccountRepository
    mailer: ActivationMailer
    token_length: int = DEFAULT_TOKEN_LENGTH
    bcrypt_cost: int = DEFAULT_BCRYPT_COST

    def register(self, candidate: RegistrationCandidate) -> None:
        """
        Register a new disabled account and send its activation email.

        Args:
            candidate: Submitted username, email and password

        Raises:
            ValidationError: If any field is invalid or the email is taken
            EmailDeliveryError: If the activation email could not be sent
                (the account has been removed again)
        """
        pending = self._create_pending(candidate)
        self._deliver(pending)

    def activate(self, token: str) -> None:
        """
        Enable the account holding this activation token.

        Unknown tokens and tokens already used fail identically.

        Raises:
            InvalidTokenError: If no disabled account holds the token
        """
        account = self.repository.activate(token)
        if account is None:
            raise InvalidTokenError()
        logger.info("Account activated: id=%s", account.id)

    def _create_pending(self, candidate: RegistrationCandidate) -> PendingRegistration:
        """Phase one: validate and persist a disabled account."""
        errors = RegistrationValidator(self.repository).validate(candidate)
        if errors:
            raise ValidationError(errors)

        password_hash = hash_password(candidate.password, rounds=self.bcrypt_cost)
        token = generate_activation_token(self.token_length)

        account = self.repository.create_account(
            username=candidate.username,
            email=candidate.email,
            password_hash=password_hash,
            activation_token=token,
        )
        if account is None:
            # Lost a race with a concurrent registration for the same email
            raise ValidationError({"email": ReasonCode.EMAIL_INUSE})

        logger.info("Account created: id=%s", account.id)
        return PendingRegistration(
            account_id=account.id,
            email=account.email,
            activation_token=token,
        )

    def _deliver(self, pending: PendingRegistration) -> None:
        """Phase two: send the activation email, rolling back on any failure."""
        try:
            result = self.mailer.send_account_activation(pending.email, pending.activation_token)
        except Exception:
            self._rollback(pending)
            raise

        if result is not DeliveryResult.SENT:
            self._rollback(pending)
            raise EmailDeliveryError()

    def _rollback(self, pending: PendingRegistration) -> None:
        deleted = self.repository.delete_account(pending.account_id)
        if deleted:
            logger.warning(
                "Activation email failed, account rolled back: id=%s", pending.account_id
            )
        else:
            logger.warning(
                "Activation email failed, account already gone: id=%s", pending.account_id
            )
