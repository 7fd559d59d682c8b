"""
Domain exceptions - Semantic error types for registration.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
Messages carry stable codes only; translation happens at the API boundary.
"""

from .ports import ReasonCode


class RegistrationError(Exception):
    """Base class for registration domain errors."""

    pass


class ValidationError(RegistrationError):
    """
    One or more candidate fields failed validation.

    Attributes:
        errors: Field name -> reason code, in field declaration order
                (username, email, password). One code per field.
    """

    def __init__(self, errors: dict[str, ReasonCode]) -> None:
        self.errors = dict(errors)
        super().__init__(", ".join(f"{field}={code.value}" for field, code in self.errors.items()))


class EmailDeliveryError(RegistrationError):
    """Activation email could not be delivered; the account was rolled back."""

    pass


class InvalidTokenError(RegistrationError):
    """Token is unknown, wrong, or already used."""

    pass
