"""
Domain layer - Pure business logic with zero framework imports.

This package contains the core business logic for account registration
and email activation. It defines its own port interfaces for infrastructure
abstraction, ensuring true hexagonal architecture decoupling.
"""

from .exceptions import (
    EmailDeliveryError,
    InvalidTokenError,
    RegistrationError,
    ValidationError,
)
from .ports import Account, AccountRepository, ActivationMailer, DeliveryResult, ReasonCode
from .registration import PendingRegistration, RegistrationService
from .validation import RegistrationCandidate, RegistrationValidator

__all__ = [
    "Account",
    "AccountRepository",
    "ActivationMailer",
    "DeliveryResult",
    "EmailDeliveryError",
    "InvalidTokenError",
    "PendingRegistration",
    "ReasonCode",
    "RegistrationCandidate",
    "RegistrationError",
    "RegistrationService",
    "RegistrationValidator",
    "ValidationError",
]
