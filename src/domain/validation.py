"""
Registration field validation.

Each field has an ordered tuple of rules; the first rule that fails
determines the field's reason code and the remaining rules for that
field are skipped. Fields are reported in declaration order.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass

from email_validator import EmailNotValidError, validate_email

from .ports import AccountRepository, ReasonCode

USERNAME_MIN_LENGTH = 4
USERNAME_MAX_LENGTH = 32
PASSWORD_MIN_LENGTH = 6

_PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*[0-9])", re.DOTALL)


@dataclass(frozen=True)
class RegistrationCandidate:
    """
    Registration input as submitted.

    Only the three user-controlled fields exist here; state flags such
    as enabled are never part of the candidate.
    """

    username: str | None
    email: str | None
    password: str | None


@dataclass(frozen=True)
class Rule:
    """A single check: ``passes(value)`` False yields ``reason``."""

    reason: ReasonCode
    passes: Callable[[str | None], bool]


def _present(value: str | None) -> bool:
    return value is not None and value != ""


def _length_between(minimum: int, maximum: int | None = None) -> Callable[[str | None], bool]:
    def check(value: str | None) -> bool:
        length = len(value or "")
        return length >= minimum and (maximum is None or length <= maximum)

    return check


def _well_formed_email(value: str | None) -> bool:
    try:
        validate_email(value or "", check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def _complex_password(value: str | None) -> bool:
    return _PASSWORD_PATTERN.match(value or "") is not None


class RegistrationValidator:
    """
    Validates registration candidates.

    All rules are pure except the email uniqueness rule,
    which queries the repository.
    """

    def __init__(self, repository: AccountRepository) -> None:
        self._repository = repository
        self._rules: dict[str, tuple[Rule, ...]] = {
            "username": (
                Rule(ReasonCode.USERNAME_NULL, _present),
                Rule(
                    ReasonCode.USERNAME_SIZE,
                    _length_between(USERNAME_MIN_LENGTH, USERNAME_MAX_LENGTH),
                ),
            ),
            "email": (
                Rule(ReasonCode.EMAIL_NULL, _present),
                Rule(ReasonCode.EMAIL_INVALID, _well_formed_email),
                Rule(ReasonCode.EMAIL_INUSE, self._email_available),
            ),
            "password": (
                Rule(ReasonCode.PASSWORD_NULL, _present),
                Rule(ReasonCode.PASSWORD_SIZE, _length_between(PASSWORD_MIN_LENGTH)),
                Rule(ReasonCode.PASSWORD_PATTERN, _complex_password),
            ),
        }

    def validate(self, candidate: RegistrationCandidate) -> dict[str, ReasonCode]:
        """
        Run every field's rules against the candidate.

        Returns:
            Field name -> reason code for each invalid field, in declaration
            order. Empty when the candidate is valid.
        """
        errors: dict[str, ReasonCode] = {}
        for field, rules in self._rules.items():
            value = getattr(candidate, field)
            for rule in rules:
                if not rule.passes(value):
                    errors[field] = rule.reason
                    break
        return errors

    def _email_available(self, email: str | None) -> bool:
        return self._repository.find_by_email(email or "") is None
