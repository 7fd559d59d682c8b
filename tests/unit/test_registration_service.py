"""
Unit tests for RegistrationService domain logic.

Tests domain logic with in-memory storage and a recording mailer, and with
mocked ports where call order matters, to verify:
- Registration persists one disabled account and sends one email
- Validation failures persist nothing and send nothing
- Delivery failures roll the account back
- Activation is single-use and opaque on failure
"""

import re
from unittest.mock import Mock, call

import bcrypt
import pytest

from src.adapters.repository.memory import InMemoryAccountRepository
from src.domain.exceptions import EmailDeliveryError, InvalidTokenError, ValidationError
from src.domain.ports import Account, DeliveryResult, ReasonCode
from src.domain.registration import RegistrationService
from tests.fakes import FAST_BCRYPT_COST, RecordingMailer, make_candidate


def make_account(**overrides: object) -> Account:
    fields = {
        "id": 1,
        "username": "user1",
        "email": "user1@mail.com",
        "password_hash": "$2b$04$hash",
        "enabled": False,
        "activation_token": "0123456789abcdef",
    }
    fields.update(overrides)
    return Account(**fields)  # type: ignore[arg-type]


class TestRegisterSuccess:
    """Tests for a successful registration."""

    def test_persists_exactly_one_disabled_account(
        self, service: RegistrationService, repository: InMemoryAccountRepository
    ) -> None:
        """One account is stored, disabled, with username and email as given."""
        service.register(make_candidate())

        accounts = repository.all()
        assert len(accounts) == 1
        assert accounts[0].username == "user1"
        assert accounts[0].email == "user1@mail.com"
        assert accounts[0].enabled is False

    def test_stores_activation_token(
        self, service: RegistrationService, repository: InMemoryAccountRepository
    ) -> None:
        """Stored account has a non-empty activation token."""
        service.register(make_candidate())
        assert repository.all()[0].activation_token

    def test_password_is_hashed(
        self, service: RegistrationService, repository: InMemoryAccountRepository
    ) -> None:
        """Password is stored as a verifiable bcrypt hash, not plaintext."""
        service.register(make_candidate())

        password_hash = repository.all()[0].password_hash
        assert password_hash != "P4ssword"
        assert bcrypt.checkpw(b"P4ssword", password_hash.encode())

    @pytest.mark.parametrize("password", ["Aa1" + "x" * 80, "Aa1" + "ñ" * 40])
    def test_password_longer_than_72_bytes_registers(
        self,
        service: RegistrationService,
        repository: InMemoryAccountRepository,
        password: str,
    ) -> None:
        """Long passwords, including multibyte ones, still create the account."""
        service.register(make_candidate(password=password))

        password_hash = repository.all()[0].password_hash
        assert bcrypt.checkpw(password.encode()[:72], password_hash.encode())

    def test_sends_one_email_with_stored_token(
        self,
        service: RegistrationService,
        repository: InMemoryAccountRepository,
        mailer: RecordingMailer,
    ) -> None:
        """Exactly one activation email goes to the account's address with its token."""
        service.register(make_candidate())

        account = repository.all()[0]
        assert mailer.sent == [("user1@mail.com", account.activation_token)]

    def test_returns_none(self, service: RegistrationService) -> None:
        """Callers only learn that registration succeeded."""
        assert service.register(make_candidate()) is None

    def test_token_length_is_configurable(
        self, repository: InMemoryAccountRepository, mailer: RecordingMailer
    ) -> None:
        """Token length follows the service setting."""
        service = RegistrationService(
            repository=repository, mailer=mailer, token_length=32, bcrypt_cost=FAST_BCRYPT_COST
        )
        service.register(make_candidate())

        assert re.fullmatch(r"[0-9a-f]{32}", repository.all()[0].activation_token or "")

    def test_default_bcrypt_cost_at_least_10(self) -> None:
        """Service hashes with cost >= 10 unless configured otherwise."""
        repo = Mock()
        repo.find_by_email.return_value = None
        repo.create_account.return_value = make_account()
        sender = Mock()
        sender.send_account_activation.return_value = DeliveryResult.SENT

        RegistrationService(repository=repo, mailer=sender).register(make_candidate())

        password_hash = repo.create_account.call_args.kwargs["password_hash"]
        assert int(password_hash.split("$")[2]) >= 10

    def test_persists_before_sending(self) -> None:
        """The account is created before the email is attempted."""
        manager = Mock()
        manager.repo.find_by_email.return_value = None
        manager.repo.create_account.return_value = make_account()
        manager.sender.send_account_activation.return_value = DeliveryResult.SENT

        service = RegistrationService(
            repository=manager.repo, mailer=manager.sender, bcrypt_cost=FAST_BCRYPT_COST
        )
        service.register(make_candidate())

        names = [c[0] for c in manager.mock_calls]
        assert names.index("repo.create_account") < names.index("sender.send_account_activation")
        manager.sender.send_account_activation.assert_called_once_with(
            "user1@mail.com", manager.repo.create_account.call_args.kwargs["activation_token"]
        )


class TestRegisterValidation:
    """Tests for validation failures."""

    def test_invalid_candidate_raises_validation_error(
        self, service: RegistrationService
    ) -> None:
        """Invalid password yields ValidationError with the field's code."""
        with pytest.raises(ValidationError) as exc_info:
            service.register(make_candidate(password="alllowercase"))

        assert exc_info.value.errors == {"password": ReasonCode.PASSWORD_PATTERN}

    def test_validation_failure_persists_nothing_and_sends_nothing(
        self,
        service: RegistrationService,
        repository: InMemoryAccountRepository,
        mailer: RecordingMailer,
    ) -> None:
        """No account and no email after a validation failure."""
        with pytest.raises(ValidationError):
            service.register(make_candidate(username=None, email=None))

        assert repository.all() == []
        assert mailer.sent == []

    def test_second_registration_with_same_email_is_in_use(
        self,
        service: RegistrationService,
        repository: InMemoryAccountRepository,
    ) -> None:
        """Registering an email twice fails with email_inuse; still one account."""
        service.register(make_candidate())

        with pytest.raises(ValidationError) as exc_info:
            service.register(make_candidate(username="user2"))

        assert exc_info.value.errors == {"email": ReasonCode.EMAIL_INUSE}
        assert len(repository.all()) == 1

    def test_lost_insert_race_reports_email_inuse(self) -> None:
        """Storage uniqueness conflict after a clean pre-check maps to email_inuse."""
        repo = Mock()
        repo.find_by_email.return_value = None
        repo.create_account.return_value = None
        sender = Mock()

        service = RegistrationService(repository=repo, mailer=sender, bcrypt_cost=FAST_BCRYPT_COST)

        with pytest.raises(ValidationError) as exc_info:
            service.register(make_candidate())

        assert exc_info.value.errors == {"email": ReasonCode.EMAIL_INUSE}
        sender.send_account_activation.assert_not_called()
        repo.delete_account.assert_not_called()


class TestRegisterDeliveryFailure:
    """Tests for rollback when the activation email fails."""

    def test_failed_delivery_raises_email_delivery_error(
        self, repository: InMemoryAccountRepository
    ) -> None:
        """FAILED delivery surfaces as EmailDeliveryError, not ValidationError."""
        service = RegistrationService(
            repository=repository,
            mailer=RecordingMailer(result=DeliveryResult.FAILED),
            bcrypt_cost=FAST_BCRYPT_COST,
        )

        with pytest.raises(EmailDeliveryError) as exc_info:
            service.register(make_candidate())

        assert "user1@mail.com" not in str(exc_info.value)

    def test_failed_delivery_leaves_no_account(
        self, repository: InMemoryAccountRepository
    ) -> None:
        """Zero accounts remain for the email after a failed send."""
        failing = RecordingMailer(result=DeliveryResult.FAILED)
        service = RegistrationService(
            repository=repository, mailer=failing, bcrypt_cost=FAST_BCRYPT_COST
        )

        with pytest.raises(EmailDeliveryError):
            service.register(make_candidate())

        assert len(failing.sent) == 1
        assert repository.find_by_email("user1@mail.com") is None
        assert repository.all() == []

    def test_retry_after_failed_delivery_succeeds(
        self, repository: InMemoryAccountRepository
    ) -> None:
        """The email slot is free again after a rollback."""
        mailer = RecordingMailer(result=DeliveryResult.FAILED)
        service = RegistrationService(
            repository=repository, mailer=mailer, bcrypt_cost=FAST_BCRYPT_COST
        )
        with pytest.raises(EmailDeliveryError):
            service.register(make_candidate())

        mailer.result = DeliveryResult.SENT
        service.register(make_candidate())

        assert len(repository.all()) == 1

    def test_mailer_exception_rolls_back_and_propagates(
        self, repository: InMemoryAccountRepository
    ) -> None:
        """Unexpected mailer errors are re-raised unchanged after the rollback."""
        service = RegistrationService(
            repository=repository,
            mailer=RecordingMailer(error=RuntimeError("transport exploded")),
            bcrypt_cost=FAST_BCRYPT_COST,
        )

        with pytest.raises(RuntimeError, match="transport exploded"):
            service.register(make_candidate())

        assert repository.all() == []

    def test_rollback_deletes_the_created_account(self) -> None:
        """Compensating delete targets the id returned by create_account."""
        repo = Mock()
        repo.find_by_email.return_value = None
        repo.create_account.return_value = make_account(id=42)
        repo.delete_account.return_value = True
        sender = Mock()
        sender.send_account_activation.return_value = DeliveryResult.FAILED

        service = RegistrationService(repository=repo, mailer=sender, bcrypt_cost=FAST_BCRYPT_COST)

        with pytest.raises(EmailDeliveryError):
            service.register(make_candidate())

        assert repo.delete_account.call_args_list == [call(42)]


class TestActivate:
    """Tests for token activation."""

    def test_activation_enables_account_and_clears_token(
        self,
        service: RegistrationService,
        repository: InMemoryAccountRepository,
        mailer: RecordingMailer,
    ) -> None:
        """Correct token enables the account and nulls the token."""
        service.register(make_candidate())
        token = mailer.sent[0][1]

        service.activate(token)

        account = repository.all()[0]
        assert account.enabled is True
        assert account.activation_token is None

    def test_second_activation_with_same_token_fails(
        self, service: RegistrationService, mailer: RecordingMailer
    ) -> None:
        """A used token is invalid."""
        service.register(make_candidate())
        token = mailer.sent[0][1]
        service.activate(token)

        with pytest.raises(InvalidTokenError):
            service.activate(token)

    def test_unknown_token_fails(
        self, service: RegistrationService, repository: InMemoryAccountRepository
    ) -> None:
        """Wrong token raises InvalidTokenError and leaves the account disabled."""
        service.register(make_candidate())

        with pytest.raises(InvalidTokenError):
            service.activate("this-token-does-not-exist")

        assert repository.all()[0].enabled is False

    def test_unknown_and_used_tokens_fail_identically(
        self, service: RegistrationService, mailer: RecordingMailer
    ) -> None:
        """Both failures carry the same type and message."""
        service.register(make_candidate())
        token = mailer.sent[0][1]
        service.activate(token)

        with pytest.raises(InvalidTokenError) as used:
            service.activate(token)
        with pytest.raises(InvalidTokenError) as unknown:
            service.activate("0000000000000000")

        assert type(used.value) is type(unknown.value)
        assert str(used.value) == str(unknown.value)

    def test_activation_only_touches_matching_account(
        self,
        service: RegistrationService,
        repository: InMemoryAccountRepository,
        mailer: RecordingMailer,
    ) -> None:
        """Other disabled accounts keep their state."""
        service.register(make_candidate())
        service.register(make_candidate(username="user2", email="user2@mail.com"))

        service.activate(mailer.sent[1][1])

        first = repository.find_by_email("user1@mail.com")
        second = repository.find_by_email("user2@mail.com")
        assert first is not None and first.enabled is False
        assert second is not None and second.enabled is True
