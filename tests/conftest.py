"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- In-memory account storage
- A recording activation mailer
- Registration service wired to both
"""

import pytest

from src.adapters.repository.memory import InMemoryAccountRepository
from src.domain.registration import RegistrationService
from tests.fakes import FAST_BCRYPT_COST, RecordingMailer


@pytest.fixture
def repository() -> InMemoryAccountRepository:
    """Fresh in-memory repository for each test."""
    return InMemoryAccountRepository()


@pytest.fixture
def mailer() -> RecordingMailer:
    """Mailer that accepts every message."""
    return RecordingMailer()


@pytest.fixture
def service(repository: InMemoryAccountRepository, mailer: RecordingMailer) -> RegistrationService:
    """Registration service over the in-memory repository and recording mailer."""
    return RegistrationService(
        repository=repository, mailer=mailer, bcrypt_cost=FAST_BCRYPT_COST
    )
