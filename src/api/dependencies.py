"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes, and the
builders the application lifespan uses to create the adapters.
"""

from functools import lru_cache

from fastapi import Depends, Request
from psycopg_pool import ConnectionPool

from src.adapters.repository.memory import InMemoryAccountRepository
from src.adapters.repository.postgres import PostgresAccountRepository
from src.adapters.smtp.console import ConsoleActivationMailer
from src.adapters.smtp.mailer import SmtpActivationMailer
from src.config.settings import Settings, get_settings
from src.domain.ports import AccountRepository, ActivationMailer
from src.domain.registration import RegistrationService
from src.i18n import Translator


def build_repository(settings: Settings, pool: ConnectionPool | None) -> AccountRepository:
    """Create the repository selected by ``storage_backend``."""
    if settings.storage_backend == "memory":
        return InMemoryAccountRepository()
    if pool is None:
        raise ValueError("postgres storage backend requires a connection pool")
    return PostgresAccountRepository(pool)


def build_mailer(settings: Settings) -> ActivationMailer:
    """Create the mailer selected by ``mail_backend``."""
    if settings.mail_backend == "smtp":
        return SmtpActivationMailer(
            host=settings.smtp_host,
            port=settings.smtp_port,
            mail_from=settings.mail_from,
            activation_url=settings.activation_url,
            timeout=settings.smtp_timeout_seconds,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
        )
    return ConsoleActivationMailer(activation_url=settings.activation_url)


def get_repository(request: Request) -> AccountRepository:
    """
    Get the account repository from app state.

    The repository is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.repository


def get_mailer(request: Request) -> ActivationMailer:
    """Get the activation mailer from app state."""
    return request.app.state.mailer


def get_registration_service(request: Request) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the repository and mailer for the domain service.
    """
    settings = get_settings()
    return RegistrationService(
        repository=get_repository(request),
        mailer=get_mailer(request),
        token_length=settings.token_length,
        bcrypt_cost=settings.bcrypt_cost,
    )


@lru_cache
def get_translator() -> Translator:
    """Get the translator (catalogs are loaded once)."""
    return Translator.from_directory(fallback_language=get_settings().default_language)


def get_language(request: Request, translator: Translator = Depends(get_translator)) -> str:
    """Negotiate the response language from the Accept-Language header."""
    return translator.negotiate(request.headers.get("accept-language"))
