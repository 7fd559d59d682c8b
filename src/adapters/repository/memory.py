"""
In-memory repository adapter - Implements AccountRepository protocol.

Process-local storage for development and tests. A single lock
serializes every operation, which gives the same guarantees the
PostgreSQL adapter gets from its constraints: one account per email,
and one successful activation per token.
"""

import itertools
import threading
from dataclasses import replace
from datetime import datetime, timezone

from src.domain.ports import Account


class InMemoryAccountRepository:
    """
    Implements AccountRepository protocol with a dict keyed by account id.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self) -> None:
        self._accounts: dict[int, Account] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def find_by_email(self, email: str) -> Account | None:
        with self._lock:
            return self._by_email(email)

    def find_by_activation_token(self, token: str) -> Account | None:
        with self._lock:
            return self._by_token(token)

    def create_account(
        self, username: str, email: str, password_hash: str, activation_token: str
    ) -> Account | None:
        with self._lock:
            if self._by_email(email) is not None:
                return None
            account = Account(
                id=next(self._ids),
                username=username,
                email=email,
                password_hash=password_hash,
                enabled=False,
                activation_token=activation_token,
                created_at=datetime.now(timezone.utc),
            )
            self._accounts[account.id] = account
            return account

    def delete_account(self, account_id: int) -> bool:
        with self._lock:
            account = self._accounts.get(account_id)
            if account is None or account.enabled:
                return False
            del self._accounts[account_id]
            return True

    def activate(self, token: str) -> Account | None:
        with self._lock:
            account = self._by_token(token)
            if account is None:
                return None
            activated = replace(
                account,
                enabled=True,
                activation_token=None,
                activated_at=datetime.now(timezone.utc),
            )
            self._accounts[account.id] = activated
            return activated

    def all(self) -> list[Account]:
        """Snapshot of every stored account, in creation order."""
        with self._lock:
            return list(self._accounts.values())

    def _by_email(self, email: str) -> Account | None:
        return next((a for a in self._accounts.values() if a.email == email), None)

    def _by_token(self, token: str) -> Account | None:
        return next(
            (
                a
                for a in self._accounts.values()
                if not a.enabled and a.activation_token == token
            ),
            None,
        )
