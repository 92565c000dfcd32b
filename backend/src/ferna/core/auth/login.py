"""Login orchestration: identifier lookup plus credential verification.

Every failure mode collapses to "not authenticated" for the caller, while
the specific cause is kept on the internal result and logged for operators.
"""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass
from typing import Optional, Protocol

import structlog

from ferna.core.auth.credentials import CredentialHasher, get_hasher
from ferna.core.auth.exceptions import MalformedCredentialError

logger = structlog.get_logger(__name__)

DEFAULT_LOOKUP_TIMEOUT = 5.0


def normalize_identifier(identifier: str) -> str:
    """Normalize a login identifier (email) for storage and lookup."""
    return identifier.strip().lower()


class UserRecord(Protocol):
    """Minimal view of a stored user needed to authenticate."""

    email: str
    password_hash: Optional[str]


class UserStore(Protocol):
    """Lookup contract the orchestrator needs from user persistence."""

    async def lookup_by_identifier(self, identifier: str) -> Optional[UserRecord]:
        """Return the record for a normalized identifier, or None."""
        ...


class AuthOutcome(str, enum.Enum):
    """Internal reason for an authentication decision."""

    SUCCESS = "success"
    NOT_FOUND = "not_found"
    WRONG_PASSWORD = "wrong_password"
    NO_LOCAL_CREDENTIAL = "no_local_credential"
    STORE_TIMEOUT = "store_timeout"
    STORE_ERROR = "store_error"
    CORRUPT_CREDENTIAL = "corrupt_credential"


@dataclass(frozen=True)
class AuthResult:
    """Outcome of a login attempt.

    ``user`` is only populated on success. Callers outside the auth layer
    should look at ``authenticated`` and nothing else.
    """

    outcome: AuthOutcome
    identifier: str
    user: Optional[UserRecord] = None

    @property
    def authenticated(self) -> bool:
        return self.outcome is AuthOutcome.SUCCESS

    def __bool__(self) -> bool:
        return self.authenticated


class LoginOrchestrator:
    """Authenticates an (identifier, password) pair against a user store.

    One lookup and one verification per call; no retries, no lockout.
    The lookup is bounded by ``lookup_timeout`` seconds and cancelled when
    it overruns. Digest derivation runs in a worker thread and always runs
    to completion once started.

    Args:
        store: User store providing ``lookup_by_identifier``
        hasher: Credential hasher used for verification
        lookup_timeout: Deadline for the store lookup in seconds
    """

    def __init__(
        self,
        store: UserStore,
        hasher: Optional[CredentialHasher] = None,
        lookup_timeout: float = DEFAULT_LOOKUP_TIMEOUT,
    ) -> None:
        self.store = store
        self.hasher = hasher or get_hasher()
        self.lookup_timeout = lookup_timeout

    async def attempt(self, identifier: str, password: str) -> AuthResult:
        """Run a login attempt and return the detailed result."""
        normalized = normalize_identifier(identifier)
        log = logger.bind(identifier=normalized)

        try:
            record = await asyncio.wait_for(
                self.store.lookup_by_identifier(normalized),
                timeout=self.lookup_timeout,
            )
        except asyncio.TimeoutError:
            log.error("login_store_timeout", timeout=self.lookup_timeout)
            return AuthResult(AuthOutcome.STORE_TIMEOUT, normalized)
        except Exception:
            log.error("login_store_error", exc_info=True)
            return AuthResult(AuthOutcome.STORE_ERROR, normalized)

        if record is None:
            log.info("login_user_not_found")
            return AuthResult(AuthOutcome.NOT_FOUND, normalized)

        encoded = record.password_hash
        if not encoded:
            log.info("login_no_local_credential")
            return AuthResult(AuthOutcome.NO_LOCAL_CREDENTIAL, normalized)

        try:
            matched = await asyncio.to_thread(self.hasher.verify, password, encoded)
        except MalformedCredentialError as e:
            log.warning("login_corrupt_credential", error=str(e))
            return AuthResult(AuthOutcome.CORRUPT_CREDENTIAL, normalized)

        if not matched:
            log.info("login_wrong_password")
            return AuthResult(AuthOutcome.WRONG_PASSWORD, normalized)

        log.info("login_succeeded")
        return AuthResult(AuthOutcome.SUCCESS, normalized, user=record)

    async def authenticate(self, identifier: str, password: str) -> bool:
        """Return True only if the identifier and password are valid."""
        result = await self.attempt(identifier, password)
        return result.authenticated


async def authenticate(
    store: UserStore,
    identifier: str,
    password: str,
    lookup_timeout: float = DEFAULT_LOOKUP_TIMEOUT,
) -> bool:
    """Authenticate with the process-wide hasher.

    Args:
        store: User store providing ``lookup_by_identifier``.
        identifier: User-supplied identifier (normalized before lookup).
        password: Candidate password.
        lookup_timeout: Deadline for the store lookup in seconds.

    Returns:
        True if authenticated, False for every kind of failure.
    """
    orchestrator = LoginOrchestrator(store, lookup_timeout=lookup_timeout)
    return await orchestrator.authenticate(identifier, password)
