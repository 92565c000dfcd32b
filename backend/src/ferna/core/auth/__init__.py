"""Authentication module for Ferna."""

from ferna.core.auth.credentials import (
    Argon2Parameters,
    CredentialHasher,
    DecodedCredential,
    decode_credential,
    get_hasher,
    hash_password,
    needs_rehash,
    verify_password,
)
from ferna.core.auth.exceptions import (
    CredentialError,
    MalformedCredentialError,
    RandomSourceError,
)
from ferna.core.auth.login import (
    AuthOutcome,
    AuthResult,
    LoginOrchestrator,
    UserStore,
    authenticate,
    normalize_identifier,
)

__all__ = [
    # Credential encoding
    "Argon2Parameters",
    "CredentialHasher",
    "DecodedCredential",
    "decode_credential",
    "get_hasher",
    "hash_password",
    "verify_password",
    "needs_rehash",
    # Errors
    "CredentialError",
    "MalformedCredentialError",
    "RandomSourceError",
    # Login
    "AuthOutcome",
    "AuthResult",
    "LoginOrchestrator",
    "UserStore",
    "authenticate",
    "normalize_identifier",
]
