"""Password credential encoding and verification using Argon2id.

Credentials are stored as a single self-describing string::

    $argon2id$v=19$m=65536,t=1,p=4$<salt>$<digest>

Salt and digest are standard base64 without padding. Verification always
re-derives the digest with the parameters embedded in the string, so the
default cost parameters can change without invalidating stored credentials.
"""

from __future__ import annotations

import base64
import binascii
import hmac
import re
import secrets
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Optional, Union

from argon2.exceptions import HashingError
from argon2.low_level import ARGON2_VERSION, Type, hash_secret_raw

from ferna.core.auth.exceptions import MalformedCredentialError, RandomSourceError

ALGORITHM = "argon2id"

# Revisions libargon2 can reproduce: 0x10 (1.0) and 0x13 (1.3)
SUPPORTED_VERSIONS = frozenset({0x10, 0x13})

_FIELD_COUNT = 6
_UINT32_MAX = 0xFFFFFFFF
_VERSION_RE = re.compile(r"v=([0-9]+)")
_PARAMS_RE = re.compile(r"m=([0-9]+),t=([0-9]+),p=([0-9]+)")

Password = Union[str, bytes]


@dataclass(frozen=True)
class Argon2Parameters:
    """Cost parameters for Argon2id derivation.

    Attributes:
        memory_cost: Memory in KiB
        time_cost: Number of iterations
        parallelism: Number of lanes
        salt_len: Salt length in bytes
        hash_len: Digest length in bytes
    """

    memory_cost: int = 65536
    time_cost: int = 1
    parallelism: int = 4
    salt_len: int = 16
    hash_len: int = 32

    def format(self) -> str:
        """Render the cost segment of an encoded credential."""
        return f"m={self.memory_cost},t={self.time_cost},p={self.parallelism}"


DEFAULT_PARAMETERS = Argon2Parameters()


@dataclass(frozen=True)
class DecodedCredential:
    """Fields recovered from an encoded credential string.

    ``parameters.salt_len`` and ``parameters.hash_len`` reflect the decoded
    salt and digest lengths.
    """

    version: int
    parameters: Argon2Parameters
    salt: bytes
    digest: bytes
    algorithm: str = ALGORITHM

    def encode(self) -> str:
        """Serialize back into the ``$argon2id$...`` wire format."""
        return "$" + "$".join(
            [
                self.algorithm,
                f"v={self.version}",
                self.parameters.format(),
                _b64encode(self.salt),
                _b64encode(self.digest),
            ]
        )


def _b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii").rstrip("=")


def _b64decode(value: str, field: str) -> bytes:
    if not value or "=" in value:
        raise MalformedCredentialError(f"invalid {field} encoding")
    try:
        return base64.b64decode(value + "=" * (-len(value) % 4), validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedCredentialError(f"invalid {field} encoding") from e


def _to_bytes(password: Password) -> bytes:
    if isinstance(password, str):
        return password.encode("utf-8")
    return bytes(password)


def decode_credential(encoded: str) -> DecodedCredential:
    """Parse an encoded credential without doing any cryptographic work.

    Args:
        encoded: String in ``$argon2id$v=<int>$m=<int>,t=<int>,p=<int>$<salt>$<digest>`` form.

    Returns:
        The decoded credential.

    Raises:
        MalformedCredentialError: If any part of the string fails to parse.
    """
    if not isinstance(encoded, str):
        raise MalformedCredentialError("encoded credential must be a string")

    fields = encoded.split("$")
    if len(fields) != _FIELD_COUNT or fields[0] != "":
        raise MalformedCredentialError("invalid hash format")
    if fields[1] != ALGORITHM:
        raise MalformedCredentialError(f"unsupported algorithm {fields[1]!r}")

    version_match = _VERSION_RE.fullmatch(fields[2])
    if version_match is None:
        raise MalformedCredentialError("invalid version segment")
    version = int(version_match.group(1))
    if version not in SUPPORTED_VERSIONS:
        raise MalformedCredentialError(f"unsupported argon2 version {version}")

    params_match = _PARAMS_RE.fullmatch(fields[3])
    if params_match is None:
        raise MalformedCredentialError("invalid parameter segment")
    memory_cost, time_cost, parallelism = (int(g) for g in params_match.groups())
    if max(memory_cost, time_cost, parallelism) > _UINT32_MAX:
        raise MalformedCredentialError("parameter out of range")

    salt = _b64decode(fields[4], "salt")
    digest = _b64decode(fields[5], "digest")

    return DecodedCredential(
        version=version,
        parameters=Argon2Parameters(
            memory_cost=memory_cost,
            time_cost=time_cost,
            parallelism=parallelism,
            salt_len=len(salt),
            hash_len=len(digest),
        ),
        salt=salt,
        digest=digest,
    )


class CredentialHasher:
    """Encodes and verifies Argon2id password credentials.

    The hasher holds only its immutable cost parameters, so a single
    instance is safe to share between concurrent callers.

    Example:
        >>> hasher = CredentialHasher(Argon2Parameters(memory_cost=64, parallelism=1))
        >>> encoded = hasher.encode("hunter2")
        >>> hasher.verify("hunter2", encoded)
        True
    """

    def __init__(self, parameters: Optional[Argon2Parameters] = None) -> None:
        self.parameters = parameters or DEFAULT_PARAMETERS

    def _random_salt(self) -> bytes:
        try:
            return secrets.token_bytes(self.parameters.salt_len)
        except (OSError, NotImplementedError) as e:
            raise RandomSourceError("secure random source unavailable") from e

    def encode(self, password: Password) -> str:
        """Hash a password with a fresh salt.

        No length or charset policy is applied here.

        Args:
            password: Plaintext password, str (UTF-8) or bytes.

        Returns:
            The encoded credential string.

        Raises:
            RandomSourceError: If secure random bytes cannot be obtained.
        """
        salt = self._random_salt()
        params = self.parameters
        digest = hash_secret_raw(
            secret=_to_bytes(password),
            salt=salt,
            time_cost=params.time_cost,
            memory_cost=params.memory_cost,
            parallelism=params.parallelism,
            hash_len=params.hash_len,
            type=Type.ID,
            version=ARGON2_VERSION,
        )
        return DecodedCredential(
            version=ARGON2_VERSION,
            parameters=params,
            salt=salt,
            digest=digest,
        ).encode()

    def verify(self, password: Password, encoded: str) -> bool:
        """Check a password against an encoded credential.

        The digest is re-derived with the parameters, version and salt
        embedded in ``encoded`` and compared in constant time.

        Args:
            password: Candidate plaintext password.
            encoded: Previously encoded credential.

        Returns:
            True on an exact match, False otherwise.

        Raises:
            MalformedCredentialError: If ``encoded`` cannot be parsed or its
                parameters are rejected by the key derivation function.
        """
        decoded = decode_credential(encoded)
        params = decoded.parameters
        try:
            derived = hash_secret_raw(
                secret=_to_bytes(password),
                salt=decoded.salt,
                time_cost=params.time_cost,
                memory_cost=params.memory_cost,
                parallelism=params.parallelism,
                hash_len=len(decoded.digest),
                type=Type.ID,
                version=decoded.version,
            )
        except (HashingError, OverflowError) as e:
            raise MalformedCredentialError(f"unusable credential parameters: {e}") from e
        return hmac.compare_digest(derived, decoded.digest)

    def needs_rehash(self, encoded: str) -> bool:
        """Check whether a credential was produced with different settings.

        Args:
            encoded: Previously encoded credential.

        Returns:
            True if the credential's version or cost parameters differ from
            this hasher's current ones.

        Raises:
            MalformedCredentialError: If ``encoded`` cannot be parsed.
        """
        decoded = decode_credential(encoded)
        return decoded.version != ARGON2_VERSION or decoded.parameters != self.parameters

    def with_parameters(self, **changes: int) -> "CredentialHasher":
        """Return a new hasher with some cost parameters replaced."""
        return CredentialHasher(replace(self.parameters, **changes))


@lru_cache
def get_hasher() -> CredentialHasher:
    """Return the process-wide hasher built from application settings."""
    from ferna.core.config import get_settings

    return CredentialHasher(get_settings().argon2_parameters())


def hash_password(plain: Password) -> str:
    """Hash a plaintext password with the configured hasher.

    Args:
        plain: The plaintext password to hash.

    Returns:
        The encoded credential string.
    """
    return get_hasher().encode(plain)


def verify_password(plain: Password, hashed: str) -> bool:
    """Verify a plaintext password with the configured hasher.

    Args:
        plain: The plaintext password to verify.
        hashed: The stored encoded credential.

    Returns:
        True if the password matches, False otherwise.

    Raises:
        MalformedCredentialError: If ``hashed`` is not a valid credential.
    """
    return get_hasher().verify(plain, hashed)


def needs_rehash(hashed: str) -> bool:
    """Check if a stored credential should be re-encoded with current parameters.

    Args:
        hashed: The stored encoded credential.

    Returns:
        True if the credential should be re-computed with current parameters.
    """
    return get_hasher().needs_rehash(hashed)
