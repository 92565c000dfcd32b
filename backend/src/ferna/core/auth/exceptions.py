"""Exceptions raised by the credential hashing subsystem."""


class CredentialError(Exception):
    """Base class for credential encoding and verification failures."""


class RandomSourceError(CredentialError):
    """The operating system could not supply secure random bytes for a salt."""


class MalformedCredentialError(CredentialError):
    """An encoded credential string could not be parsed.

    Raised for structural problems only. A well-formed credential that
    simply does not match the candidate password is not an error.
    """
