"""Error taxonomy for connection string parsing and building."""

from __future__ import annotations


class ConnectionStringError(ValueError):
    """Base error for connection strings that cannot be used."""

    def __init__(self, message: str, *, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class MalformedInputError(ConnectionStringError):
    """Raised when the string does not decompose into clean key/value pairs."""


class DuplicateKeyError(ConnectionStringError):
    """Raised when the same setting appears more than once."""


class MissingRequiredFieldError(ConnectionStringError):
    """Raised when a required setting is absent or blank."""


class InvalidConnectionStringError(ConnectionStringError):
    """Raised when a well-formed setting is rejected while building."""


class AmbiguousCredentialsError(InvalidConnectionStringError):
    """Raised when several credential modes are configured and none may win."""


__all__ = [
    "AmbiguousCredentialsError",
    "ConnectionStringError",
    "DuplicateKeyError",
    "InvalidConnectionStringError",
    "MalformedInputError",
    "MissingRequiredFieldError",
]
