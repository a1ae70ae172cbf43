"""Connection string tokenizer producing whitelisted, immutable settings."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, Mapping

from .errors import ConnectionStringError, DuplicateKeyError, MalformedInputError

LOG = logging.getLogger(__name__)

ENDPOINT = "Endpoint"
SHARED_ACCESS_KEY_NAME = "SharedAccessKeyName"
ENTITY_PATH = "EntityPath"
SHARED_ACCESS_KEY = "SharedAccessKey"
OPERATION_TIMEOUT = "OperationTimeout"
SHARED_SECRET_ISSUER = "SharedSecretIssuer"
SHARED_SECRET_VALUE = "SharedSecretValue"
RUNTIME_PORT = "RuntimePort"
MANAGEMENT_PORT = "ManagementPort"
STS_ENDPOINT = "StsEndpoint"
WINDOWS_DOMAIN = "WindowsDomain"
WINDOWS_USERNAME = "WindowsUsername"
WINDOWS_PASSWORD = "WindowsPassword"
OAUTH_DOMAIN = "OAuthDomain"
OAUTH_USERNAME = "OAuthUsername"
OAUTH_PASSWORD = "OAuthPassword"

KEY_DELIMITER = ";"
KEY_VALUE_SEPARATOR = "="

_NON_BLANK = re.compile(r"\S+")

# Whitelisted setting names and the pattern their values must satisfy.
KEY_PATTERNS: Mapping[str, re.Pattern[str]] = MappingProxyType(
    {
        name: _NON_BLANK
        for name in (
            ENDPOINT,
            SHARED_ACCESS_KEY_NAME,
            ENTITY_PATH,
            SHARED_ACCESS_KEY,
            OPERATION_TIMEOUT,
            SHARED_SECRET_ISSUER,
            SHARED_SECRET_VALUE,
            RUNTIME_PORT,
            MANAGEMENT_PORT,
            STS_ENDPOINT,
            WINDOWS_DOMAIN,
            WINDOWS_USERNAME,
            WINDOWS_PASSWORD,
            OAUTH_DOMAIN,
            OAUTH_USERNAME,
            OAUTH_PASSWORD,
        )
    }
)

SECRET_KEYS = frozenset({SHARED_ACCESS_KEY, SHARED_SECRET_VALUE, WINDOWS_PASSWORD, OAUTH_PASSWORD})

_CANONICAL_KEYS: Mapping[str, str] = MappingProxyType({name.lower(): name for name in KEY_PATTERNS})

_KEY_SPLITTER = re.compile(
    re.escape(KEY_DELIMITER)
    + "("
    + "|".join(re.escape(name) for name in KEY_PATTERNS)
    + ")"
    + re.escape(KEY_VALUE_SEPARATOR),
    re.IGNORECASE,
)

_MASK = "***"
_KEY_NAME = re.compile(r"\w+")


def canonical_key(key: str) -> str | None:
    """Return the whitelisted spelling of ``key`` or ``None`` if unknown."""

    return _CANONICAL_KEYS.get(key.strip().lower())


class ConnectionSettings(Mapping[str, str]):
    """Read-only mapping of whitelisted setting names to their raw values.

    Lookups ignore case; iteration yields canonical names in input order.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, str] | None = None) -> None:
        normalized: dict[str, str] = {}
        for key, value in (values or {}).items():
            name = canonical_key(key)
            if name is None:
                raise MalformedInputError(f"Unrecognized setting '{key}'", key=key)
            if name in normalized:
                raise DuplicateKeyError(f"Setting '{name}' appears more than once", key=name)
            if not KEY_PATTERNS[name].search(value):
                raise MalformedInputError(f"Setting '{name}' has an empty value", key=name)
            normalized[name] = value
        self._values = MappingProxyType(normalized)

    @classmethod
    def from_string(cls, text: str | None) -> ConnectionSettings:
        """Parse ``text``; raise on malformed input."""

        return parse_connection_string(text)

    def __getitem__(self, key: str) -> str:
        name = canonical_key(key)
        if name is None:
            raise KeyError(key)
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        pairs = ", ".join(f"{key}={self._masked(key)!r}" for key in self._values)
        return f"ConnectionSettings({pairs})"

    def redacted(self) -> str:
        """Render the settings as a connection string with secrets masked."""

        return KEY_DELIMITER.join(
            f"{key}{KEY_VALUE_SEPARATOR}{self._masked(key)}" for key in self._values
        )

    def _masked(self, key: str) -> str:
        return _MASK if key in SECRET_KEYS else self._values[key]


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Outcome of parsing: either settings or the error explaining the failure."""

    settings: ConnectionSettings | None = None
    error: ConnectionStringError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> ConnectionSettings:
        """Return the settings or raise the recorded error."""

        if self.error is not None:
            raise self.error
        assert self.settings is not None
        return self.settings


def try_parse_connection_string(text: str | None) -> ParseResult:
    """Parse ``text`` without raising for malformed input."""

    if text is None or not text.strip():
        return ParseResult(settings=ConnectionSettings())

    body = text.strip()
    if body.startswith(KEY_DELIMITER):
        body = body[len(KEY_DELIMITER) :]
    if body.endswith(KEY_DELIMITER):
        body = body[: -len(KEY_DELIMITER)]
    tokens = _KEY_SPLITTER.split(KEY_DELIMITER + body)

    # Tokens look like ["", "Endpoint", "sb://a.b.c", "OperationTimeout", "00:01:00", ...].
    if tokens[0].strip():
        return _failure(_leading_garbage(tokens[0][len(KEY_DELIMITER) :]))
    if len(tokens) % 2 != 1:
        return _failure(MalformedInputError("Connection string has a dangling key or value"))

    values: dict[str, str] = {}
    for index in range(1, len(tokens), 2):
        raw_key, value = tokens[index], tokens[index + 1]
        key = canonical_key(raw_key) if raw_key.strip() else None
        if key is None:
            return _failure(MalformedInputError(f"Unrecognized setting '{raw_key}'", key=raw_key))
        if not KEY_PATTERNS[key].search(value):
            return _failure(MalformedInputError(f"Setting '{key}' has an empty value", key=key))
        if KEY_DELIMITER in value:
            return _failure(
                MalformedInputError(
                    f"Setting '{key}' is followed by an unrecognized setting",
                    key=key,
                )
            )
        if key in values:
            return _failure(DuplicateKeyError(f"Setting '{key}' appears more than once", key=key))
        values[key] = value

    settings = ConnectionSettings(values)
    LOG.debug("Parsed connection string", extra={"settings_keys": tuple(settings)})
    return ParseResult(settings=settings)


def parse_connection_string(text: str | None) -> ConnectionSettings:
    """Parse ``text`` into settings, raising ``ConnectionStringError`` subclasses."""

    return try_parse_connection_string(text).unwrap()


def _leading_garbage(head: str) -> MalformedInputError:
    # Only a key-shaped name followed by a value is quoted back; anything else
    # may be a bare secret.
    name, separator, rest = head.partition(KEY_VALUE_SEPARATOR)
    name = name.strip()
    if separator and rest and not rest.startswith(KEY_VALUE_SEPARATOR) and _KEY_NAME.fullmatch(name):
        return MalformedInputError(f"Unrecognized setting '{name}'", key=name)
    return MalformedInputError("Connection string does not start with a recognized setting")


def _failure(error: ConnectionStringError) -> ParseResult:
    LOG.debug("Rejected connection string", extra={"reason": str(error)})
    return ParseResult(error=error)


__all__ = [
    "ConnectionSettings",
    "ENDPOINT",
    "ENTITY_PATH",
    "KEY_DELIMITER",
    "KEY_PATTERNS",
    "KEY_VALUE_SEPARATOR",
    "MANAGEMENT_PORT",
    "OAUTH_DOMAIN",
    "OAUTH_PASSWORD",
    "OAUTH_USERNAME",
    "OPERATION_TIMEOUT",
    "ParseResult",
    "RUNTIME_PORT",
    "SECRET_KEYS",
    "SHARED_ACCESS_KEY",
    "SHARED_ACCESS_KEY_NAME",
    "SHARED_SECRET_ISSUER",
    "SHARED_SECRET_VALUE",
    "STS_ENDPOINT",
    "WINDOWS_DOMAIN",
    "WINDOWS_PASSWORD",
    "WINDOWS_USERNAME",
    "canonical_key",
    "parse_connection_string",
    "try_parse_connection_string",
]
