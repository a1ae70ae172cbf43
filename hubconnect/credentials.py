"""Credential argument tuples extracted from connection settings."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from pydantic import SecretStr

from .secure import SecurePassword
from .settings import (
    OAUTH_DOMAIN,
    OAUTH_PASSWORD,
    OAUTH_USERNAME,
    SHARED_ACCESS_KEY,
    SHARED_ACCESS_KEY_NAME,
    SHARED_SECRET_ISSUER,
    SHARED_SECRET_VALUE,
    WINDOWS_DOMAIN,
    WINDOWS_PASSWORD,
    WINDOWS_USERNAME,
)


class AuthMode(str, Enum):
    """Authentication modes a connection string can configure."""

    SHARED_ACCESS_SIGNATURE = "shared_access_signature"
    SHARED_SECRET = "shared_secret"
    WINDOWS = "windows"
    OAUTH = "oauth"


@dataclass(frozen=True, slots=True)
class SharedSecretCredentials:
    """Issuer name and secret for the legacy shared-secret mode."""

    issuer: str | None
    issuer_key: SecretStr | None

    @property
    def complete(self) -> bool:
        return not self.missing()

    def missing(self) -> tuple[str, ...]:
        return _missing(
            ((SHARED_SECRET_ISSUER, self.issuer), (SHARED_SECRET_VALUE, self.issuer_key))
        )


@dataclass(frozen=True, slots=True)
class SharedAccessSignatureCredentials:
    """Key name and key for the shared-access-signature mode."""

    key_name: str | None
    key: SecretStr | None

    @property
    def complete(self) -> bool:
        return not self.missing()

    def missing(self) -> tuple[str, ...]:
        return _missing(((SHARED_ACCESS_KEY_NAME, self.key_name), (SHARED_ACCESS_KEY, self.key)))


@dataclass(frozen=True, slots=True)
class DomainCredentials:
    """Domain login used by the Windows and OAuth modes; the domain is optional."""

    mode: AuthMode
    domain: str | None
    username: str | None
    password: SecurePassword | None

    @property
    def complete(self) -> bool:
        return not self.missing()

    def missing(self) -> tuple[str, ...]:
        names = _DOMAIN_KEYS[self.mode]
        return _missing(((names[1], self.username), (names[2], self.password)))

    def release(self) -> None:
        """Zero the password buffer."""

        if self.password is not None:
            self.password.clear()


@dataclass(frozen=True, slots=True)
class CredentialArguments:
    """Every credential tuple found in the settings; unset modes are ``None``."""

    shared_secret: SharedSecretCredentials | None = None
    shared_access_signature: SharedAccessSignatureCredentials | None = None
    windows: DomainCredentials | None = None
    oauth: DomainCredentials | None = None

    def for_mode(
        self, mode: AuthMode
    ) -> SharedSecretCredentials | SharedAccessSignatureCredentials | DomainCredentials | None:
        return {
            AuthMode.SHARED_ACCESS_SIGNATURE: self.shared_access_signature,
            AuthMode.SHARED_SECRET: self.shared_secret,
            AuthMode.WINDOWS: self.windows,
            AuthMode.OAUTH: self.oauth,
        }[mode]

    def configured_modes(self) -> tuple[AuthMode, ...]:
        """Modes with at least one field present."""

        return tuple(mode for mode in AuthMode if self.for_mode(mode) is not None)

    def release(self, *, keep: AuthMode | None = None) -> None:
        """Zero every password buffer except the one owned by ``keep``."""

        for credentials in (self.windows, self.oauth):
            if credentials is not None and credentials.mode is not keep:
                credentials.release()


_DOMAIN_KEYS: Mapping[AuthMode, tuple[str, str, str]] = {
    AuthMode.WINDOWS: (WINDOWS_DOMAIN, WINDOWS_USERNAME, WINDOWS_PASSWORD),
    AuthMode.OAUTH: (OAUTH_DOMAIN, OAUTH_USERNAME, OAUTH_PASSWORD),
}


def extract_credentials(settings: Mapping[str, str]) -> CredentialArguments:
    """Lift each credential tuple out of ``settings``.

    Password buffers are freshly allocated on every call and belong to the
    caller from then on.
    """

    shared_secret = None
    issuer = _value(settings, SHARED_SECRET_ISSUER)
    issuer_key = _value(settings, SHARED_SECRET_VALUE)
    if issuer or issuer_key:
        shared_secret = SharedSecretCredentials(issuer=issuer, issuer_key=_secret(issuer_key))

    shared_access_signature = None
    key_name = _value(settings, SHARED_ACCESS_KEY_NAME)
    key = _value(settings, SHARED_ACCESS_KEY)
    if key_name or key:
        shared_access_signature = SharedAccessSignatureCredentials(key_name=key_name, key=_secret(key))

    return CredentialArguments(
        shared_secret=shared_secret,
        shared_access_signature=shared_access_signature,
        windows=_domain_credentials(settings, AuthMode.WINDOWS),
        oauth=_domain_credentials(settings, AuthMode.OAUTH),
    )


def _domain_credentials(settings: Mapping[str, str], mode: AuthMode) -> DomainCredentials | None:
    domain_key, username_key, password_key = _DOMAIN_KEYS[mode]
    domain = _value(settings, domain_key)
    username = _value(settings, username_key)
    password = SecurePassword.from_setting(settings.get(password_key))
    if not (domain or username or password):
        return None
    return DomainCredentials(mode=mode, domain=domain, username=username, password=password)


def _value(settings: Mapping[str, str], key: str) -> str | None:
    value = settings.get(key)
    if value is None or not value.strip():
        return None
    return value


def _secret(value: str | None) -> SecretStr | None:
    return SecretStr(value) if value is not None else None


def _missing(fields: tuple[tuple[str, object], ...]) -> tuple[str, ...]:
    return tuple(name for name, value in fields if value is None)


__all__ = [
    "AuthMode",
    "CredentialArguments",
    "DomainCredentials",
    "SharedAccessSignatureCredentials",
    "SharedSecretCredentials",
    "extract_credentials",
]
