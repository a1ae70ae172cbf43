"""Manager builder turning parsed settings into a client configuration."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping

from .credentials import CredentialArguments, extract_credentials
from .endpoints import EndpointUri, get_endpoint_addresses
from .errors import ConnectionStringError, InvalidConnectionStringError, MissingRequiredFieldError
from .models import ClientConfiguration
from .providers import DefaultTokenProviderFactory, TokenProviderFactory
from .secure import SecurePassword
from .settings import (
    ENDPOINT,
    MANAGEMENT_PORT,
    OAUTH_PASSWORD,
    OPERATION_TIMEOUT,
    RUNTIME_PORT,
    STS_ENDPOINT,
    WINDOWS_PASSWORD,
    ConnectionSettings,
    parse_connection_string,
)

LOG = logging.getLogger(__name__)

CONNECTION_STRING_SETTING = "hubconnect.ConnectionString"


@dataclass(frozen=True, slots=True)
class BuildResult:
    """Outcome of a build: either a configuration or the error explaining the failure."""

    configuration: ClientConfiguration | None = None
    error: ConnectionStringError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> ClientConfiguration:
        """Return the configuration or raise the recorded error."""

        if self.error is not None:
            raise self.error
        assert self.configuration is not None
        return self.configuration


def try_build_client_configuration(
    settings: Mapping[str, str],
    *,
    provider_factory: TokenProviderFactory | None = None,
) -> BuildResult:
    """Build a client configuration without raising for rejected settings."""

    missing = _check_required(settings)
    if missing is not None:
        return BuildResult(error=missing)

    factory = provider_factory or DefaultTokenProviderFactory()
    operation_timeout = _optional(settings, OPERATION_TIMEOUT)
    credentials: CredentialArguments | None = None
    try:
        endpoints = get_endpoint_addresses(settings.get(ENDPOINT), settings.get(MANAGEMENT_PORT))
        sts_endpoints = get_endpoint_addresses(settings.get(STS_ENDPOINT))
        credentials = extract_credentials(settings)
        provider = factory.create(sts_endpoints, credentials)
    except ConnectionStringError as exc:
        _release(credentials)
        return BuildResult(error=exc)
    except ValueError as exc:
        _release(credentials)
        error = InvalidConnectionStringError(f"Unable to create a manager from the connection string: {exc}")
        error.__cause__ = exc
        return BuildResult(error=error)
    except Exception:
        _release(credentials)
        raise

    LOG.debug(
        "Built client configuration",
        extra={
            "endpoint_count": len(endpoints),
            "sts_endpoint_count": len(sts_endpoints),
            "has_operation_timeout": operation_timeout is not None,
        },
    )
    return BuildResult(
        configuration=ClientConfiguration(
            endpoints=tuple(endpoints),
            sts_endpoints=tuple(sts_endpoints),
            provider=provider,
            operation_timeout=operation_timeout,
        )
    )


def build_client_configuration(
    settings: Mapping[str, str],
    *,
    provider_factory: TokenProviderFactory | None = None,
) -> ClientConfiguration:
    """Build a client configuration, raising ``ConnectionStringError`` subclasses."""

    return try_build_client_configuration(settings, provider_factory=provider_factory).unwrap()


class ConnectionStringManager:
    """Parsed connection string plus the queries needed to build a client."""

    def __init__(
        self,
        connection_string: str | ConnectionSettings | None,
        *,
        provider_factory: TokenProviderFactory | None = None,
    ) -> None:
        if isinstance(connection_string, ConnectionSettings):
            self._settings = connection_string
        else:
            self._settings = parse_connection_string(connection_string)
        self._provider_factory = provider_factory

    @property
    def settings(self) -> ConnectionSettings:
        return self._settings

    def __getitem__(self, key: str) -> str | None:
        return self._settings.get(key)

    def validate(self) -> None:
        """Raise when a required setting is missing."""

        missing = _check_required(self._settings)
        if missing is not None:
            raise missing

    def endpoints(self) -> list[EndpointUri]:
        """Endpoint addresses with the management port applied."""

        return get_endpoint_addresses(self._settings.get(ENDPOINT), self._settings.get(MANAGEMENT_PORT))

    def runtime_endpoints(self) -> list[EndpointUri]:
        """Endpoint addresses with the runtime port applied."""

        return get_endpoint_addresses(self._settings.get(ENDPOINT), self._settings.get(RUNTIME_PORT))

    def sts_endpoints(self) -> list[EndpointUri]:
        return get_endpoint_addresses(self._settings.get(STS_ENDPOINT))

    def windows_password(self) -> SecurePassword | None:
        return SecurePassword.from_setting(self._settings.get(WINDOWS_PASSWORD))

    def oauth_password(self) -> SecurePassword | None:
        return SecurePassword.from_setting(self._settings.get(OAUTH_PASSWORD))

    def credentials(self) -> CredentialArguments:
        return extract_credentials(self._settings)

    def try_build(self) -> BuildResult:
        return try_build_client_configuration(self._settings, provider_factory=self._provider_factory)

    def build(self) -> ClientConfiguration:
        """Validate the settings and assemble the client configuration."""

        return self.try_build().unwrap()

    def __repr__(self) -> str:
        return f"ConnectionStringManager({self._settings.redacted()!r})"


def _check_required(settings: Mapping[str, str]) -> MissingRequiredFieldError | None:
    if _optional(settings, ENDPOINT) is None:
        return MissingRequiredFieldError(
            f"Required setting '{ENDPOINT}' is missing from '{CONNECTION_STRING_SETTING}'",
            key=ENDPOINT,
        )
    return None


def _release(credentials: CredentialArguments | None) -> None:
    if credentials is not None:
        credentials.release()


def _optional(settings: Mapping[str, str], key: str) -> str | None:
    value = settings.get(key)
    if value is None or not value.strip():
        return None
    return value


__all__ = [
    "BuildResult",
    "CONNECTION_STRING_SETTING",
    "ConnectionStringManager",
    "build_client_configuration",
    "try_build_client_configuration",
]
