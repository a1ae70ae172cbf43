"""Token provider contract shared between the factory, loader and plugins."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, Sequence, Union, runtime_checkable

from hubconnect.credentials import (
    AuthMode,
    CredentialArguments,
    DomainCredentials,
    SharedAccessSignatureCredentials,
    SharedSecretCredentials,
)
from hubconnect.endpoints import EndpointUri

SelectedCredentials = Union[SharedSecretCredentials, SharedAccessSignatureCredentials, DomainCredentials]


@dataclass(frozen=True, slots=True)
class TokenProvider:
    """Provider selected for one credential mode.

    Token acquisition is left to the network client; this records which mode
    was chosen and the arguments it was built with.
    """

    mode: AuthMode
    sts_endpoints: tuple[EndpointUri, ...]
    credentials: SelectedCredentials


@runtime_checkable
class TokenProviderFactory(Protocol):
    """Builds the credential provider for a set of credential tuples."""

    def create(
        self,
        sts_endpoints: Sequence[EndpointUri],
        credentials: CredentialArguments,
    ) -> Any | None:
        """Return a provider, ``None`` when nothing is configured, or raise ``ValueError``."""


class TokenProviderPlugin(Protocol):
    """Contract implemented by third-party token providers."""

    name: str
    version: str
    min_core: str
    mode: AuthMode

    def create(self, sts_endpoints: Sequence[EndpointUri], credentials: SelectedCredentials) -> Any: ...


class ProviderError(RuntimeError):
    """Base error for provider plugin failures."""


class ProviderCompatibilityError(ProviderError):
    """Raised when a plugin does not satisfy the minimum core version."""
