"""Default credential provider factory and its precedence policy."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Sequence

from hubconnect.credentials import AuthMode, CredentialArguments
from hubconnect.endpoints import EndpointUri
from hubconnect.errors import AmbiguousCredentialsError

from .loader import DiscoveredProvider, ProviderLoader
from .types import ProviderError, TokenProvider

LOG = logging.getLogger(__name__)

DEFAULT_PRECEDENCE: tuple[AuthMode, ...] = (
    AuthMode.SHARED_ACCESS_SIGNATURE,
    AuthMode.SHARED_SECRET,
    AuthMode.WINDOWS,
    AuthMode.OAUTH,
)


class DefaultTokenProviderFactory:
    """Selects one credential mode by precedence and constructs its provider.

    Every configured tuple must be complete. In strict mode more than one
    configured tuple is an error instead of being resolved by precedence.
    """

    def __init__(
        self,
        *,
        precedence: Iterable[AuthMode | str] = DEFAULT_PRECEDENCE,
        strict: bool = False,
        loader: ProviderLoader | None = None,
    ) -> None:
        order = tuple(AuthMode(mode) for mode in precedence)
        if len(set(order)) != len(order):
            raise ValueError("Credential precedence lists a mode more than once")
        # Modes left out of the list still rank, after the listed ones.
        self._precedence = order + tuple(mode for mode in DEFAULT_PRECEDENCE if mode not in order)
        self._strict = strict
        self._loader = loader

    @property
    def precedence(self) -> tuple[AuthMode, ...]:
        return self._precedence

    @property
    def strict(self) -> bool:
        return self._strict

    def create(self, sts_endpoints: Sequence[EndpointUri], credentials: CredentialArguments) -> Any | None:
        """Return the provider for the winning mode, or ``None`` if none is configured."""

        try:
            mode = self.select(credentials)
        except ValueError:
            credentials.release()
            raise
        credentials.release(keep=mode)
        if mode is None:
            LOG.debug("No credential mode configured")
            return None

        selected = credentials.for_mode(mode)
        assert selected is not None
        LOG.debug("Selected credential mode", extra={"auth_mode": mode.value})
        plugin = self._plugin_for(mode)
        if plugin is None:
            return TokenProvider(mode=mode, sts_endpoints=tuple(sts_endpoints), credentials=selected)
        # Until the plugin returns, nothing owns the selected password.
        try:
            return plugin.plugin.create(tuple(sts_endpoints), selected)
        except ValueError:
            credentials.release()
            raise
        except Exception as exc:
            credentials.release()
            LOG.exception("Token provider construction failed", extra={"provider": plugin.name})
            raise ProviderError(f"Provider '{plugin.name}' failed to construct a token provider") from exc

    def select(self, credentials: CredentialArguments) -> AuthMode | None:
        """Apply the precedence policy without constructing anything."""

        configured = credentials.configured_modes()
        for mode in configured:
            selected = credentials.for_mode(mode)
            assert selected is not None
            missing = selected.missing()
            if missing:
                raise ValueError(
                    f"Credential mode '{mode.value}' is incomplete: missing {', '.join(missing)}"
                )
        if not configured:
            return None
        if self._strict and len(configured) > 1:
            names = ", ".join(mode.value for mode in configured)
            raise AmbiguousCredentialsError(f"More than one credential mode is configured: {names}")
        return next(mode for mode in self._precedence if mode in configured)

    def _plugin_for(self, mode: AuthMode) -> DiscoveredProvider | None:
        if self._loader is None:
            return None
        return self._loader.providers_by_mode().get(mode)


__all__ = ["DEFAULT_PRECEDENCE", "DefaultTokenProviderFactory"]
