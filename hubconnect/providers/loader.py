"""Entry point discovery for token provider plugins."""

from __future__ import annotations

import importlib.metadata as metadata
import inspect
import logging
from dataclasses import dataclass
from typing import Iterable, Mapping

from hubconnect import __version__ as CORE_VERSION
from hubconnect.credentials import AuthMode

from .types import ProviderCompatibilityError, TokenProviderPlugin

LOG = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "hubconnect.token_providers"


def _version_key(value: str) -> tuple[int, ...]:
    """Comparable key for a dotted version; non-numeric parts count as zero."""

    parts = [int(chunk) if chunk.isdigit() else 0 for chunk in value.split(".")[:3]]
    return tuple(parts + [0] * (3 - len(parts)))


@dataclass(slots=True, frozen=True)
class DiscoveredProvider:
    """A provider plugin together with the credential mode it serves."""

    name: str
    version: str
    min_core: str
    mode: AuthMode
    plugin: TokenProviderPlugin


class ProviderLoader:
    """Resolves at most one token provider plugin per credential mode.

    Installed distributions contribute plugins through the
    ``hubconnect.token_providers`` entry point group; built-in plugins fill in
    names no installed plugin claims.
    """

    def __init__(
        self,
        *,
        core_version: str = CORE_VERSION,
        entry_point_group: str = ENTRY_POINT_GROUP,
        enabled_providers: Iterable[str] | None = None,
        disabled_providers: Iterable[str] = (),
        builtin_providers: Iterable[TokenProviderPlugin | type[TokenProviderPlugin]] | None = None,
    ) -> None:
        self._core_version = core_version
        self._group = entry_point_group
        self._allow = None if enabled_providers is None else frozenset(enabled_providers)
        self._deny = frozenset(disabled_providers)
        self._builtins = tuple(builtin_providers or ())
        self._providers: list[DiscoveredProvider] | None = None
        self._by_mode: dict[AuthMode, DiscoveredProvider] | None = None

    def discover(self) -> list[DiscoveredProvider]:
        """Load every installed and built-in plugin, installed ones first by name."""

        by_name: dict[str, DiscoveredProvider] = {}
        installed = metadata.entry_points().select(group=self._group)
        for entry_point in sorted(installed, key=lambda ep: ep.name):
            provider = self._describe(_instantiate(entry_point.load()))
            by_name[provider.name] = provider
        for candidate in self._builtins:
            provider = self._describe(_instantiate(candidate))
            by_name.setdefault(provider.name, provider)
        self._providers = list(by_name.values())
        self._by_mode = None
        return self._providers

    def providers_by_mode(self) -> Mapping[AuthMode, DiscoveredProvider]:
        """Return the first enabled, compatible plugin registered for each mode."""

        if self._by_mode is not None:
            return self._by_mode
        providers = self._providers if self._providers is not None else self.discover()

        by_mode: dict[AuthMode, DiscoveredProvider] = {}
        for provider in providers:
            if not self._is_enabled(provider.name):
                LOG.debug("Provider disabled by configuration", extra={"provider": provider.name})
                continue
            try:
                self._check_core_version(provider)
            except ProviderCompatibilityError as exc:
                LOG.warning(
                    "Provider needs a newer hubconnect: %s",
                    exc,
                    extra={"provider": provider.name, "min_core": provider.min_core},
                )
                continue
            claimed = by_mode.get(provider.mode)
            if claimed is not None:
                LOG.warning(
                    "Provider ignored, mode %s already served by %s",
                    provider.mode.value,
                    claimed.name,
                    extra={"provider": provider.name},
                )
                continue
            by_mode[provider.mode] = provider
        self._by_mode = by_mode
        return by_mode

    def _is_enabled(self, name: str) -> bool:
        if self._allow is not None:
            return name in self._allow
        return name not in self._deny

    def _check_core_version(self, provider: DiscoveredProvider) -> None:
        if _version_key(self._core_version) < _version_key(provider.min_core):
            raise ProviderCompatibilityError(
                f"Provider '{provider.name}' requires core>={provider.min_core}, found {self._core_version}"
            )

    @staticmethod
    def _describe(plugin: TokenProviderPlugin) -> DiscoveredProvider:
        return DiscoveredProvider(
            name=plugin.name,
            version=plugin.version,
            min_core=getattr(plugin, "min_core", "0.0.0"),
            mode=AuthMode(plugin.mode),
            plugin=plugin,
        )


def _instantiate(obj: object) -> TokenProviderPlugin:
    # Entry points may name either a plugin class or a ready instance.
    if inspect.isclass(obj):
        return obj()  # type: ignore[return-value]
    return obj  # type: ignore[return-value]


__all__ = ["DiscoveredProvider", "ENTRY_POINT_GROUP", "ProviderLoader"]
