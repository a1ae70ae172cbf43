"""Named connection profiles resolved into client configurations."""

from __future__ import annotations

from .config import ConnectionProfileConfig, HubConnectConfig
from .manager import ConnectionStringManager
from .models import ClientConfiguration
from .providers import TokenProviderFactory
from .settings import ConnectionSettings, parse_connection_string


class ProfileCatalog:
    """Looks up configured profiles and builds their client configurations."""

    def __init__(
        self,
        config: HubConnectConfig,
        *,
        provider_factory: TokenProviderFactory | None = None,
    ) -> None:
        self._config = config
        self._profiles = tuple(config.profiles)
        self._provider_factory = provider_factory or config.provider_factory()

    @property
    def profiles(self) -> tuple[ConnectionProfileConfig, ...]:
        """Profiles available in the current config."""

        return self._profiles

    @property
    def active_profile_name(self) -> str | None:
        """Configured active profile, falling back to the first one."""

        if self._config.active_profile:
            return self._config.active_profile
        if self._profiles:
            return self._profiles[0].name
        return None

    def settings_for(self, name: str) -> ConnectionSettings:
        return parse_connection_string(self._profile_by_name(name).connection_string)

    def manager_for(self, name: str | None = None) -> ConnectionStringManager:
        return ConnectionStringManager(
            self.settings_for(self._resolve(name)),
            provider_factory=self._provider_factory,
        )

    def build(self, name: str | None = None) -> ClientConfiguration:
        """Build the named profile, or the active one when ``name`` is omitted."""

        return self.manager_for(name).build()

    def _resolve(self, name: str | None) -> str:
        resolved = name or self.active_profile_name
        if resolved is None:
            raise KeyError("No connection profiles are configured")
        return resolved

    def _profile_by_name(self, name: str) -> ConnectionProfileConfig:
        for profile in self._profiles:
            if profile.name == name:
                return profile
        raise KeyError(f"Unknown profile '{name}'")


__all__ = ["ProfileCatalog"]
