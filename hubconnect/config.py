"""Configuration loading helpers."""

from __future__ import annotations

import logging
from pathlib import Path

import tomllib

from pydantic import BaseModel, Field, ValidationError

from .credentials import AuthMode
from .providers import DEFAULT_PRECEDENCE, DefaultTokenProviderFactory, ProviderLoader, TokenProviderPlugin

LOG = logging.getLogger(__name__)

CONFIG_FILE = Path.home() / ".config" / "hubconnect" / "config.toml"


class ConnectionProfileConfig(BaseModel):
    """Named connection string stored in config.toml."""

    name: str
    connection_string: str = Field(repr=False)


class HubConnectConfig(BaseModel):
    """Shape of the configuration file."""

    profiles: list[ConnectionProfileConfig] = Field(default_factory=list)
    active_profile: str | None = None
    credential_precedence: list[AuthMode] = Field(default_factory=lambda: list(DEFAULT_PRECEDENCE))
    strict_credentials: bool = False
    providers: dict[str, bool] = Field(default_factory=dict)

    def provider_filters(self) -> tuple[set[str] | None, set[str]]:
        """Return allow/block lists for provider plugins."""

        allowed = {name for name, flag in self.providers.items() if flag}
        disabled = {name for name, flag in self.providers.items() if not flag}
        allowlist: set[str] | None = allowed or None
        return allowlist, disabled

    def is_provider_enabled(self, name: str) -> bool:
        allowlist, disabled = self.provider_filters()
        if allowlist is not None:
            return name in allowlist
        return name not in disabled

    def provider_loader(
        self,
        builtin_providers: list[TokenProviderPlugin | type[TokenProviderPlugin]] | None = None,
    ) -> ProviderLoader:
        allowlist, disabled = self.provider_filters()
        return ProviderLoader(
            enabled_providers=allowlist,
            disabled_providers=disabled,
            builtin_providers=builtin_providers,
        )

    def provider_factory(self, *, loader: ProviderLoader | None = None) -> DefaultTokenProviderFactory:
        """Build the token provider factory described by this config."""

        return DefaultTokenProviderFactory(
            precedence=self.credential_precedence,
            strict=self.strict_credentials,
            loader=loader if loader is not None else self.provider_loader(),
        )

    def with_active_profile(self, name: str) -> HubConnectConfig:
        """Return a copy with the active profile updated."""

        return self.model_copy(update={"active_profile": name})


def load_config() -> HubConnectConfig:
    """Load configuration from disk; fall back to defaults if missing."""

    try:
        data = _read_config_file()
    except FileNotFoundError:
        return HubConnectConfig()
    except (tomllib.TOMLDecodeError, OSError):
        LOG.warning("Ignoring unreadable config file", extra={"path": str(CONFIG_FILE)})
        return HubConnectConfig()

    try:
        return HubConnectConfig(**data)
    except ValidationError as exc:
        LOG.warning(
            "Ignoring invalid config file",
            extra={"path": str(CONFIG_FILE), "error_count": exc.error_count()},
        )
        return HubConnectConfig()


def _read_config_file() -> dict[str, object]:
    with CONFIG_FILE.open("rb") as handle:
        raw = tomllib.load(handle)
    data: dict[str, object] = {}
    active_profile = raw.get("active_profile")
    if isinstance(active_profile, str):
        data["active_profile"] = active_profile
    strict = raw.get("strict_credentials")
    if isinstance(strict, bool):
        data["strict_credentials"] = strict
    precedence = raw.get("credential_precedence")
    if isinstance(precedence, list):
        modes: list[AuthMode] = []
        for entry in precedence:
            try:
                modes.append(AuthMode(str(entry)))
            except ValueError:
                LOG.warning("Ignoring unknown credential mode", extra={"auth_mode": str(entry)})
        data["credential_precedence"] = modes
    providers = raw.get("providers")
    if isinstance(providers, dict):
        data["providers"] = {str(name): bool(enabled) for name, enabled in providers.items()}
    profiles = raw.get("profiles")
    if isinstance(profiles, list):
        parsed_profiles: list[dict[str, str]] = []
        for profile in profiles:
            if not isinstance(profile, dict):
                continue
            name = profile.get("name")
            connection_string = profile.get("connection_string")
            if isinstance(name, str) and name and isinstance(connection_string, str):
                parsed_profiles.append({"name": name, "connection_string": connection_string})
        data["profiles"] = parsed_profiles
    return data


__all__ = [
    "CONFIG_FILE",
    "ConnectionProfileConfig",
    "HubConnectConfig",
    "load_config",
]
