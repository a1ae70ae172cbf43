"""Credential provider selection and plugin discovery."""

from .factory import DEFAULT_PRECEDENCE, DefaultTokenProviderFactory
from .loader import ENTRY_POINT_GROUP, DiscoveredProvider, ProviderLoader
from .types import (
    ProviderCompatibilityError,
    ProviderError,
    SelectedCredentials,
    TokenProvider,
    TokenProviderFactory,
    TokenProviderPlugin,
)

__all__ = [
    "DEFAULT_PRECEDENCE",
    "DefaultTokenProviderFactory",
    "DiscoveredProvider",
    "ENTRY_POINT_GROUP",
    "ProviderCompatibilityError",
    "ProviderError",
    "ProviderLoader",
    "SelectedCredentials",
    "TokenProvider",
    "TokenProviderFactory",
    "TokenProviderPlugin",
]
