"""Tests for the default token provider factory."""

from __future__ import annotations

import importlib.metadata as metadata

import pytest

from examples.providers.static_token import StaticSasPlugin, StaticSasProvider
from hubconnect.credentials import AuthMode, DomainCredentials, extract_credentials
from hubconnect.endpoints import parse_endpoint
from hubconnect.errors import AmbiguousCredentialsError, InvalidConnectionStringError
from hubconnect.manager import build_client_configuration
from hubconnect.providers import (
    DEFAULT_PRECEDENCE,
    DefaultTokenProviderFactory,
    ProviderError,
    ProviderLoader,
    TokenProvider,
    TokenProviderFactory,
)
from hubconnect.settings import parse_connection_string

ALL_MODES = (
    "Endpoint=sb://ns.example.net/;"
    "SharedAccessKeyName=Root;SharedAccessKey=key;"
    "SharedSecretIssuer=owner;SharedSecretValue=secret;"
    "WindowsUsername=alice;WindowsPassword=pw1;"
    "OAuthUsername=bob;OAuthPassword=pw2"
)


@pytest.fixture
def builtin_loader(monkeypatch: pytest.MonkeyPatch) -> ProviderLoader:
    monkeypatch.setattr(metadata, "entry_points", lambda: metadata.EntryPoints(()))
    return ProviderLoader(builtin_providers=[StaticSasPlugin])


def _credentials(text: str = ALL_MODES):
    return extract_credentials(parse_connection_string(text))


def test_factory_satisfies_protocol() -> None:
    assert isinstance(DefaultTokenProviderFactory(), TokenProviderFactory)


def test_default_precedence_order() -> None:
    assert DEFAULT_PRECEDENCE == (
        AuthMode.SHARED_ACCESS_SIGNATURE,
        AuthMode.SHARED_SECRET,
        AuthMode.WINDOWS,
        AuthMode.OAUTH,
    )


def test_precedence_picks_highest_configured_mode() -> None:
    factory = DefaultTokenProviderFactory()

    assert factory.select(_credentials()) is AuthMode.SHARED_ACCESS_SIGNATURE
    assert (
        factory.select(_credentials("Endpoint=sb://a/;WindowsUsername=a;WindowsPassword=p;OAuthUsername=b;OAuthPassword=q"))
        is AuthMode.WINDOWS
    )


def test_custom_precedence_is_honoured() -> None:
    factory = DefaultTokenProviderFactory(precedence=["oauth", AuthMode.WINDOWS])

    assert factory.precedence[:2] == (AuthMode.OAUTH, AuthMode.WINDOWS)
    assert set(factory.precedence) == set(AuthMode)
    assert factory.select(_credentials()) is AuthMode.OAUTH


def test_duplicate_precedence_is_rejected() -> None:
    with pytest.raises(ValueError):
        DefaultTokenProviderFactory(precedence=[AuthMode.OAUTH, AuthMode.OAUTH])


def test_strict_mode_rejects_several_modes() -> None:
    factory = DefaultTokenProviderFactory(strict=True)
    credentials = _credentials()

    with pytest.raises(AmbiguousCredentialsError):
        factory.create((), credentials)

    assert credentials.windows is not None and credentials.windows.password is not None
    assert credentials.windows.password.cleared


def test_strict_mode_accepts_single_mode() -> None:
    factory = DefaultTokenProviderFactory(strict=True)

    provider = factory.create((), _credentials("Endpoint=sb://a/;SharedSecretIssuer=owner;SharedSecretValue=secret"))

    assert isinstance(provider, TokenProvider)
    assert provider.mode is AuthMode.SHARED_SECRET


def test_incomplete_tuple_is_rejected_even_when_another_mode_wins() -> None:
    factory = DefaultTokenProviderFactory()

    with pytest.raises(ValueError) as excinfo:
        factory.select(_credentials("Endpoint=sb://a/;SharedAccessKeyName=Root;SharedAccessKey=k;OAuthDomain=login"))

    assert "OAuthUsername" in str(excinfo.value)


def test_create_builds_descriptor_and_clears_unselected_passwords() -> None:
    factory = DefaultTokenProviderFactory(precedence=[AuthMode.WINDOWS])
    credentials = _credentials()
    sts = [parse_endpoint("https://sts.example.net/")]

    provider = factory.create(sts, credentials)

    assert isinstance(provider, TokenProvider)
    assert provider.mode is AuthMode.WINDOWS
    assert provider.sts_endpoints == tuple(sts)
    assert provider.credentials is credentials.windows
    assert credentials.windows is not None and credentials.windows.password is not None
    assert credentials.windows.password.get_secret_value() == "pw1"
    assert credentials.oauth is not None and credentials.oauth.password is not None
    assert credentials.oauth.password.cleared


def test_create_returns_none_without_credentials() -> None:
    assert DefaultTokenProviderFactory().create((), _credentials("Endpoint=sb://a/")) is None


def test_create_delegates_to_plugin(builtin_loader: ProviderLoader) -> None:
    factory = DefaultTokenProviderFactory(loader=builtin_loader)

    provider = factory.create((), _credentials())

    assert isinstance(provider, StaticSasProvider)
    assert provider.key_name == "Root"


def test_plugin_is_only_used_for_its_mode(builtin_loader: ProviderLoader) -> None:
    factory = DefaultTokenProviderFactory(loader=builtin_loader)

    provider = factory.create((), _credentials("Endpoint=sb://a/;OAuthUsername=bob;OAuthPassword=pw"))

    assert isinstance(provider, TokenProvider)
    assert provider.mode is AuthMode.OAUTH


def test_plugin_value_error_becomes_invalid_connection_string(builtin_loader: ProviderLoader) -> None:
    factory = DefaultTokenProviderFactory(loader=builtin_loader)
    settings = parse_connection_string("Endpoint=sb://a/;SharedAccessKeyName=rejected;SharedAccessKey=k")

    with pytest.raises(InvalidConnectionStringError) as excinfo:
        build_client_configuration(settings, provider_factory=factory)

    assert "rejected" in str(excinfo.value)


def test_plugin_crash_surfaces_as_provider_error(builtin_loader: ProviderLoader) -> None:
    factory = DefaultTokenProviderFactory(loader=builtin_loader)

    with pytest.raises(ProviderError):
        factory.create((), _credentials("Endpoint=sb://a/;SharedAccessKeyName=explode;SharedAccessKey=k"))


def test_selected_mode_is_logged_without_values(caplog: pytest.LogCaptureFixture) -> None:
    factory = DefaultTokenProviderFactory()

    with caplog.at_level("DEBUG", logger="hubconnect.providers.factory"):
        factory.create((), _credentials())

    assert any(getattr(record, "auth_mode", None) == "shared_access_signature" for record in caplog.records)
    assert all("key" not in record.getMessage().lower() for record in caplog.records)


class _FailingWindowsPlugin:
    name = "failing-windows"
    version = "0.0.1"
    min_core = "0.1.0"
    mode = AuthMode.WINDOWS

    def __init__(self, error: Exception) -> None:
        self.error = error
        self.seen: DomainCredentials | None = None

    def create(self, sts_endpoints, credentials: DomainCredentials):
        self.seen = credentials
        raise self.error


@pytest.mark.parametrize(
    ("error", "expected"),
    [(RuntimeError("boom"), ProviderError), (ValueError("bad login"), ValueError)],
)
def test_plugin_failure_clears_selected_password(
    monkeypatch: pytest.MonkeyPatch, error: Exception, expected: type[Exception]
) -> None:
    monkeypatch.setattr(metadata, "entry_points", lambda: metadata.EntryPoints(()))
    plugin = _FailingWindowsPlugin(error)
    factory = DefaultTokenProviderFactory(loader=ProviderLoader(builtin_providers=[plugin]))

    with pytest.raises(expected):
        factory.create((), _credentials("Endpoint=sb://a/;WindowsUsername=alice;WindowsPassword=pw"))

    assert plugin.seen is not None and plugin.seen.password is not None
    assert plugin.seen.password.cleared
