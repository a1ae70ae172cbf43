"""Tests for credential tuple extraction."""

from __future__ import annotations

from hubconnect.credentials import AuthMode, extract_credentials
from hubconnect.settings import parse_connection_string


def test_no_credentials_configured() -> None:
    credentials = extract_credentials(parse_connection_string("Endpoint=sb://a/"))

    assert credentials.configured_modes() == ()
    assert credentials.shared_access_signature is None
    assert credentials.windows is None


def test_every_tuple_is_extracted_independently() -> None:
    settings = parse_connection_string(
        "Endpoint=sb://a/;SharedAccessKeyName=Root;SharedAccessKey=key;"
        "SharedSecretIssuer=owner;SharedSecretValue=secret;"
        "WindowsDomain=CORP;WindowsUsername=alice;WindowsPassword=pw1;"
        "OAuthDomain=login;OAuthUsername=bob;OAuthPassword=pw2"
    )

    credentials = extract_credentials(settings)

    assert credentials.configured_modes() == tuple(AuthMode)
    sas = credentials.shared_access_signature
    assert sas is not None and sas.complete
    assert sas.key is not None and sas.key.get_secret_value() == "key"
    shared_secret = credentials.shared_secret
    assert shared_secret is not None and shared_secret.issuer == "owner"
    windows = credentials.windows
    assert windows is not None and windows.domain == "CORP"
    assert windows.password is not None and windows.password.get_secret_value() == "pw1"
    oauth = credentials.oauth
    assert oauth is not None and oauth.mode is AuthMode.OAUTH
    assert oauth.username == "bob"


def test_partial_tuple_reports_missing_fields() -> None:
    credentials = extract_credentials(parse_connection_string("Endpoint=sb://a/;SharedAccessKeyName=Root"))

    sas = credentials.shared_access_signature
    assert sas is not None
    assert not sas.complete
    assert sas.missing() == ("SharedAccessKey",)


def test_domain_is_optional_for_domain_logins() -> None:
    credentials = extract_credentials(
        parse_connection_string("Endpoint=sb://a/;OAuthUsername=bob;OAuthPassword=pw")
    )

    oauth = credentials.oauth
    assert oauth is not None
    assert oauth.domain is None
    assert oauth.complete
    assert oauth.missing() == ()


def test_passwords_are_allocated_per_call() -> None:
    settings = parse_connection_string("Endpoint=sb://a/;WindowsUsername=alice;WindowsPassword=pw")

    first = extract_credentials(settings)
    second = extract_credentials(settings)

    assert first.windows is not None and second.windows is not None
    assert first.windows.password is not second.windows.password


def test_release_keeps_only_the_selected_password() -> None:
    settings = parse_connection_string(
        "Endpoint=sb://a/;WindowsUsername=alice;WindowsPassword=pw1;OAuthUsername=bob;OAuthPassword=pw2"
    )
    credentials = extract_credentials(settings)

    credentials.release(keep=AuthMode.OAUTH)

    assert credentials.windows is not None and credentials.windows.password is not None
    assert credentials.windows.password.cleared
    assert credentials.oauth is not None and credentials.oauth.password is not None
    assert not credentials.oauth.password.cleared


def test_secret_keys_are_masked_in_repr() -> None:
    credentials = extract_credentials(
        parse_connection_string("Endpoint=sb://a/;SharedAccessKeyName=Root;SharedAccessKey=topsecret")
    )

    assert "topsecret" not in repr(credentials)


def test_complete_agrees_with_missing_after_release() -> None:
    credentials = extract_credentials(
        parse_connection_string("Endpoint=sb://a/;WindowsUsername=alice;WindowsPassword=pw")
    )
    windows = credentials.windows
    assert windows is not None

    windows.release()

    assert windows.complete == (windows.missing() == ())
