"""Connection string parsing and client configuration building."""

__version__ = "0.1.0"

from .credentials import AuthMode, CredentialArguments, extract_credentials
from .endpoints import EndpointUri, get_endpoint_addresses, parse_endpoint
from .errors import (
    AmbiguousCredentialsError,
    ConnectionStringError,
    DuplicateKeyError,
    InvalidConnectionStringError,
    MalformedInputError,
    MissingRequiredFieldError,
)
from .manager import (
    BuildResult,
    ConnectionStringManager,
    build_client_configuration,
    try_build_client_configuration,
)
from .models import ClientConfiguration
from .secure import SecurePassword
from .settings import (
    ConnectionSettings,
    ParseResult,
    parse_connection_string,
    try_parse_connection_string,
)

__all__ = [
    "AmbiguousCredentialsError",
    "AuthMode",
    "BuildResult",
    "ClientConfiguration",
    "ConnectionSettings",
    "ConnectionStringError",
    "ConnectionStringManager",
    "CredentialArguments",
    "DuplicateKeyError",
    "EndpointUri",
    "InvalidConnectionStringError",
    "MalformedInputError",
    "MissingRequiredFieldError",
    "ParseResult",
    "SecurePassword",
    "build_client_configuration",
    "extract_credentials",
    "get_endpoint_addresses",
    "parse_connection_string",
    "parse_endpoint",
    "try_build_client_configuration",
    "try_parse_connection_string",
]
