"""Endpoint URI construction with optional port overrides."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from urllib.parse import urlsplit, urlunsplit

LOG = logging.getLogger(__name__)

VALUE_SEPARATOR = ","
DEFAULT_SCHEME = "http"
MAX_PORT = 65535

_PORT_PATTERN = re.compile(r"\s*[+-]?\d+\s*")


@dataclass(frozen=True, slots=True)
class EndpointUri:
    """Well-formed absolute URI of a service endpoint."""

    scheme: str
    host: str
    port: int | None = None
    path: str = ""
    query: str = ""
    fragment: str = ""

    @property
    def netloc(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        if self.port is None:
            return host
        return f"{host}:{self.port}"

    def with_port(self, port: int) -> EndpointUri:
        """Return a copy listening on ``port``."""

        if not 0 < port <= MAX_PORT:
            raise ValueError(f"Port {port} is outside the range 1-{MAX_PORT}")
        return replace(self, port=port)

    def __str__(self) -> str:
        return urlunsplit((self.scheme, self.netloc, self.path, self.query, self.fragment))


def parse_endpoint(text: str) -> EndpointUri:
    """Build an :class:`EndpointUri` from ``text``.

    Text without a scheme is treated as an ``http`` address.
    """

    candidate = text.strip()
    if "://" not in candidate:
        candidate = f"{DEFAULT_SCHEME}://{candidate}"
    parts = urlsplit(candidate)
    if not parts.hostname:
        raise ValueError(f"Invalid URI '{text.strip()}': the hostname could not be parsed")
    if parts.username is not None or parts.password is not None:
        raise ValueError("Invalid URI: endpoints must not embed user credentials")
    try:
        port = parts.port
    except ValueError as exc:
        raise ValueError(f"Invalid URI '{parts.hostname}': {exc}") from exc
    return EndpointUri(
        scheme=parts.scheme.lower(),
        host=parts.hostname,
        port=port,
        path=parts.path,
        query=parts.query,
        fragment=parts.fragment,
    )


def parse_port_override(value: str | None) -> int | None:
    """Return a positive port number or ``None`` when no override applies."""

    if value is None or not _PORT_PATTERN.fullmatch(value):
        return None
    port = int(value)
    return port if port > 0 else None


def get_endpoint_addresses(uri_endpoints: str | None, port: str | None = None) -> list[EndpointUri]:
    """Split a comma-separated endpoint list and apply the port override."""

    addresses: list[EndpointUri] = []
    if uri_endpoints is None or not uri_endpoints.strip():
        return addresses

    override = parse_port_override(port)
    if port is not None and override is None:
        LOG.debug("Ignoring port override", extra={"port_override": port})

    for entry in uri_endpoints.split(VALUE_SEPARATOR):
        if not entry.strip():
            continue
        address = parse_endpoint(entry)
        if override is not None:
            address = address.with_port(override)
        addresses.append(address)
    return addresses


__all__ = [
    "DEFAULT_SCHEME",
    "EndpointUri",
    "MAX_PORT",
    "VALUE_SEPARATOR",
    "get_endpoint_addresses",
    "parse_endpoint",
    "parse_port_override",
]
