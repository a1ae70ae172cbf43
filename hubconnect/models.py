"""Shared dataclasses produced by the manager builder."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .endpoints import EndpointUri


@dataclass(frozen=True, slots=True)
class ClientConfiguration:
    """Everything a network client needs to reach and authenticate to the service."""

    endpoints: tuple[EndpointUri, ...]
    sts_endpoints: tuple[EndpointUri, ...] = ()
    provider: Any | None = None
    operation_timeout: str | None = None


__all__ = ["ClientConfiguration"]
