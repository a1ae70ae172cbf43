"""Sample token provider plugin for manual and automated tests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from hubconnect.credentials import AuthMode, SharedAccessSignatureCredentials
from hubconnect.endpoints import EndpointUri


@dataclass(frozen=True)
class StaticSasProvider:
    """Provider returned by the sample plugin."""

    key_name: str
    sts_endpoints: tuple[EndpointUri, ...]


class StaticSasPlugin:
    """Minimal plugin used to validate the loader pipeline."""

    name = "static-sas"
    version = "0.0.1"
    min_core = "0.1.0"
    mode = AuthMode.SHARED_ACCESS_SIGNATURE

    def __init__(self) -> None:
        self.created = 0

    def create(
        self,
        sts_endpoints: Sequence[EndpointUri],
        credentials: SharedAccessSignatureCredentials,
    ) -> StaticSasProvider:
        self.created += 1
        if credentials.key_name == "rejected":
            raise ValueError("Key name 'rejected' is not accepted")
        if credentials.key_name == "explode":
            raise RuntimeError("backend unavailable")
        assert credentials.key_name is not None
        return StaticSasProvider(key_name=credentials.key_name, sts_endpoints=tuple(sts_endpoints))
