"""Port for address-to-location lookups used during one scan."""

from __future__ import annotations
from typing import Protocol

from spamtrace.domain.entities.geo_info import GeoInfo


class GeoResolver(Protocol):
    def resolve(self, address: str) -> GeoInfo: ...

    def close(self) -> None: ...
