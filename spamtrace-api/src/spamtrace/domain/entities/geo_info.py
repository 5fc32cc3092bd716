from __future__ import annotations
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Mapping, Optional


class GeoOutcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class GeoInfo:
    """
    Network/geographic metadata for a single IPv4 address.
    Only `outcome` (and `failure_reason` on failure) is guaranteed.
    """
    outcome: GeoOutcome
    country: Optional[str] = None
    country_code: Optional[str] = None
    region: Optional[str] = None
    region_name: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    isp: Optional[str] = None
    org: Optional[str] = None
    autonomous_system: Optional[str] = None
    query: Optional[str] = None
    failure_reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome is GeoOutcome.SUCCESS

    @classmethod
    def failure(cls, reason: str, query: Optional[str] = None) -> GeoInfo:
        return cls(
            outcome=GeoOutcome.FAILURE,
            query=query,
            failure_reason=reason or "Lookup failed",
        )

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> GeoInfo:
        """Map an ip-api.com JSON object (status/message/countryCode/zip/lat/lon/as...)."""
        if payload.get("status") != "success":
            return cls.failure(str(payload.get("message") or "Lookup failed"), payload.get("query"))

        return cls(
            outcome=GeoOutcome.SUCCESS,
            country=payload.get("country") or None,
            country_code=payload.get("countryCode") or None,
            region=payload.get("region") or None,
            region_name=payload.get("regionName") or None,
            city=payload.get("city") or None,
            postal_code=payload.get("zip") or None,
            latitude=payload.get("lat"),
            longitude=payload.get("lon"),
            isp=payload.get("isp") or None,
            org=payload.get("org") or None,
            autonomous_system=payload.get("as") or None,
            query=payload.get("query") or None,
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["outcome"] = self.outcome.value
        return data
