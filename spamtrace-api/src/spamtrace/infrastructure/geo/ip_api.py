"""ip-api.com geolocation lookups, paced and cached for the length of one scan."""

from __future__ import annotations

from typing import Callable, Optional

import httpx
from loguru import logger

from spamtrace.domain.entities.geo_info import GeoInfo
from spamtrace.infrastructure.geo.pacing import MinIntervalPacer
from spamtrace.infrastructure.settings import Settings

IP_API_BASE_URL = "http://ip-api.com/json"
IP_API_FIELDS = "status,message,country,countryCode,region,regionName,city,zip,lat,lon,isp,org,as,query"


class IpApiGeoResolver:
    """Resolve IPv4 addresses through ip-api.com.

    One instance per scan run: the cache and the pacing clock live exactly as
    long as the instance. Cache hits skip both the network and the pacer.
    Failures (reported by the service or raised by the transport) are cached
    like successes, so an address is never looked up twice in one run.
    """

    def __init__(
        self,
        base_url: str = IP_API_BASE_URL,
        min_interval_seconds: float = 1.5,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
        pacer: Optional[MinIntervalPacer] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(timeout=timeout)
        self._owns_client = client is None
        self._pacer = pacer or MinIntervalPacer(min_interval_seconds)
        self._cache: dict[str, GeoInfo] = {}
        self.lookups = 0

    def resolve(self, address: str) -> GeoInfo:
        cached = self._cache.get(address)
        if cached is not None:
            logger.debug(f"Geo cache hit for {address}")
            return cached

        self._pacer.wait()
        info = self._lookup(address)
        self._cache[address] = info
        return info

    def _lookup(self, address: str) -> GeoInfo:
        self.lookups += 1
        try:
            response = self._client.get(f"{self.base_url}/{address}", params={"fields": IP_API_FIELDS})
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException:
            logger.error(f"ip-api timeout looking up {address}")
            return GeoInfo.failure("Request timeout", query=address)
        except httpx.HTTPStatusError as e:
            logger.error(f"ip-api error {e.response.status_code} for {address}")
            return GeoInfo.failure(f"HTTP {e.response.status_code}", query=address)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"ip-api lookup failed for {address}: {e}")
            return GeoInfo.failure(str(e) or type(e).__name__, query=address)

        if not isinstance(payload, dict):
            logger.error(f"ip-api returned a non-object payload for {address}")
            return GeoInfo.failure("Malformed response", query=address)

        info = GeoInfo.from_payload(payload)
        if not info.ok:
            logger.info(f"ip-api could not resolve {address}: {info.failure_reason}")
        return info

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


def ip_api_resolver_factory(settings: Settings) -> Callable[[], IpApiGeoResolver]:
    """Fresh resolver per call, configured from settings."""

    def build() -> IpApiGeoResolver:
        return IpApiGeoResolver(
            base_url=settings.geo_api_base_url,
            min_interval_seconds=settings.geo_min_interval_seconds,
            timeout=settings.geo_timeout_seconds,
        )

    return build
