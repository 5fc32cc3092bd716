from spamtrace.infrastructure.geo.ip_api import IpApiGeoResolver, ip_api_resolver_factory
from spamtrace.infrastructure.geo.pacing import MinIntervalPacer

__all__ = ["IpApiGeoResolver", "MinIntervalPacer", "ip_api_resolver_factory"]
