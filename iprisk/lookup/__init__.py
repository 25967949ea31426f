"""Geolocation lookup layer: providers, caching, rate limiting and reverse DNS."""

from .accuracy import calculate_accuracy
from .cache import LookupCache
from .maxmind_client import MaxMindClient, MaxMindResult
from .models import GeoRecord, ProviderError
from .providers import (
    IpApiCoProvider,
    IpApiProvider,
    MaxMindProvider,
    ProviderChain,
    create_provider_chain,
    estimate_location,
    fallback_record,
)
from .rate_limiting import RateLimitedSession, RateLimiter, with_retries
from .reverse_dns import ReverseDNSResolver, lookup_ptr

__all__ = [
    "GeoRecord",
    "IpApiCoProvider",
    "IpApiProvider",
    "LookupCache",
    "MaxMindClient",
    "MaxMindProvider",
    "MaxMindResult",
    "ProviderChain",
    "ProviderError",
    "RateLimitedSession",
    "RateLimiter",
    "ReverseDNSResolver",
    "calculate_accuracy",
    "create_provider_chain",
    "estimate_location",
    "fallback_record",
    "lookup_ptr",
    "with_retries",
]
