from __future__ import annotations

import logging
from typing import Protocol

from ipcheck.classifier import AddressClass, classify, normalize_ip
from ipcheck.config import GEO_CACHE_TTL_SECONDS
from ipcheck.errors import GeoLookupError
from ipcheck.geo_cache import GeoCache
from ipcheck.models import LOCAL, UNKNOWN, GeoRecord

logger = logging.getLogger(__name__)


class Resolver(Protocol):
    def resolve(self, ip: str) -> GeoRecord: ...


class GeoService:
    """Cache-aside country lookup for client addresses.

    Local and private addresses are answered without touching the cache or
    the network. A provider answer is cached for ``ttl`` seconds even when
    its fields are empty; a failed provider call is not cached, so the next
    lookup for that address tries again.

    Concurrent cold lookups for the same address are not collapsed: each one
    may call the provider.
    """

    def __init__(
        self,
        resolver: Resolver,
        cache: GeoCache | None = None,
        ttl: float = GEO_CACHE_TTL_SECONDS,
    ) -> None:
        self.resolver = resolver
        self.cache = cache if cache is not None else GeoCache()
        self.ttl = ttl

    def lookup(self, ip: str) -> tuple[str, str]:
        """Return (country, code) for ip. Never raises; ("", "") means unknown."""
        ip = ip.strip()
        if not ip:
            return UNKNOWN.as_tuple()

        kind = classify(ip)
        if kind is AddressClass.INVALID:
            return UNKNOWN.as_tuple()
        if kind is AddressClass.LOCAL:
            return LOCAL.as_tuple()

        key = normalize_ip(ip)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Geo cache hit for %s", key)
            return cached.as_tuple()

        logger.debug("Geo cache miss for %s", key)
        try:
            record = self.resolver.resolve(key)
        except GeoLookupError as exc:
            logger.warning("%s", exc)
            return UNKNOWN.as_tuple()

        self.cache.put(key, record, self.ttl)
        return record.as_tuple()
