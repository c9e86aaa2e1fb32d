from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class GeoRecord:
    """Country name and ISO code for an address. Empty strings mean unknown."""

    country: str = ""
    code: str = ""

    def as_tuple(self) -> tuple[str, str]:
        return self.country, self.code


UNKNOWN = GeoRecord()
LOCAL = GeoRecord(country="Local/Private", code="LAN")


@dataclass(slots=True)
class CacheEntry:
    record: GeoRecord
    expiry: float  # absolute, in the owning cache's clock
