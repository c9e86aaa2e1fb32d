from __future__ import annotations


class IpCheckError(Exception):
    """Base class for errors raised inside ipcheck."""


class GeoLookupError(IpCheckError):
    """The geolocation provider could not produce an answer for an address."""

    def __init__(self, ip: str, reason: str) -> None:
        super().__init__(f"geo lookup for {ip} failed: {reason}")
        self.ip = ip
        self.reason = reason


class StoreError(IpCheckError):
    """The visit store could not be read or written."""
