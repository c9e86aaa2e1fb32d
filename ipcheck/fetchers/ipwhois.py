from __future__ import annotations

import json
import logging
import time
from typing import Any

import httpx

from ipcheck.config import GEO_API_URL, GEO_TIMEOUT_SECONDS
from ipcheck.errors import GeoLookupError
from ipcheck.models import GeoRecord

logger = logging.getLogger(__name__)


def _text_field(ip: str, data: dict[str, Any], name: str) -> str:
    """Read an optional string field; missing or null means unknown."""
    val = data.get(name)
    if val is None:
        return ""
    if not isinstance(val, str):
        raise GeoLookupError(ip, f"field {name!r} is {type(val).__name__}, expected string")
    return val.strip()


def parse_ipwhois_response(ip: str, data: Any) -> GeoRecord:
    """Turn a decoded ipwho.is body into a GeoRecord.

    Only an explicit ``"success": true`` counts. The provider reports unknown
    or reserved addresses with success=false and a message, which we treat
    the same as a transport failure.
    """
    if not isinstance(data, dict):
        raise GeoLookupError(ip, "response body is not a JSON object")
    if data.get("success") is not True:
        message = data.get("message") or "provider reported failure"
        raise GeoLookupError(ip, str(message))
    return GeoRecord(
        country=_text_field(ip, data, "country"),
        code=_text_field(ip, data, "country_code"),
    )


class IpWhoisResolver:
    """Resolve an address to a country through ipwho.is."""

    def __init__(
        self,
        client: httpx.Client,
        base_url: str = GEO_API_URL,
        timeout: float = GEO_TIMEOUT_SECONDS,
    ) -> None:
        self._client = client
        self._base_url = base_url
        self._timeout = timeout

    def resolve(self, ip: str) -> GeoRecord:
        """Ask the provider about ip, giving up once ``timeout`` seconds have passed in total.

        httpx applies its timeout to each connect/read separately, so the body
        is streamed and checked against an overall deadline.
        """
        url = f"{self._base_url}{ip}"
        deadline = time.monotonic() + self._timeout
        body = bytearray()
        try:
            with self._client.stream("GET", url, timeout=self._timeout) as resp:
                if not resp.is_success:
                    raise GeoLookupError(ip, f"HTTP {resp.status_code}")
                for chunk in resp.iter_bytes():
                    body += chunk
                    if time.monotonic() > deadline:
                        raise GeoLookupError(ip, f"timed out after {self._timeout:g}s")
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise GeoLookupError(ip, f"{type(exc).__name__}: {exc}") from exc
        try:
            data = json.loads(body)
        except ValueError as exc:
            raise GeoLookupError(ip, "malformed JSON body") from exc
        record = parse_ipwhois_response(ip, data)
        logger.debug("Resolved %s to %s (%s)", ip, record.country, record.code)
        return record
