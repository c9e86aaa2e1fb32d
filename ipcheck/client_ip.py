from __future__ import annotations

import ipaddress
from typing import Mapping


def strip_port(value: str) -> str:
    """Drop a trailing port from an address.

    A bare IP comes back in canonical form; "1.2.3.4:80" and "[::1]:80" give
    the address; "host:80" gives the host. Anything else is returned as is.
    """
    try:
        return str(ipaddress.ip_address(value))
    except ValueError:
        pass

    host, sep, _port = value.rpartition(":")
    if not sep or not host:
        return value
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        # unbracketed IPv6-ish text with too many colons
        return value
    try:
        return str(ipaddress.ip_address(host))
    except ValueError:
        return host


def client_ip(headers: Mapping[str, str], remote_addr: str) -> str:
    """Best guess at the caller's address behind a reverse proxy.

    Order: first X-Forwarded-For hop, then X-Real-IP, then the socket peer.
    """
    xff = (headers.get("x-forwarded-for") or "").strip()
    if xff:
        ip = strip_port(xff.split(",")[0].strip())
        if ip:
            return ip

    xri = (headers.get("x-real-ip") or "").strip()
    if xri:
        ip = strip_port(xri)
        if ip:
            return ip

    return strip_port(remote_addr.strip())
