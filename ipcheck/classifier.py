from __future__ import annotations

import enum
import ipaddress

# RFC 1918 and unique-local. ipaddress's is_private also covers documentation
# and reserved blocks, which are still sent to the provider.
_PRIVATE_NETWORKS = (
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    ipaddress.ip_network("fc00::/7"),
)

_V4_LINK_LOCAL_MULTICAST = ipaddress.ip_network("224.0.0.0/24")


class AddressClass(enum.Enum):
    LOCAL = "local"
    ROUTABLE = "routable"
    INVALID = "invalid"


def parse_ip(ip: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address | None:
    """Parse a trimmed address.

    IPv4-mapped IPv6 collapses to IPv4 and an IPv6 zone ("%eth0") is dropped;
    neither means anything to a geolocation provider.
    """
    try:
        addr = ipaddress.ip_address(ip.strip())
    except ValueError:
        return None
    if isinstance(addr, ipaddress.IPv6Address):
        if addr.ipv4_mapped is not None:
            return addr.ipv4_mapped
        if addr.scope_id is not None:
            return ipaddress.IPv6Address(int(addr))
    return addr


def normalize_ip(ip: str) -> str | None:
    """Return the canonical text form of an address, or None if it doesn't parse."""
    addr = parse_ip(ip)
    return str(addr) if addr is not None else None


def _is_link_local_multicast(addr: ipaddress.IPv4Address | ipaddress.IPv6Address) -> bool:
    if isinstance(addr, ipaddress.IPv4Address):
        return addr in _V4_LINK_LOCAL_MULTICAST
    # ffXY::/16 with scope nibble Y == 2, whatever the flag bits X are
    return (int(addr) >> 112) & 0xFF0F == 0xFF02


def _is_local(addr: ipaddress.IPv4Address | ipaddress.IPv6Address) -> bool:
    if addr.is_loopback or addr.is_link_local or _is_link_local_multicast(addr):
        return True
    return any(addr.version == net.version and addr in net for net in _PRIVATE_NETWORKS)


def classify(ip: str) -> AddressClass:
    """Decide whether an address needs a geolocation lookup at all."""
    addr = parse_ip(ip)
    if addr is None:
        return AddressClass.INVALID
    if _is_local(addr):
        return AddressClass.LOCAL
    return AddressClass.ROUTABLE
