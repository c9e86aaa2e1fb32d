import pytest

from ipcheck.classifier import AddressClass, classify, normalize_ip


@pytest.mark.parametrize(
    "ip",
    [
        "127.0.0.1",
        "::1",
        "10.1.2.3",
        "172.16.0.1",
        "172.31.255.254",
        "192.168.1.10",
        "169.254.10.20",   # link-local unicast
        "fe80::1",
        "224.0.0.251",     # link-local multicast (mDNS)
        "ff02::1",
        "ff12::1",         # link-local scope with the transient flag
        "ff32::fb",
        "fe80::1%eth0",
        "fd12:3456:789a::1",  # unique-local
        "::ffff:192.168.0.1",
    ],
)
def test_local_addresses(ip):
    assert classify(ip) is AddressClass.LOCAL


@pytest.mark.parametrize(
    "ip",
    [
        "8.8.8.8",
        "1.1.1.1",
        "172.32.0.1",      # just outside 172.16/12
        "2001:4860:4860::8888",
        "::ffff:8.8.4.4",
        "224.0.1.1",       # multicast, but not link-local
        "ff05::2",         # site-local multicast
        "ff0e::1",         # global multicast
        "2001:db8::1%eth0",
    ],
)
def test_routable_addresses(ip):
    assert classify(ip) is AddressClass.ROUTABLE


@pytest.mark.parametrize("ip", ["", "not-an-ip", "999.999.999.999", "1.2.3", "1.2.3.4:80", "[::1]"])
def test_invalid_addresses(ip):
    assert classify(ip) is AddressClass.INVALID


def test_normalize_trims_and_collapses_mapped_v4():
    assert normalize_ip("  8.8.8.8 ") == "8.8.8.8"
    assert normalize_ip("::ffff:8.8.8.8") == "8.8.8.8"
    assert normalize_ip("2001:4860:4860:0:0:0:0:8888") == "2001:4860:4860::8888"
    assert normalize_ip("bogus") is None


def test_normalize_drops_ipv6_zone():
    assert normalize_ip("fe80::1%eth0") == "fe80::1"
    assert normalize_ip("2001:db8::1%a\x01b") == "2001:db8::1"
