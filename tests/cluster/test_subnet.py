import ipaddress

import pytest

from sqlconverge.cluster.subnet import ip_in_network

FIXTURES = [
    # address, network, mask, expected
    ("10.0.0.5", "10.0.0.0", "255.255.255.0", True),
    ("10.0.0.0", "10.0.0.0", "255.255.255.0", True),      # network address
    ("10.0.0.255", "10.0.0.0", "255.255.255.0", True),    # broadcast
    ("10.0.1.0", "10.0.0.0", "255.255.255.0", False),
    ("10.0.0.5", "10.0.0.5", "255.255.255.255", True),    # /32
    ("10.0.0.6", "10.0.0.5", "255.255.255.255", False),
    ("255.255.255.254", "255.255.255.0", "255.255.255.0", True),
    ("192.168.10.20", "192.168.0.0", "255.255.0.0", True),
    ("192.169.10.20", "192.168.0.0", "255.255.0.0", False),
    ("8.8.8.8", "0.0.0.0", "0.0.0.0", True),
]


@pytest.mark.parametrize("address,network,mask,expected", FIXTURES)
def test_ip_in_network_fixtures(address, network, mask, expected):
    assert ip_in_network(address, network, mask) is expected


@pytest.mark.parametrize("address,network,mask,_", FIXTURES)
def test_ip_in_network_matches_masked_comparison(address, network, mask, _):
    a, n, m = (int(ipaddress.IPv4Address(x)) for x in (address, network, mask))
    assert ip_in_network(address, network, mask) == ((a & m) == (n & m))
