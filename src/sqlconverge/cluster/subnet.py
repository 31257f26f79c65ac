# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import ipaddress


def _to_int(address: str) -> int:
    # IPv4Address converts the dotted quad to an exact unsigned 32-bit integer
    return int(ipaddress.IPv4Address(address.strip()))


def ip_in_network(address: str, network: str, mask: str) -> bool:
    """True when *address* lies inside *network*/*mask*."""
    m = _to_int(mask)
    return (_to_int(address) & m) == (_to_int(network) & m)
