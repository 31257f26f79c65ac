# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/sqlconverge/cluster/network.py

from __future__ import annotations

import logging
from typing import Iterable, List

from ..errors import ClusterIPAddressNotValidError
from ..inventory.models import ClusterNetworkResource
from .subnet import ip_in_network

log = logging.getLogger("sqlconverge")

DEFAULT_ADDRESSES = "DEFAULT"


def format_assignment(address: str, network: ClusterNetworkResource) -> str:
    return f"IPv4;{address};{network.name};{network.address_mask}"


def map_cluster_networks(
    addresses: List[str],
    networks: Iterable[ClusterNetworkResource],
) -> List[str]:
    """
    Pair each declared address with every client network containing it.

    An address may match several networks; each match is kept. Fewer matches
    than declared addresses means some address fits no network.
    """
    if not addresses:
        return [DEFAULT_ADDRESSES]

    networks = list(networks)
    mapped: List[str] = []
    for address in addresses:
        for network in networks:
            try:
                matched = ip_in_network(address, network.address, network.address_mask)
            except ValueError as e:
                # not a dotted-quad address or mask
                raise ClusterIPAddressNotValidError(list(addresses), list(mapped)) from e
            if matched:
                mapped.append(format_assignment(address, network))

    # more matches than addresses is accepted (multi-network addresses)
    if len(mapped) < len(addresses):
        raise ClusterIPAddressNotValidError(list(addresses), mapped)

    log.debug("Mapped cluster addresses %s", mapped)
    return mapped
