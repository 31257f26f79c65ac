# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, List, Set

from ..errors import UnsupportedFeatureError

ENGINE = "SQLENGINE"
FULLTEXT = "FULLTEXT"
REPORTING = "RS"
ANALYSIS = "AS"
INTEGRATION = "IS"

# Management tools stopped shipping with the installer at major version 13 (2016)
VERSION_GATED_FEATURES: Dict[int, FrozenSet[str]] = {
    13: frozenset({"SSMS", "ADV_SSMS"}),
}


def normalize(features: Iterable[str]) -> List[str]:
    """Upper-case, strip and de-duplicate, keeping first-seen order."""
    out: List[str] = []
    for f in features:
        tag = f.strip().upper()
        if tag and tag not in out:
            out.append(tag)
    return out


def check_supported(features: Iterable[str], product_major_version: int) -> None:
    gated = VERSION_GATED_FEATURES.get(product_major_version, frozenset())
    for tag in normalize(features):
        if tag in gated:
            raise UnsupportedFeatureError(tag, product_major_version)


def missing_features(
    desired: Iterable[str],
    current: Iterable[str],
    product_major_version: int,
) -> List[str]:
    """
    Desired features not already installed, in declared order.

    Every requested tag is checked against the version gate first, including
    tags that are already installed.
    """
    wanted = normalize(desired)
    check_supported(wanted, product_major_version)

    installed: Set[str] = set(normalize(current))
    return [f for f in wanted if f not in installed]
