# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/sqlconverge/identity/classifier.py

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from ..config.models import ServiceIdentity
from ..setup.arguments import InstallerArgument

_BUILTIN_ACCOUNT = re.compile(
    r"^(?:NT ?AUTHORITY\\)?(SYSTEM|LOCALSERVICE|LOCAL SERVICE|NETWORKSERVICE|NETWORK SERVICE)$",
    re.IGNORECASE,
)
_VIRTUAL_ACCOUNT = re.compile(r"^NT SERVICE\\(.+)$", re.IGNORECASE)


class ServiceType(str, Enum):
    """Installer argument prefix per service role."""

    DATABASE_ENGINE = "SQL"
    AGENT = "AGT"
    FULL_TEXT = "FT"
    REPORTING = "RS"
    ANALYSIS = "AS"
    INTEGRATION = "IS"


class IdentityKind(str, Enum):
    BUILTIN = "builtin"           # NT AUTHORITY\SYSTEM and friends
    VIRTUAL = "virtual"           # NT SERVICE\<name>
    MANAGED = "managed"           # gMSA / machine account, trailing $
    PASSWORD = "password"         # ordinary local/domain account


@dataclass(frozen=True)
class ClassifiedIdentity:
    kind: IdentityKind
    account: str
    password: Optional[str] = None

    def arguments(self, service_type: ServiceType) -> List[InstallerArgument]:
        args = [InstallerArgument(f"{service_type.value}SVCACCOUNT", self.account)]
        if self.kind is IdentityKind.PASSWORD:
            args.append(
                InstallerArgument(f"{service_type.value}SVCPASSWORD", self.password or "", secret=True)
            )
        return args


def classify(identity: ServiceIdentity) -> ClassifiedIdentity:
    """First matching rule wins: builtin, virtual, managed, then password."""
    username = identity.username.strip()

    m = _BUILTIN_ACCOUNT.match(username)
    if m:
        return ClassifiedIdentity(IdentityKind.BUILTIN, f"NT AUTHORITY\\{m.group(1)}")

    m = _VIRTUAL_ACCOUNT.match(username)
    if m:
        return ClassifiedIdentity(IdentityKind.VIRTUAL, f"NT SERVICE\\{m.group(1)}")

    if username.endswith("$"):
        return ClassifiedIdentity(IdentityKind.MANAGED, username)

    password = identity.password.get_secret_value() if identity.password else ""
    return ClassifiedIdentity(IdentityKind.PASSWORD, username, password)


def service_account_arguments(identity: ServiceIdentity, service_type: ServiceType) -> List[InstallerArgument]:
    return classify(identity).arguments(service_type)
