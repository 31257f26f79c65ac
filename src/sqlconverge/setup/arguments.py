# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/sqlconverge/setup/arguments.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Sequence, Union

from ..errors import ArgumentBuildError

FEATURES_KEY = "FEATURES"
MASK = "*" * 8

ArgumentValue = Union[bool, str, Sequence[str]]


@dataclass(frozen=True)
class InstallerArgument:
    key: str
    value: ArgumentValue
    secret: bool = False

    def __post_init__(self):
        object.__setattr__(self, "key", self.key.upper())
        if isinstance(self.value, list):
            object.__setattr__(self, "value", tuple(self.value))

    @property
    def is_empty(self) -> bool:
        if isinstance(self.value, bool):
            return False
        return len(self.value) == 0

    def render_value(self, redact: bool = False) -> str:
        value = self.value
        if redact and self.secret:
            value = MASK

        if isinstance(value, (bool, str)):
            return f'"{value}"'
        if self.key == FEATURES_KEY:
            return ",".join(sorted(value))
        return " ".join(f'"{v}"' for v in sorted(value))

    def render(self, redact: bool = False) -> str:
        return f"/{self.key}={self.render_value(redact=redact)}"


@dataclass
class InstallerArguments:
    """Keyed argument set. Keys are unique and case-insensitive."""

    _items: Dict[str, InstallerArgument] = field(default_factory=dict)

    def add(self, key: str, value: ArgumentValue, *, secret: bool = False) -> None:
        self.add_argument(InstallerArgument(key, value, secret=secret))

    def add_argument(self, arg: InstallerArgument) -> None:
        if arg.key in self._items:
            raise ArgumentBuildError(f"Installer argument '{arg.key}' set twice")
        self._items[arg.key] = arg

    def extend(self, args: Iterable[InstallerArgument]) -> None:
        for arg in args:
            self.add_argument(arg)

    def get(self, key: str):
        arg = self._items.get(key.upper())
        return arg.value if arg else None

    def __contains__(self, key: str) -> bool:
        return key.upper() in self._items

    def __iter__(self) -> Iterator[InstallerArgument]:
        return iter(sorted(self._items.values(), key=lambda a: a.key))

    def __len__(self) -> int:
        return len(self._items)

    def secrets(self) -> List[str]:
        out: List[str] = []
        for arg in self._items.values():
            if arg.secret and isinstance(arg.value, str) and arg.value:
                out.append(arg.value)
        return out

    def render(self, redact: bool = False) -> str:
        """Command-line form, `/KEY=value` per argument, in key order."""
        return " ".join(arg.render(redact=redact) for arg in self if not arg.is_empty)

    def redacted(self) -> str:
        return self.render(redact=True)
