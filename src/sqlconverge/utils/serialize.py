# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/sqlconverge/utils/serialize.py

from dataclasses import is_dataclass, asdict
from enum import Enum
from typing import Any

from pydantic import BaseModel, SecretStr


def to_jsonable(obj: Any) -> Any:
    if isinstance(obj, BaseModel):
        return to_jsonable(obj.model_dump())

    if is_dataclass(obj) and not isinstance(obj, type):
        return to_jsonable(asdict(obj))

    if isinstance(obj, dict):
        return {k: to_jsonable(v) for k, v in obj.items()}

    if isinstance(obj, (list, tuple, set, frozenset)):
        return [to_jsonable(v) for v in obj]

    if isinstance(obj, SecretStr):
        return str(obj)  # masked

    if isinstance(obj, Enum):
        return obj.value

    return obj
