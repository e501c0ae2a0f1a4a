"""Conversion of model dataclasses into camelCase wire payloads."""

from __future__ import annotations

from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any


def camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_payload(value: Any) -> Any:
    """Recursively convert dataclasses, enums and containers to JSON-ready data.

    Dataclass field names become camelCase keys. Plain dict keys are kept
    as-is, since they carry data (entity categories, node attributes).
    """
    if is_dataclass(value) and not isinstance(value, type):
        return {camel_case(f.name): to_payload(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: to_payload(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_payload(item) for item in value]
    return value
