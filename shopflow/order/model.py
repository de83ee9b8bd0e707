"""Domain types of the order service and their JSON forms."""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Mapping, TypeVar

T = TypeVar("T")


class OrderStatus(str, enum.Enum):
    NEW = "new"
    FINISHED = "finished"
    CANCELLED = "cancelled"


def _as_uuid(key: str, raw: Any) -> uuid.UUID:
    if isinstance(raw, uuid.UUID):
        return raw
    if not isinstance(raw, str):
        raise ValueError(f"{key} must be a UUID string")
    try:
        return uuid.UUID(raw)
    except ValueError as err:
        raise ValueError(f"invalid {key}: {err}") from err


def _as_int(key: str, raw: Any) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ValueError(f"{key} must be an integer")
    return raw


def _as_str(key: str, raw: Any) -> str:
    if not isinstance(raw, str):
        raise ValueError(f"{key} must be a string")
    return raw


def _status(data: Mapping[str, Any], key: str) -> OrderStatus:
    raw = data.get(key)
    try:
        return OrderStatus(raw)
    except ValueError as err:
        raise ValueError(f"invalid {key}: {raw!r}") from err


def _field(data: Mapping[str, Any], key: str, convert: Callable[[str, Any], T], default: T) -> T:
    """Read ``key`` with ``convert``; a missing or null value gives ``default``."""
    raw = data.get(key)
    return default if raw is None else convert(key, raw)


_NIL = uuid.UUID(int=0)


@dataclass
class Order:
    id: uuid.UUID
    user_id: uuid.UUID
    description: str
    amount: int
    status: OrderStatus

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "description": self.description,
            "amount": self.amount,
            "order_status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Order":
        return cls(
            id=_field(data, "id", _as_uuid, _NIL),
            user_id=_field(data, "user_id", _as_uuid, _NIL),
            description=_field(data, "description", _as_str, ""),
            amount=_field(data, "amount", _as_int, 0),
            status=_status(data, "order_status"),
        )


@dataclass(frozen=True)
class OrderMessage:
    """Sent to the payment service to request paying for an order."""

    id: uuid.UUID
    user_id: uuid.UUID
    amount: int

    def to_dict(self) -> dict[str, Any]:
        return {"id": str(self.id), "user_id": str(self.user_id), "amount": self.amount}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OrderMessage":
        return cls(
            id=_field(data, "id", _as_uuid, _NIL),
            user_id=_field(data, "user_id", _as_uuid, _NIL),
            amount=_field(data, "amount", _as_int, 0),
        )


@dataclass(frozen=True)
class OrderServedMessage:
    """Received from the payment service with the outcome of an order."""

    id: uuid.UUID
    status: OrderStatus

    def to_dict(self) -> dict[str, Any]:
        return {"id": str(self.id), "status": self.status.value}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OrderServedMessage":
        return cls(id=_field(data, "id", _as_uuid, _NIL), status=_status(data, "status"))