"""Domain types of the payment service and their JSON forms."""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass
from typing import Any, Mapping


class OrderStatus(str, enum.Enum):
    NEW = "new"
    FINISHED = "finished"
    CANCELLED = "cancelled"


def _uuid(data: Mapping[str, Any], key: str) -> uuid.UUID:
    raw = data.get(key)
    if raw is None:
        return uuid.UUID(int=0)
    if isinstance(raw, uuid.UUID):
        return raw
    if not isinstance(raw, str):
        raise ValueError(f"{key} must be a UUID string")
    try:
        return uuid.UUID(raw)
    except ValueError as err:
        raise ValueError(f"invalid {key}: {err}") from err


def _int(data: Mapping[str, Any], key: str) -> int:
    raw = data.get(key)
    if raw is None:
        return 0
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ValueError(f"{key} must be an integer")
    return raw


def _status(data: Mapping[str, Any], key: str) -> OrderStatus:
    raw = data.get(key)
    try:
        return OrderStatus(raw)
    except ValueError as err:
        raise ValueError(f"invalid {key}: {raw!r}") from err


@dataclass
class Account:
    user_id: uuid.UUID
    amount: int

    def to_dict(self) -> dict[str, Any]:
        return {"user_id": str(self.user_id), "amount": self.amount}


@dataclass(frozen=True)
class OrderMessage:
    """Received from the order service: an order waiting to be paid."""

    id: uuid.UUID
    user_id: uuid.UUID
    amount: int

    def to_dict(self) -> dict[str, Any]:
        return {"id": str(self.id), "user_id": str(self.user_id), "amount": self.amount}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OrderMessage":
        return cls(
            id=_uuid(data, "id"),
            user_id=_uuid(data, "user_id"),
            amount=_int(data, "amount"),
        )


@dataclass(frozen=True)
class OrderServedMessage:
    """Sent back to the order service with the outcome of the payment."""

    id: uuid.UUID
    status: OrderStatus

    def to_dict(self) -> dict[str, Any]:
        return {"id": str(self.id), "status": self.status.value}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "OrderServedMessage":
        return cls(id=_uuid(data, "id"), status=_status(data, "status"))