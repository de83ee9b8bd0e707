"""HTTP handlers of the order service."""

from __future__ import annotations

import uuid
from typing import Any, Protocol

from werkzeug.wrappers import Request

from ..shared.errs import bad_request
from ..shared.httplib import unmarshal_body
from .model import Order

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1


class OrderOperations(Protocol):
    def get_order(self, order_id: uuid.UUID) -> Order: ...
    def list_orders(self) -> list[Order]: ...
    def create_order(self, user_id: uuid.UUID, amount: int, description: str) -> Order: ...


def _parse_create(data: Any) -> tuple[uuid.UUID, int, str]:
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("body must be a JSON object")

    raw_user = data.get("user_id")
    if raw_user is None:
        user_id = uuid.UUID(int=0)
    elif isinstance(raw_user, str):
        user_id = uuid.UUID(raw_user)
    else:
        raise ValueError("user_id must be a UUID string")

    description = data.get("description")
    if description is None:
        description = ""
    elif not isinstance(description, str):
        raise ValueError("description must be a string")

    amount = data.get("amount")
    if amount is None:
        amount = 0
    elif isinstance(amount, bool) or not isinstance(amount, int):
        raise ValueError("amount must be an integer")
    elif not _INT64_MIN <= amount <= _INT64_MAX:
        raise ValueError("amount is out of range")

    return user_id, amount, description


class OrderHandler:
    def __init__(self, service: OrderOperations) -> None:
        self._service = service

    def get_order(self, request: Request) -> Order:
        raw = getattr(request, "path_values", {}).get("orderId", "")
        try:
            order_id = uuid.UUID(raw)
        except ValueError as err:
            raise bad_request("orderId UUID path value must be specified: %s", err) from err
        return self._service.get_order(order_id)

    def list_orders(self, request: Request) -> list[Order]:
        return self._service.list_orders()

    def create_order(self, request: Request) -> Order:
        try:
            user_id, amount, description = _parse_create(unmarshal_body(request))
        except ValueError as err:
            raise bad_request("invalid body: %s", err) from err
        return self._service.create_order(user_id, amount, description)