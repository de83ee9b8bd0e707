"""HTTP handlers of the payment service."""

from __future__ import annotations

import uuid
from typing import Any, Protocol

from werkzeug.wrappers import Request

from ..shared.errs import bad_request
from ..shared.httplib import unmarshal_body
from .model import Account

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1


class AccountOperations(Protocol):
    def get_account(self, user_id: uuid.UUID) -> Account: ...
    def create_account(self, user_id: uuid.UUID) -> Account: ...
    def replenish_account(self, user_id: uuid.UUID, amount: int) -> Account: ...


def _path_user_id(request: Request) -> uuid.UUID:
    """Parse the ``id`` path value; raises ValueError when it is not a UUID."""
    return uuid.UUID(getattr(request, "path_values", {}).get("id", ""))


def _parse_amount(data: Any) -> int:
    if data is None:
        return 0
    if not isinstance(data, dict):
        raise ValueError("body must be a JSON object")
    amount = data.get("amount")
    if amount is None:
        return 0
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValueError("amount must be an integer")
    if not _INT64_MIN <= amount <= _INT64_MAX:
        raise ValueError("amount is out of range")
    return amount


class PaymentHandler:
    def __init__(self, service: AccountOperations) -> None:
        self._service = service

    def get_account(self, request: Request) -> Account:
        return self._service.get_account(_path_user_id(request))

    def create_account(self, request: Request) -> Account:
        return self._service.create_account(_path_user_id(request))

    def replenish_account(self, request: Request) -> Account:
        user_id = _path_user_id(request)
        try:
            amount = _parse_amount(unmarshal_body(request))
        except ValueError as err:
            raise bad_request("invalid format of body") from err
        return self._service.replenish_account(user_id, amount)