"""Inbox handler that serves order payment requests."""

from __future__ import annotations

import json
from typing import Any, Callable, Protocol

from ..shared import txcontext
from .model import OrderMessage


class OrderServer(Protocol):
    def serve_order(self, order: OrderMessage) -> None: ...


def _decode(message: Any) -> Any:
    if isinstance(message, (bytes, bytearray, str)):
        return json.loads(message)
    return message


def new_inbox_handler(service: OrderServer) -> Callable[..., None]:
    """Build an inbox handler serving each message within the worker's transaction."""

    def handle(conn: Any, *messages: Any) -> None:
        with txcontext.with_tx(conn):
            for message in messages:
                data = _decode(message)
                if not isinstance(data, dict):
                    raise ValueError("order message must be a JSON object")
                service.serve_order(OrderMessage.from_dict(data))

    return handle