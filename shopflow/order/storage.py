"""Database access for orders and their outbox, within one transaction."""

from __future__ import annotations

import json
import uuid
from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine

from ..shared import txcontext
from ..shared.errs import not_found
from .model import Order, OrderStatus

_GET = text("SELECT user_id, description, amount, status FROM orders WHERE id = :id")
_LIST = text("SELECT id, user_id, description, amount, status FROM orders")
_CREATE = text(
    "INSERT INTO orders (id, user_id, description, amount, status) "
    "VALUES (:id, :user_id, :description, :amount, :status)"
)
_UPDATE = text(
    "UPDATE orders SET user_id = :user_id, description = :description, "
    "amount = :amount, status = :status WHERE id = :id"
)
_OUTBOX_ADD = text("INSERT INTO outbox (message) VALUES (:message)")


def _as_uuid(value: Any) -> uuid.UUID:
    return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))


def _params(order: Order) -> dict[str, Any]:
    return {
        "id": str(order.id),
        "user_id": str(order.user_id),
        "description": order.description,
        "amount": order.amount,
        "status": order.status.value,
    }


class OrderRepository:
    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def get(self, order_id: uuid.UUID) -> Order:
        """Return the order; raise a 404 HTTPError when it does not exist."""
        row = self._conn.execute(_GET, {"id": str(order_id)}).first()
        if row is None:
            raise not_found("order with id %s not found", order_id)
        return Order(
            id=order_id,
            user_id=_as_uuid(row.user_id),
            description=row.description or "",
            amount=row.amount,
            status=OrderStatus(row.status),
        )

    def list(self) -> list[Order]:
        return [
            Order(
                id=_as_uuid(row.id),
                user_id=_as_uuid(row.user_id),
                description=row.description or "",
                amount=row.amount,
                status=OrderStatus(row.status),
            )
            for row in self._conn.execute(_LIST)
        ]

    def create(self, order: Order) -> None:
        self._conn.execute(_CREATE, _params(order))

    def update(self, order: Order) -> None:
        self._conn.execute(_UPDATE, _params(order))


class Outbox:
    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def add(self, msg: Any) -> None:
        """Store ``msg`` as JSON to be published later."""
        payload = msg.to_dict() if hasattr(msg, "to_dict") else msg
        try:
            data = json.dumps(payload, separators=(",", ":"))
        except (TypeError, ValueError) as err:
            raise ValueError(f"failed to marshal message: {err}") from err
        self._conn.execute(_OUTBOX_ADD, {"message": data})


class Repository:
    """Repositories sharing one connection and its transaction."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def order(self) -> OrderRepository:
        return OrderRepository(self._conn)

    def outbox(self) -> Outbox:
        return Outbox(self._conn)


class Storage:
    def __init__(self, db: Engine) -> None:
        self._db = db

    @contextmanager
    def begin(self) -> Iterator[Repository]:
        """Yield a repository in a transaction, committed on success and rolled back on error.

        When a transaction is already bound through txcontext it is reused and
        left for its owner to finish.
        """
        bound = txcontext.from_context()
        if bound is not None:
            yield Repository(bound)
            return
        with self._db.begin() as conn:
            yield Repository(conn)