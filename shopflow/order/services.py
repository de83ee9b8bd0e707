"""Business operations of the order service."""

from __future__ import annotations

import os
import time
import uuid

from .model import Order, OrderMessage, OrderStatus
from .storage import Storage


def _uuid7() -> uuid.UUID:
    """Generate a time-ordered UUID (version 7)."""
    millis = time.time_ns() // 1_000_000
    value = (millis & ((1 << 48) - 1)) << 80
    value |= int.from_bytes(os.urandom(10), "big")
    value = (value & ~(0xF << 76)) | (0x7 << 76)
    value = (value & ~(0x3 << 62)) | (0x2 << 62)
    return uuid.UUID(int=value)


class OrderService:
    def __init__(self, storage: Storage) -> None:
        self._storage = storage

    def get_order(self, order_id: uuid.UUID) -> Order:
        with self._storage.begin() as repo:
            return repo.order().get(order_id)

    def list_orders(self) -> list[Order]:
        with self._storage.begin() as repo:
            return repo.order().list()

    def create_order(self, user_id: uuid.UUID, amount: int, description: str) -> Order:
        """Store a new order and queue a payment request for it in the outbox."""
        with self._storage.begin() as repo:
            order = Order(
                id=_uuid7(),
                user_id=user_id,
                description=description,
                amount=amount,
                status=OrderStatus.NEW,
            )
            repo.order().create(order)
            repo.outbox().add(
                OrderMessage(id=order.id, user_id=order.user_id, amount=order.amount)
            )
            return order

    def set_order_status(self, order_id: uuid.UUID, status: OrderStatus) -> None:
        with self._storage.begin() as repo:
            order = repo.order().get(order_id)
            order.status = status
            repo.order().update(order)