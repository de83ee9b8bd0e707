"""RabbitMQ publishing and consuming for the order service."""

from __future__ import annotations

import json
import logging
import threading
import uuid
from typing import Any, Protocol

import pika

from .model import OrderServedMessage, OrderStatus

_POLL_SECONDS = 1.0
_JSON_PROPERTIES = pika.BasicProperties(content_type="application/json")


class StatusSetter(Protocol):
    def set_order_status(self, order_id: uuid.UUID, status: OrderStatus) -> None: ...


def _json_default(obj: Any) -> Any:
    if callable(getattr(obj, "to_dict", None)):
        return obj.to_dict()
    if isinstance(obj, uuid.UUID):
        return str(obj)
    raise TypeError(f"object of type {type(obj).__name__} is not JSON serializable")


class Publisher:
    """Publishes JSON messages to one queue through the default exchange."""

    def __init__(self, channel: Any, queue: str) -> None:
        self._channel = channel
        self._queue = queue

    def publish(self, *args: Any) -> None:
        """Publish each message in order; stop at the first failure."""
        for msg in args:
            body = json.dumps(msg, default=_json_default, separators=(",", ":"))
            self._channel.basic_publish(
                exchange="",
                routing_key=self._queue,
                body=body.encode("utf-8"),
                properties=_JSON_PROPERTIES,
            )


class Listener:
    """Consumes order outcomes and applies them to the stored orders."""

    def __init__(
        self,
        service: StatusSetter,
        channel: Any,
        queue: str,
        logger: logging.Logger | None = None,
    ) -> None:
        self._service = service
        self._channel = channel
        self._queue = queue
        self._logger = logger or logging.getLogger(__name__)

    def run(self, stop_event: threading.Event) -> None:
        """Consume until the channel stops delivering or ``stop_event`` is set.

        An error while handling a message ends the run and is raised.
        """
        deliveries = self._channel.consume(
            self._queue, auto_ack=True, inactivity_timeout=_POLL_SECONDS
        )
        try:
            for method, properties, body in deliveries:
                if stop_event.is_set():
                    break
                if method is not None:
                    self._logger.info(
                        "message received queue=%s timestamp=%s",
                        self._queue,
                        getattr(properties, "timestamp", None),
                    )
                    self.handle_message(body)
        finally:
            self._channel.cancel()

    def handle_message(self, body: bytes) -> None:
        """Decode an order outcome and store the new status."""
        self._logger.debug("got message with body queue=%s body=%r", self._queue, body)
        msg = OrderServedMessage.from_dict(json.loads(body))
        self._service.set_order_status(msg.id, msg.status)