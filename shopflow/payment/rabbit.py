"""RabbitMQ publishing and consuming for the payment service."""

from __future__ import annotations

import json
import logging
import threading
import time
import uuid
from typing import Any

import pika
from sqlalchemy import text
from sqlalchemy.engine import Engine

_CONTENT_TYPE = "application/json"
_POLL_SECONDS = 1.0
_INBOX_ADD = text("INSERT INTO inbox (message) VALUES (:message)")


def _json_default(obj: Any) -> Any:
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if isinstance(obj, uuid.UUID):
        return str(obj)
    raise TypeError(f"object of type {type(obj).__name__} is not JSON serializable")


class Publisher:
    """Publishes timestamped JSON messages to one queue through the default exchange."""

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
                properties=pika.BasicProperties(
                    content_type=_CONTENT_TYPE, timestamp=int(time.time())
                ),
            )


class Listener:
    """Consumes order payment requests and stores them in the inbox table."""

    def __init__(
        self,
        db: Engine,
        channel: Any,
        queue: str,
        logger: logging.Logger | None = None,
    ) -> None:
        self._db = db
        self._channel = channel
        self._queue = queue
        self._logger = logger or logging.getLogger(__name__)

    def run(self, stop_event: threading.Event) -> None:
        """Consume until the channel stops delivering or ``stop_event`` is set.

        An error while storing a message ends the run and is raised.
        """
        deliveries = self._channel.consume(
            self._queue, auto_ack=True, inactivity_timeout=_POLL_SECONDS
        )
        self._logger.info("consuming queue queue=%s", self._queue)
        try:
            for method, properties, body in deliveries:
                if stop_event.is_set():
                    return
                if method is None:
                    continue
                self._logger.info(
                    "message received queue=%s timestamp=%s",
                    self._queue,
                    getattr(properties, "timestamp", None),
                )
                self.handle_message(body)
            self._logger.info("stopping queue=%s", self._queue)
        finally:
            self._channel.cancel()

    def handle_message(self, body: bytes | str) -> None:
        """Append the JSON message to the inbox; raise ValueError when it is not JSON."""
        message = body.decode("utf-8") if isinstance(body, (bytes, bytearray)) else body
        json.loads(message)
        with self._db.begin() as conn:
            conn.execute(_INBOX_ADD, {"message": message})
        self._logger.info("message appended to inbox table queue=%s", self._queue)