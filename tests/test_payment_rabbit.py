import json
import threading
import time
import uuid

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from shopflow.payment.model import OrderServedMessage, OrderStatus
from shopflow.payment.rabbit import Listener, Publisher


class FakeChannel:
    def __init__(self, deliveries=()):
        self.deliveries = list(deliveries)
        self.published = []
        self.consumed = None
        self.cancelled = 0

    def basic_publish(self, exchange, routing_key, body, properties=None):
        self.published.append((exchange, routing_key, body, properties))

    def consume(self, queue, auto_ack=False, inactivity_timeout=None):
        self.consumed = (queue, auto_ack)
        return iter(self.deliveries)

    def cancel(self):
        self.cancelled += 1


class Props:
    timestamp = 0


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False}
    )
    with eng.begin() as conn:
        conn.execute(
            text("CREATE TABLE inbox (id INTEGER PRIMARY KEY AUTOINCREMENT, message TEXT NOT NULL)")
        )
    yield eng
    eng.dispose()


def inbox_messages(engine):
    with engine.connect() as conn:
        rows = conn.execute(text("SELECT message FROM inbox ORDER BY id")).all()
    return [json.loads(row.message) for row in rows]


def test_publisher_sends_json_to_queue_with_timestamp():
    channel = FakeChannel()
    message = OrderServedMessage(id=uuid.uuid4(), status=OrderStatus.FINISHED)

    Publisher(channel, "payment_to_order").publish(message)

    (exchange, routing_key, body, props), = channel.published
    assert exchange == ""
    assert routing_key == "payment_to_order"
    assert json.loads(body) == message.to_dict()
    assert props.content_type == "application/json"
    assert abs(props.timestamp - time.time()) < 60


def test_publisher_keeps_message_order():
    channel = FakeChannel()
    messages = [{"n": 1}, {"n": 2}]

    Publisher(channel, "q").publish(*messages)

    assert [json.loads(body) for _, _, body, _ in channel.published] == messages


def test_handle_message_appends_to_inbox(engine):
    listener = Listener(engine, FakeChannel(), "order_to_payment")
    payload = {"id": str(uuid.uuid4()), "amount": 4}

    listener.handle_message(json.dumps(payload).encode("utf-8"))

    assert inbox_messages(engine) == [payload]


def test_handle_message_rejects_invalid_json(engine):
    listener = Listener(engine, FakeChannel(), "order_to_payment")
    with pytest.raises(ValueError):
        listener.handle_message(b"{not json")
    assert inbox_messages(engine) == []


def test_run_stores_every_delivery_and_cancels(engine):
    first, second = {"n": 1}, {"n": 2}
    channel = FakeChannel(
        [
            (object(), Props(), json.dumps(first).encode()),
            (None, None, None),
            (object(), Props(), json.dumps(second).encode()),
        ]
    )

    Listener(engine, channel, "order_to_payment").run(threading.Event())

    assert inbox_messages(engine) == [first, second]
    assert channel.consumed == ("order_to_payment", True)
    assert channel.cancelled == 1


def test_run_stops_when_event_is_set(engine):
    channel = FakeChannel([(object(), Props(), b'{"n": 1}')])
    stop = threading.Event()
    stop.set()

    Listener(engine, channel, "q").run(stop)

    assert inbox_messages(engine) == []
    assert channel.cancelled == 1


def test_run_raises_on_bad_message(engine):
    channel = FakeChannel(
        [(object(), Props(), b"oops"), (object(), Props(), b'{"n": 1}')]
    )

    with pytest.raises(ValueError):
        Listener(engine, channel, "q").run(threading.Event())
    assert inbox_messages(engine) == []
    assert channel.cancelled == 1