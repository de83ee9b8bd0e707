import json
import uuid

import pytest

from shopflow.order.model import Order, OrderMessage, OrderServedMessage, OrderStatus

ORDER_ID = uuid.UUID("0190a1b2-c3d4-7e5f-8a9b-0c1d2e3f4a5b")
USER_ID = uuid.UUID("11111111-2222-4333-8444-555555555555")


@pytest.mark.parametrize("value", ["new", "finished", "cancelled"])
def test_status_values_round_trip(value):
    msg = OrderServedMessage.from_dict({"id": str(ORDER_ID), "status": value})
    assert msg.status is OrderStatus(value)
    assert msg.to_dict()["status"] == value


def test_order_json_keys():
    order = Order(ORDER_ID, USER_ID, "book", 10, OrderStatus.NEW)
    assert order.to_dict() == {
        "id": str(ORDER_ID),
        "user_id": str(USER_ID),
        "description": "book",
        "amount": 10,
        "order_status": "new",
    }


def test_order_round_trip_through_json():
    order = Order(ORDER_ID, USER_ID, "book", 10, OrderStatus.FINISHED)
    assert Order.from_dict(json.loads(json.dumps(order.to_dict()))) == order


def test_order_message_round_trip():
    msg = OrderMessage(ORDER_ID, USER_ID, 42)
    assert msg.to_dict() == {"id": str(ORDER_ID), "user_id": str(USER_ID), "amount": 42}
    assert OrderMessage.from_dict(msg.to_dict()) == msg


def test_served_message_from_dict():
    msg = OrderServedMessage.from_dict({"id": str(ORDER_ID), "status": "cancelled"})
    assert msg == OrderServedMessage(ORDER_ID, OrderStatus.CANCELLED)
    assert msg.to_dict() == {"id": str(ORDER_ID), "status": "cancelled"}


def test_missing_fields_take_zero_values():
    msg = OrderMessage.from_dict({})
    assert msg == OrderMessage(uuid.UUID(int=0), uuid.UUID(int=0), 0)


@pytest.mark.parametrize(
    "data",
    [
        {"id": "not-a-uuid", "status": "new"},
        {"id": str(ORDER_ID), "status": "lost"},
        {"id": str(ORDER_ID)},
        {"id": 5, "status": "new"},
    ],
)
def test_served_message_rejects_invalid(data):
    with pytest.raises(ValueError):
        OrderServedMessage.from_dict(data)


def test_amount_must_be_integer():
    with pytest.raises(ValueError):
        OrderMessage.from_dict({"amount": "10"})