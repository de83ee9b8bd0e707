import json
import uuid

import pytest
from werkzeug.test import EnvironBuilder
from werkzeug.wrappers import Request

from shopflow.order.rest import OrderHandler
from shopflow.shared.errs import HTTPError


class RecordingService:
    def __init__(self):
        self.calls = []

    def get_order(self, order_id):
        self.calls.append(("get", order_id))
        return {"got": order_id}

    def list_orders(self):
        self.calls.append(("list",))
        return ["first", "second"]

    def create_order(self, user_id, amount, description):
        self.calls.append(("create", user_id, amount, description))
        return {"created": True}


def make_request(method="GET", body=None, path_values=None):
    request = Request(EnvironBuilder(method=method, data=body).get_environ())
    request.path_values = path_values or {}
    return request


def test_get_order_passes_parsed_id():
    service = RecordingService()
    order_id = uuid.uuid4()
    result = OrderHandler(service).get_order(make_request(path_values={"orderId": str(order_id)}))
    assert result == {"got": order_id}
    assert service.calls == [("get", order_id)]


@pytest.mark.parametrize("path_values", [{"orderId": "not-a-uuid"}, {}])
def test_get_order_rejects_bad_id(path_values):
    service = RecordingService()
    with pytest.raises(HTTPError) as info:
        OrderHandler(service).get_order(make_request(path_values=path_values))
    assert info.value.code == 400
    assert info.value.message.startswith("orderId UUID path value must be specified: ")
    assert service.calls == []


def test_list_orders_returns_service_result():
    service = RecordingService()
    assert OrderHandler(service).list_orders(make_request()) == ["first", "second"]


def test_create_order_parses_body():
    service = RecordingService()
    user_id = uuid.uuid4()
    body = json.dumps({"user_id": str(user_id), "description": "book", "amount": 150})

    result = OrderHandler(service).create_order(make_request("POST", body))

    assert result == {"created": True}
    assert service.calls == [("create", user_id, 150, "book")]


def test_create_order_defaults_missing_fields():
    service = RecordingService()
    OrderHandler(service).create_order(make_request("POST", "{}"))
    assert service.calls == [("create", uuid.UUID(int=0), 0, "")]


@pytest.mark.parametrize(
    "body",
    [
        "{broken",
        "[1, 2]",
        '{"amount": "many"}',
        '{"amount": true}',
        '{"user_id": "nope"}',
        '{"description": 5}',
    ],
)
def test_create_order_rejects_invalid_body(body):
    service = RecordingService()
    with pytest.raises(HTTPError) as info:
        OrderHandler(service).create_order(make_request("POST", body))
    assert info.value.code == 400
    assert info.value.message.startswith("invalid body: ")
    assert service.calls == []