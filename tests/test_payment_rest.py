import json
import uuid

import pytest
from werkzeug.test import EnvironBuilder
from werkzeug.wrappers import Request

from shopflow.payment.model import Account
from shopflow.payment.rest import PaymentHandler
from shopflow.shared.errs import HTTPError


class FakeService:
    def __init__(self):
        self.calls = []

    def get_account(self, user_id):
        self.calls.append(("get", user_id))
        return Account(user_id=user_id, amount=1)

    def create_account(self, user_id):
        self.calls.append(("create", user_id))
        return Account(user_id=user_id, amount=0)

    def replenish_account(self, user_id, amount):
        self.calls.append(("replenish", user_id, amount))
        return Account(user_id=user_id, amount=amount)


def make_request(user_id, body=b"", method="GET"):
    request = Request(EnvironBuilder(method=method, data=body).get_environ())
    request.path_values = {"id": user_id}
    return request


def test_get_account_parses_path_id():
    service = FakeService()
    user_id = uuid.uuid4()
    account = PaymentHandler(service).get_account(make_request(str(user_id)))
    assert account.user_id == user_id
    assert service.calls == [("get", user_id)]


def test_create_account_parses_path_id():
    service = FakeService()
    user_id = uuid.uuid4()
    PaymentHandler(service).create_account(make_request(str(user_id), method="PUT"))
    assert service.calls == [("create", user_id)]


def test_invalid_path_id_raises_value_error():
    service = FakeService()
    with pytest.raises(ValueError):
        PaymentHandler(service).get_account(make_request("not-a-uuid"))
    assert service.calls == []


def test_replenish_passes_amount():
    service = FakeService()
    user_id = uuid.uuid4()
    body = json.dumps({"amount": 25}).encode()
    PaymentHandler(service).replenish_account(make_request(str(user_id), body, "POST"))
    assert service.calls == [("replenish", user_id, 25)]


def test_replenish_missing_amount_is_zero():
    service = FakeService()
    user_id = uuid.uuid4()
    PaymentHandler(service).replenish_account(make_request(str(user_id), b"{}", "POST"))
    assert service.calls == [("replenish", user_id, 0)]


@pytest.mark.parametrize(
    "body",
    [b"", b"{broken", b"[1]", b'{"amount": "5"}', b'{"amount": 1.5}', b'{"amount": true}'],
)
def test_replenish_invalid_body_is_bad_request(body):
    service = FakeService()
    with pytest.raises(HTTPError) as info:
        PaymentHandler(service).replenish_account(
            make_request(str(uuid.uuid4()), body, "POST")
        )
    assert info.value.code == 400
    assert info.value.message == "invalid format of body"
    assert service.calls == []