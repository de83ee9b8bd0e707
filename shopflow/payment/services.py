"""Business operations of the payment service."""

from __future__ import annotations

import uuid

from ..shared.errs import bad_request, is_not_found
from .model import Account, OrderMessage, OrderServedMessage, OrderStatus
from .storage import Storage


class PaymentService:
    def __init__(self, storage: Storage) -> None:
        self._storage = storage

    def get_account(self, user_id: uuid.UUID) -> Account:
        with self._storage.begin() as repo:
            return repo.account().get_account(user_id)

    def create_account(self, user_id: uuid.UUID) -> Account:
        """Open an empty account; raise a 400 HTTPError when the user already has one."""
        with self._storage.begin() as repo:
            accounts = repo.account()
            try:
                accounts.get_account(user_id)
            except Exception as err:
                if not is_not_found(err):
                    raise
            else:
                raise bad_request("such user already has account")

            account = Account(user_id=user_id, amount=0)
            accounts.create_account(account)
            return account

    def replenish_account(self, user_id: uuid.UUID, amount: int) -> Account:
        """Add ``amount`` (possibly negative) to the balance, which may not drop below zero."""
        with self._storage.begin() as repo:
            accounts = repo.account()
            account = accounts.get_account(user_id)
            if account.amount + amount < 0:
                raise bad_request("not enough money on the account")
            account.amount += amount
            accounts.update_account(account)
            return account

    def serve_order(self, order: OrderMessage) -> None:
        """Charge the order's user and queue the outcome for the order service."""
        with self._storage.begin() as repo:
            accounts = repo.account()
            try:
                account = accounts.get_account(order.user_id)
            except Exception as err:
                if not is_not_found(err):
                    raise
                status = OrderStatus.CANCELLED
            else:
                if account.amount - order.amount < 0:
                    status = OrderStatus.CANCELLED
                else:
                    account.amount -= order.amount
                    accounts.update_account(account)
                    status = OrderStatus.FINISHED

            repo.outbox().add(OrderServedMessage(id=order.id, status=status))