"""Database access for accounts and the payment outbox, within one transaction."""

from __future__ import annotations

import json
import uuid
from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine

from ..shared import txcontext
from ..shared.errs import not_found
from .model import Account

_GET = text("SELECT amount FROM accounts WHERE user_id = :user_id")
_CREATE = text("INSERT INTO accounts (user_id, amount) VALUES (:user_id, :amount)")
_UPDATE = text("UPDATE accounts SET amount = :amount WHERE user_id = :user_id")
_OUTBOX_ADD = text("INSERT INTO outbox (message) VALUES (:message)")


def _params(account: Account) -> dict[str, Any]:
    return {"user_id": str(account.user_id), "amount": account.amount}


class AccountRepository:
    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def get_account(self, user_id: uuid.UUID) -> Account:
        """Return the account; raise a 404 HTTPError when it does not exist."""
        row = self._conn.execute(_GET, {"user_id": str(user_id)}).first()
        if row is None:
            raise not_found("account with user_id %s not found", user_id)
        return Account(user_id=user_id, amount=row.amount)

    def create_account(self, account: Account) -> None:
        self._conn.execute(_CREATE, _params(account))

    def update_account(self, account: Account) -> None:
        self._conn.execute(_UPDATE, _params(account))


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

    def account(self) -> AccountRepository:
        return AccountRepository(self._conn)

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