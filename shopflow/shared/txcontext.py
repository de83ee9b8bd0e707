"""Carry the current database transaction implicitly through a call chain."""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator

_current_tx: ContextVar[Any] = ContextVar("shopflow_current_tx", default=None)


@contextmanager
def with_tx(tx: Any) -> Iterator[Any]:
    """Make ``tx`` the current transaction for the duration of the block."""
    token = _current_tx.set(tx)
    try:
        yield tx
    finally:
        _current_tx.reset(token)


def from_context() -> Any:
    """Return the current transaction, or None when none is bound."""
    return _current_tx.get()