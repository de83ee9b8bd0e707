"""Middleware that takes the caller's user ID from a request header."""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

from werkzeug.wrappers import Request, Response

from .httplib import Endpoint, send

HEADER_USER_ID = "X-User-ID"

_current_user_id: ContextVar[uuid.UUID | None] = ContextVar(
    "shopflow_user_id", default=None
)


def middleware_user_id(next: Endpoint) -> Endpoint:
    """Reject requests without a valid user ID header; bind the ID otherwise."""

    def endpoint(request: Request) -> Response:
        raw = request.headers.get(HEADER_USER_ID, "")
        if not raw:
            return send(400, {"error": f"{HEADER_USER_ID} header is not specified"})
        try:
            user_id = uuid.UUID(raw)
        except ValueError as err:
            return send(
                400,
                {"error": f"cannot parse user ID from {HEADER_USER_ID} header: {err}"},
            )
        with bind_user_id(user_id):
            return next(request)

    return endpoint


@contextmanager
def bind_user_id(user_id: uuid.UUID) -> Iterator[uuid.UUID]:
    """Make ``user_id`` the current user for the duration of the block."""
    token = _current_user_id.set(user_id)
    try:
        yield user_id
    finally:
        _current_user_id.reset(token)


def user_id_from_context() -> uuid.UUID | None:
    """Return the current user ID, or None when none is bound."""
    return _current_user_id.get()


def must_user_id_from_context() -> uuid.UUID:
    """Return the current user ID; raise RuntimeError when none is bound."""
    user_id = _current_user_id.get()
    if user_id is None:
        raise RuntimeError(
            "user ID is not bound to the current context, "
            "maybe you missed authentication middleware"
        )
    return user_id