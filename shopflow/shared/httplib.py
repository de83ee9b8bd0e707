"""A small JSON-over-HTTP routing server built on werkzeug."""

from __future__ import annotations

import copy
import dataclasses
import enum
import json
import logging
import re
import uuid
from typing import Any, Callable

from werkzeug.exceptions import HTTPException, MethodNotAllowed, NotFound
from werkzeug.routing import Map, Rule
from werkzeug.wrappers import Request, Response

from .errs import HTTPError

Handler = Callable[[Request], Any]
Endpoint = Callable[[Request], Response]
Middleware = Callable[[Endpoint], Endpoint]

logger = logging.getLogger(__name__)

_JSON = "application/json"
_INTERNAL_ERROR_BODY = b'{"error": "Internal server error"}'
_WILDCARD = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)(\.\.\.)?\}")


def _json_default(obj: Any) -> Any:
    if isinstance(obj, uuid.UUID):
        return str(obj)
    if isinstance(obj, enum.Enum):
        return obj.value
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    raise TypeError(f"object of type {type(obj).__name__} is not JSON serializable")


def _encode(value: Any) -> bytes:
    return json.dumps(
        value, default=_json_default, separators=(",", ":"), ensure_ascii=False
    ).encode("utf-8")


def _to_rule(path: str) -> str:
    return _WILDCARD.sub(
        lambda m: f"<path:{m[1]}>" if m[2] else f"<{m[1]}>", path
    )


def handler_json(handle: Handler) -> Endpoint:
    """Wrap a handler returning a value into an endpoint producing a JSON response."""

    def endpoint(request: Request) -> Response:
        where = f"path={request.path} method={request.method}"
        logger.info("request accepted %s", where)
        try:
            result = handle(request)
        except HTTPError as err:
            logger.info("request served %s code=%d error=%s", where, err.code, err)
            return Response(_encode({"error": err.message}), status=err.code, mimetype=_JSON)
        except Exception:
            logger.exception("request failed %s code=500", where)
            return Response(_INTERNAL_ERROR_BODY, status=500, mimetype=_JSON)

        body = b"" if result is None else _encode(result)
        logger.info("request served %s code=200", where)
        return Response(body, status=200, mimetype=_JSON)

    return endpoint


def unmarshal_body(request: Request) -> Any:
    """Decode the request body as JSON; raises ValueError when it is not valid JSON."""
    return json.loads(request.get_data())


def send(code: int, body: Any) -> Response:
    """Build a response with the given status and a JSON-encoded body."""
    return Response(_encode(body), status=code, mimetype=_JSON)


class Server:
    """A WSGI application routing "METHOD /path" patterns to JSON handlers.

    Path wildcards are written ``{name}`` (one segment) or ``{name...}`` (the
    rest of the path); matched values are placed in ``request.path_values``.
    """

    def __init__(self) -> None:
        self._prefix = ""
        self._middlewares: list[Middleware] = []
        self._map = Map()
        self._endpoints: dict[str, Endpoint] = {}

    def get(self, path: str, handler: Handler) -> "Server":
        return self.handle("GET", path, handler)

    def post(self, path: str, handler: Handler) -> "Server":
        return self.handle("POST", path, handler)

    def put(self, path: str, handler: Handler) -> "Server":
        return self.handle("PUT", path, handler)

    def delete(self, path: str, handler: Handler) -> "Server":
        return self.handle("DELETE", path, handler)

    def handle(self, method: str, path: str, handler: Handler) -> "Server":
        """Register ``handler`` for ``method`` at this server's prefix plus ``path``."""
        endpoint = handler_json(handler)
        for middleware in self._middlewares:
            endpoint = middleware(endpoint)

        full_path = self._prefix + path
        pattern = f"{method} {full_path}"
        if pattern in self._endpoints:
            raise ValueError(f"pattern {pattern!r} is already registered")

        self._map.add(Rule(_to_rule(full_path), methods=[method], endpoint=pattern))
        self._endpoints[pattern] = endpoint
        return self

    def mount(self, prefix: str) -> "Server":
        """Return a view sharing the routes, with a longer prefix and its own middleware list."""
        child = copy.copy(self)
        child._prefix = self._prefix + prefix
        child._middlewares = list(self._middlewares)
        return child

    def use(self, *args: Middleware) -> "Server":
        """Append middlewares applied to handlers registered from now on."""
        self._middlewares.extend(args)
        return self

    def __call__(self, environ, start_response):
        request = Request(environ)
        adapter = self._map.bind_to_environ(environ)
        try:
            pattern, values = adapter.match()
        except NotFound:
            response = Response("404 page not found\n", status=404, mimetype="text/plain")
        except MethodNotAllowed as exc:
            allowed = ", ".join(sorted(exc.valid_methods or ()))
            response = Response(
                "Method Not Allowed\n",
                status=405,
                mimetype="text/plain",
                headers=[("Allow", allowed)],
            )
        except HTTPException as exc:
            response = exc.get_response(environ)
        else:
            request.path_values = values
            response = self._endpoints[pattern](request)
        return response(environ, start_response)