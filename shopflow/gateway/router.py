"""Reverse proxy that forwards requests to upstreams chosen by path prefix."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import requests
from werkzeug.wrappers import Request, Response

_NOT_FOUND_BODY = b'{"error":"Not Found","code":404}'
_INTERNAL_ERROR_BODY = b'{"error":"Internal server error","code":500}'
_BAD_GATEWAY_BODY = b'{"error":"Bad gateway","code":502}'

_PLAIN = "text/plain; charset=utf-8"

# Headers that describe the incoming connection rather than the request itself.
_DROPPED_REQUEST_HEADERS = frozenset({"host", "content-length"})
# The body is re-sent already decoded, so framing headers no longer apply.
_DROPPED_RESPONSE_HEADERS = frozenset(
    {"content-length", "content-encoding", "transfer-encoding", "connection"}
)


@dataclass(frozen=True)
class Location:
    """Requests whose path starts with ``prefix`` go to ``url`` plus the rest of the path."""

    prefix: str
    url: str


@dataclass
class Config:
    """The locations the router tries, in order."""

    locations: list[Location] = field(default_factory=list)


class Router:
    """A WSGI application forwarding each request to the first matching location."""

    def __init__(self, config: Config, logger: logging.Logger | None = None) -> None:
        self._locations = list(config.locations)
        self._logger = logger or logging.getLogger(__name__)
        self._session = requests.Session()

    def _match(self, path: str) -> tuple[Location, str] | None:
        for location in self._locations:
            if path.startswith(location.prefix):
                return location, path[len(location.prefix):]
        return None

    def route(self, request: Request) -> Response:
        """Forward ``request`` and return the upstream's response, or an error response."""
        where = f"path={request.path} method={request.method}"
        self._logger.info("request received %s", where)

        matched = self._match(request.path)
        if matched is None:
            return Response(_NOT_FOUND_BODY, status=404, content_type=_PLAIN)
        location, route_path = matched

        try:
            prepared = self._build_request(request, location, route_path)
        except Exception:
            self._logger.exception("failed to build request url=%s", location.url)
            return Response(_INTERNAL_ERROR_BODY, status=500, content_type=_PLAIN)

        try:
            upstream = self._session.send(prepared)
        except requests.RequestException as err:
            self._logger.error("failed to route request url=%s error=%s", location.url, err)
            return Response(_BAD_GATEWAY_BODY, status=502, content_type=_PLAIN)

        response = Response(upstream.content, status=upstream.status_code)
        response.headers.clear()
        for key, value in upstream.headers.items():
            if key.lower() not in _DROPPED_RESPONSE_HEADERS:
                response.headers.add(key, value)

        self._logger.info("request served %s code=%d", where, upstream.status_code)
        return response

    def _build_request(
        self, request: Request, location: Location, route_path: str
    ) -> requests.PreparedRequest:
        body = request.get_data()
        url = location.url + route_path
        query = request.query_string.decode("latin-1")
        if query:
            url = f"{url}?{query}"
        headers = {
            key: value
            for key, value in request.headers.items()
            if key.lower() not in _DROPPED_REQUEST_HEADERS
        }
        outgoing = requests.Request(
            method=request.method, url=url, data=body or None, headers=headers
        )
        return self._session.prepare_request(outgoing)

    def __call__(self, environ, start_response):
        return self.route(Request(environ))(environ, start_response)