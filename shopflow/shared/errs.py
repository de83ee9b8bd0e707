"""HTTP-aware error type shared by the services."""

from __future__ import annotations


class HTTPError(Exception):
    """An error that carries the HTTP status code it should be reported with."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"HTTPError(code={self.code!r}, message={self.message!r})"


def _format(message: str, args: tuple) -> str:
    return message % args if args else message


def bad_request(message: str, *args: object) -> HTTPError:
    """Build a 400 error; ``message`` is %-formatted with ``args``."""
    return HTTPError(400, _format(message, args))


def not_found(message: str, *args: object) -> HTTPError:
    """Build a 404 error; ``message`` is %-formatted with ``args``."""
    return HTTPError(404, _format(message, args))


def is_not_found(err: BaseException | None) -> bool:
    """Report whether the first HTTPError in the ``__cause__`` chain is a 404."""
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        if isinstance(err, HTTPError):
            return err.code == 404
        seen.add(id(err))
        err = err.__cause__
    return False