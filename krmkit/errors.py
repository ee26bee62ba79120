"""Kubernetes API errors and helpers for ignoring expected failures."""

from __future__ import annotations

from typing import Callable

ErrorIs = Callable[[BaseException], bool]


class APIError(Exception):
    """An error reported by a Kubernetes API server."""

    def __init__(self, message: str, reason: str = "", code: int = 500) -> None:
        super().__init__(message)
        self.reason = reason
        self.code = code


class NotFoundError(APIError):
    """The requested resource does not exist."""

    def __init__(self, resource: str = "", name: str = "") -> None:
        super().__init__(f'{resource} "{name}" not found', reason="NotFound", code=404)
        self.resource = resource
        self.name = name


class BadRequestError(APIError):
    """The request was malformed."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason, reason="BadRequest", code=400)


def _chain(err: BaseException | None):
    while err is not None:
        yield err
        err = err.__cause__


def is_not_found(err: BaseException | None) -> bool:
    """Return whether err is, or was caused by, a not-found API error."""
    return any(isinstance(e, NotFoundError) for e in _chain(err))


def ignore(is_: ErrorIs, err: BaseException | None) -> BaseException | None:
    """Return None if err satisfies is_, otherwise err unchanged."""
    if is_(err):
        return None
    return err


def ignore_any(err: BaseException | None, *args: ErrorIs) -> BaseException | None:
    """Return None if err satisfies any of the predicates, otherwise err."""
    if any(predicate(err) for predicate in args):
        return None
    return err


def ignore_not_found(err: BaseException | None) -> BaseException | None:
    return ignore(is_not_found, err)


def is_api_error(err: BaseException | None) -> bool:
    return isinstance(err, APIError)


def is_api_error_wrapped(err: BaseException | None) -> bool:
    """Return whether the root cause of err is a Kubernetes API error."""
    root = None
    for root in _chain(err):
        pass
    return is_api_error(root)