"""Normalize management API responses into wire models or typed errors."""

from __future__ import annotations

from collections.abc import Collection
from functools import lru_cache
from http import HTTPStatus
from typing import Any, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from cribl_provider.client.errors import DecodeError, NotFoundError, StatusError

T = TypeVar("T")

SUCCESS: tuple[int, ...] = (HTTPStatus.OK,)


@lru_cache(maxsize=64)
def _adapter(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def error_detail(response: httpx.Response) -> str | None:
    """Best-effort extraction of a server-side error message."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        for key in ("message", "error", "reason"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return None


def raise_for_status(
    response: httpx.Response, expected: Collection[int] = SUCCESS
) -> None:
    """Raise ``StatusError`` (``NotFoundError`` for 404) unless *expected*."""
    if response.status_code in expected:
        return
    cls = NotFoundError if response.status_code == HTTPStatus.NOT_FOUND else StatusError
    raise cls(
        response.status_code,
        method=response.request.method,
        url=str(response.request.url),
        detail=error_detail(response),
    )


def decode(
    response: httpx.Response,
    target: type[T] | Any,
    *,
    expected: Collection[int] = SUCCESS,
) -> T:
    """Validate a response body into *target*.

    The status must be one of *expected*; the body is read once and parsed
    as JSON. Malformed or schema-mismatched bodies raise ``DecodeError``.
    """
    raise_for_status(response, expected)
    body = response.read()
    try:
        return _adapter(target).validate_json(body)  # type: ignore[no-any-return]
    except ValidationError as exc:
        msg = (
            f"Unable to decode {response.request.method} "
            f"{response.request.url} response: {exc}"
        )
        raise DecodeError(msg) from exc
