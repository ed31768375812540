"""Async wrapper around the Cribl management REST API."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Collection
from http import HTTPStatus
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from cribl_provider.client.decoder import SUCCESS, decode, raise_for_status
from cribl_provider.client.errors import NotFoundError, StatusError
from cribl_provider.client.models import (
    AuthToken,
    ItemList,
    LoginInfo,
    SystemInfo,
    WireModel,
)

logger = structlog.get_logger()

T = TypeVar("T")

RequestDecorator = Callable[[httpx.Request], Awaitable[None]]

PIPELINES_PATH = "/pipelines"
OUTPUTS_PATH = "/system/outputs"
INPUTS_PATH = "/system/inputs"


def bearer_decorator(token: str) -> RequestDecorator:
    """Build a request decorator that attaches ``Authorization: Bearer``."""

    async def _set_auth_header(request: httpx.Request) -> None:
        request.headers["Authorization"] = f"Bearer {token}"

    return _set_auth_header


class CriblClient:
    """Thin async client for the Cribl management API.

    Every call is a single round trip. Request decorators run in order on
    each outgoing request before dispatch (httpx request event hooks).
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 30.0,
        verify_tls: bool = True,
        ready_max_attempts: int = 5,
        ready_wait_seconds: float = 2.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url
        self._ready_max_attempts = ready_max_attempts
        self._ready_wait_seconds = ready_wait_seconds
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout_seconds,
            verify=verify_tls,
            transport=transport,
            event_hooks={"request": [], "response": []},
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def request_decorators(self) -> list[RequestDecorator]:
        return self._client.event_hooks["request"]  # type: ignore[return-value]

    def add_request_decorator(self, decorator: RequestDecorator) -> None:
        """Append *decorator* to the chain applied to every later request."""
        self._client.event_hooks["request"].append(decorator)

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> CriblClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Issue one request. Transport errors propagate unchanged."""
        resp = await self._client.request(method, path, json=json)
        logger.debug(
            "cribl.request",
            method=method,
            path=path,
            status_code=resp.status_code,
        )
        return resp

    # -- Auth / system ---------------------------------------------------------

    async def login(self, username: str, password: str) -> AuthToken:
        """Exchange credentials for a bearer token."""
        resp = await self.request(
            "POST",
            "/auth/login",
            json=LoginInfo(username=username, password=password).to_body(),
        )
        return decode(resp, AuthToken)

    async def get_system_info(self) -> list[SystemInfo]:
        resp = await self.request("GET", "/system/info")
        return decode(resp, ItemList[SystemInfo]).items

    async def wait_until_ready(self) -> None:
        """Block until the management API health endpoint answers 200."""

        @retry(
            retry=retry_if_exception_type((httpx.TransportError, StatusError)),
            stop=stop_after_attempt(self._ready_max_attempts),
            wait=wait_exponential(multiplier=self._ready_wait_seconds, max=30),
            reraise=True,
        )
        async def _ping() -> None:
            resp = await self.request("GET", "/health")
            raise_for_status(resp)

        await _ping()
        logger.info("cribl.ready", url=self._base_url)

    # -- Collections -----------------------------------------------------------

    @staticmethod
    def item_path(collection: str, item_id: str) -> str:
        return f"{collection}/{quote(item_id, safe='')}"

    async def get_item(self, collection: str, item_id: str, model: type[T]) -> T:
        """Fetch one object; raises ``NotFoundError`` when it does not exist."""
        resp = await self.request("GET", self.item_path(collection, item_id))
        items = decode(resp, ItemList[model]).items  # type: ignore[valid-type]
        if not items:
            raise NotFoundError(
                int(HTTPStatus.NOT_FOUND),
                method="GET",
                url=str(resp.request.url),
                detail="empty item list",
            )
        return items[0]  # type: ignore[no-any-return]

    async def create_item(
        self,
        collection: str,
        body: WireModel,
        *,
        expected: Collection[int] = SUCCESS,
    ) -> httpx.Response:
        resp = await self.request("POST", collection, json=body.to_body())
        raise_for_status(resp, expected)
        return resp

    async def update_item(
        self,
        collection: str,
        item_id: str,
        body: WireModel,
        *,
        expected: Collection[int] = SUCCESS,
    ) -> httpx.Response:
        resp = await self.request(
            "PATCH", self.item_path(collection, item_id), json=body.to_body()
        )
        raise_for_status(resp, expected)
        return resp

    async def delete_item(
        self,
        collection: str,
        item_id: str,
        *,
        expected: Collection[int] = (HTTPStatus.OK, HTTPStatus.NO_CONTENT),
    ) -> httpx.Response:
        resp = await self.request("DELETE", self.item_path(collection, item_id))
        raise_for_status(resp, expected)
        return resp
