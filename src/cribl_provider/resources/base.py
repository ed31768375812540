"""Resource handler protocol and the shared CRUD lifecycle.

Each managed resource kind moves through three lifecycle states:

- ``planned``   declared locally, no confirmed remote counterpart
- ``applied``   remote object exists, local state mirrors the last good read
- ``destroyed`` remote object removed (terminal)

Handlers perform exactly one HTTP round trip per call and keep no state of
their own beyond the shared, read-only client handle. Callers are expected to
serialize operations on the same resource id.
"""

from __future__ import annotations

from collections.abc import Collection
from http import HTTPStatus
from typing import Any, ClassVar, Generic, Protocol, TypeVar, runtime_checkable

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from cribl_provider.client.client import CriblClient
from cribl_provider.client.errors import CriblError, NotFoundError
from cribl_provider.client.models import WireModel
from cribl_provider.config.models import ResourceKind

logger = structlog.get_logger()

C = TypeVar("C", bound=BaseModel)
W = TypeVar("W", bound=WireModel)


class ResourceError(CriblError):
    """A lifecycle transition failed; the resource stays in its prior state."""

    def __init__(
        self,
        summary: str,
        *,
        kind: ResourceKind,
        resource_id: str,
        cause: BaseException,
    ) -> None:
        super().__init__(f"{summary}: {cause}")
        self.summary = summary
        self.kind = kind
        self.resource_id = resource_id
        self.cause = cause

    @property
    def detail(self) -> str:
        return str(self.cause)


@runtime_checkable
class ResourceHandler(Protocol):
    """Protocol every managed resource kind must satisfy."""

    @property
    def kind(self) -> ResourceKind:
        """The resource kind this handler manages."""
        ...

    async def create(self, config: Any) -> Any:
        """Planned -> Applied. Returns the state to persist."""
        ...

    async def read(self, state: Any) -> Any | None:
        """Refresh from the remote copy; ``None`` means it no longer exists."""
        ...

    async def update(self, config: Any) -> Any:
        """Applied -> Applied with the new declared values."""
        ...

    async def delete(self, state: Any) -> None:
        """Applied -> Destroyed."""
        ...

    async def import_state(self, resource_id: str) -> Any | None:
        """Adopt an existing remote object by id."""
        ...


_FAILURES = (CriblError, httpx.TransportError)


class ApiResourceHandler(Generic[C, W]):
    """CRUD against one management API collection.

    Subclasses bind the collection path, the wire model and the converters.
    Deletes are fatal on failure for every kind; a 404 on delete counts as
    already destroyed.
    """

    kind: ClassVar[ResourceKind]
    path: ClassVar[str]
    wire_model: ClassVar[type[WireModel]]
    create_statuses: ClassVar[Collection[int]] = (HTTPStatus.OK,)
    update_statuses: ClassVar[Collection[int]] = (HTTPStatus.OK,)

    def __init__(self, client: CriblClient) -> None:
        self._client = client

    def to_wire(self, config: C) -> W:
        raise NotImplementedError

    def from_wire(self, wire: W, prior: C | None = None) -> C:
        raise NotImplementedError

    async def create(self, config: C) -> C:
        resource_id = config.id  # type: ignore[attr-defined]
        try:
            await self._client.create_item(
                self.path, self.to_wire(config), expected=self.create_statuses
            )
        except _FAILURES as exc:
            raise ResourceError(
                f"Unable to create {self.kind} in Cribl",
                kind=self.kind,
                resource_id=resource_id,
                cause=exc,
            ) from exc
        logger.info(f"{self.kind}.created", resource_id=resource_id)
        return config

    async def read(self, state: C) -> C | None:
        return await self._read(state.id, state)  # type: ignore[attr-defined]

    async def update(self, config: C) -> C:
        resource_id = config.id  # type: ignore[attr-defined]
        try:
            await self._client.update_item(
                self.path,
                resource_id,
                self.to_wire(config),
                expected=self.update_statuses,
            )
        except _FAILURES as exc:
            raise ResourceError(
                f"Unable to update {self.kind} in Cribl",
                kind=self.kind,
                resource_id=resource_id,
                cause=exc,
            ) from exc
        logger.info(f"{self.kind}.updated", resource_id=resource_id)
        return config

    async def delete(self, state: C) -> None:
        resource_id = state.id  # type: ignore[attr-defined]
        try:
            await self._client.delete_item(self.path, resource_id)
        except NotFoundError:
            logger.info(f"{self.kind}.already_absent", resource_id=resource_id)
            return
        except _FAILURES as exc:
            raise ResourceError(
                f"Unable to delete {self.kind} from Cribl",
                kind=self.kind,
                resource_id=resource_id,
                cause=exc,
            ) from exc
        logger.info(f"{self.kind}.deleted", resource_id=resource_id)

    async def import_state(self, resource_id: str) -> C | None:
        return await self._read(resource_id, None)

    async def _read(self, resource_id: str, prior: C | None) -> C | None:
        try:
            wire = await self._client.get_item(
                self.path, resource_id, self.wire_model
            )
        except NotFoundError:
            logger.info(f"{self.kind}.not_found", resource_id=resource_id)
            return None
        except _FAILURES as exc:
            raise ResourceError(
                f"Unable to fetch {self.kind} from Cribl",
                kind=self.kind,
                resource_id=resource_id,
                cause=exc,
            ) from exc
        try:
            return self.from_wire(wire, prior)  # type: ignore[arg-type]
        except ValidationError as exc:
            raise ResourceError(
                f"Unable to read {self.kind} response from Cribl",
                kind=self.kind,
                resource_id=resource_id,
                cause=exc,
            ) from exc
