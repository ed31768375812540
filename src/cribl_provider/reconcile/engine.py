"""Reconciler: desired-state document vs. recorded state vs. remote objects."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum

import structlog

from cribl_provider.config.models import ResourceConfig, ResourceKind, ResourcesDocument
from cribl_provider.reconcile.state import ProviderState
from cribl_provider.resources.base import ResourceError, ResourceHandler

logger = structlog.get_logger()

# Outputs before the pipelines that route to them, pipelines before inputs.
APPLY_ORDER: tuple[ResourceKind, ...] = (
    ResourceKind.OUTPUT_S3,
    ResourceKind.PIPELINE,
    ResourceKind.INPUT_DATAGEN,
)


class Action(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    NOOP = "noop"


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"


@dataclass
class Diagnostic:
    severity: Severity
    summary: str
    detail: str
    kind: ResourceKind | None = None
    resource_id: str | None = None

    @classmethod
    def from_error(cls, exc: ResourceError) -> Diagnostic:
        return cls(
            severity=Severity.ERROR,
            summary=exc.summary,
            detail=exc.detail,
            kind=exc.kind,
            resource_id=exc.resource_id,
        )


@dataclass
class PlannedChange:
    action: Action
    kind: ResourceKind
    resource_id: str
    desired: ResourceConfig | None = None
    prior: ResourceConfig | None = None


@dataclass
class ApplyResult:
    changes: list[PlannedChange] = field(default_factory=list)
    applied: list[PlannedChange] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not any(d.severity == Severity.ERROR for d in self.diagnostics)


class Reconciler:
    """Drives handlers to converge remote objects onto a resources document.

    Resources are processed one at a time. A failed transition becomes a
    diagnostic and leaves that resource's recorded state untouched; the
    remaining resources still proceed.
    """

    def __init__(self, handlers: Mapping[ResourceKind, ResourceHandler]) -> None:
        self._handlers = handlers

    def _handler(self, kind: ResourceKind) -> ResourceHandler:
        handler = self._handlers.get(kind)
        if handler is None:
            msg = f"No handler registered for resource kind: {kind}"
            raise ValueError(msg)
        return handler

    async def refresh(self, state: ProviderState) -> list[Diagnostic]:
        """Re-read every recorded resource; drop the ones gone remotely."""
        diagnostics: list[Diagnostic] = []
        for kind in APPLY_ORDER:
            for resource_id in state.ids(kind):
                prior = state.get(kind, resource_id)
                try:
                    current = await self._handler(kind).read(prior)
                except ResourceError as exc:
                    diagnostics.append(Diagnostic.from_error(exc))
                    continue
                if current is None:
                    logger.info("reconcile.dropped", kind=kind, resource_id=resource_id)
                    state.remove(kind, resource_id)
                    diagnostics.append(
                        Diagnostic(
                            severity=Severity.WARNING,
                            summary=f"{kind} no longer exists in Cribl",
                            detail="Removed from state; the next apply recreates it "
                            "if it is still declared.",
                            kind=kind,
                            resource_id=resource_id,
                        )
                    )
                else:
                    state.put(kind, current)
        return diagnostics

    def plan(
        self, document: ResourcesDocument, state: ProviderState
    ) -> list[PlannedChange]:
        changes: list[PlannedChange] = []
        desired_by_kind = document.by_kind()
        for kind in APPLY_ORDER:
            for desired in desired_by_kind[kind]:
                prior = state.get(kind, desired.id)
                if prior is None:
                    action = Action.CREATE
                elif prior != desired:
                    action = Action.UPDATE
                else:
                    action = Action.NOOP
                changes.append(
                    PlannedChange(action, kind, desired.id, desired=desired, prior=prior)
                )
        # Deletes run last, in reverse dependency order.
        for kind in reversed(APPLY_ORDER):
            desired_ids = {d.id for d in desired_by_kind[kind]}
            for resource_id in state.ids(kind):
                if resource_id not in desired_ids:
                    changes.append(
                        PlannedChange(
                            Action.DELETE,
                            kind,
                            resource_id,
                            prior=state.get(kind, resource_id),
                        )
                    )
        return changes

    async def apply(
        self,
        document: ResourcesDocument,
        state: ProviderState,
        *,
        refresh: bool = True,
    ) -> ApplyResult:
        result = ApplyResult()
        if refresh:
            result.diagnostics.extend(await self.refresh(state))
        result.changes = self.plan(document, state)
        for change in result.changes:
            if change.action == Action.NOOP:
                continue
            try:
                await self._execute(change, state)
            except ResourceError as exc:
                logger.warning(
                    "reconcile.failed",
                    action=change.action,
                    kind=change.kind,
                    resource_id=change.resource_id,
                    error=str(exc),
                )
                result.diagnostics.append(Diagnostic.from_error(exc))
                continue
            result.applied.append(change)
        return result

    async def destroy(self, state: ProviderState) -> ApplyResult:
        """Delete every recorded resource."""
        return await self.apply(ResourcesDocument(), state, refresh=False)

    async def import_resource(
        self, kind: ResourceKind, resource_id: str, state: ProviderState
    ) -> ResourceConfig | None:
        """Adopt an existing remote object into *state*.

        Returns ``None`` when no such object exists remotely.
        """
        config = await self._handler(kind).import_state(resource_id)
        if config is not None:
            state.put(kind, config)
            logger.info("reconcile.imported", kind=kind, resource_id=resource_id)
        return config

    async def _execute(self, change: PlannedChange, state: ProviderState) -> None:
        handler = self._handler(change.kind)
        if change.action == Action.CREATE:
            state.put(change.kind, await handler.create(change.desired))
        elif change.action == Action.UPDATE:
            state.put(change.kind, await handler.update(change.desired))
        elif change.action == Action.DELETE:
            await handler.delete(change.prior)
            state.remove(change.kind, change.resource_id)
