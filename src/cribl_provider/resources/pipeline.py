"""Pipeline resource: converters and lifecycle handler."""

from __future__ import annotations

from typing import Any

from cribl_provider.client.client import PIPELINES_PATH
from cribl_provider.client.models import Pipeline, PipelineConf
from cribl_provider.config.models import PipelineResource, ResourceKind
from cribl_provider.resources.base import ApiResourceHandler

# Used for fields the remote copy omits when adopting an unmanaged pipeline.
IMPORT_DEFAULTS: dict[str, Any] = {"timeout_ms": 1000, "output": "default"}


def to_wire(config: PipelineResource) -> Pipeline:
    return Pipeline(
        id=config.id,
        conf=PipelineConf(
            async_func_timeout=config.timeout_ms,
            description=config.description,
            streamtags=list(config.tags) if config.tags is not None else None,
            output=config.output,
        ),
    )


def from_wire(wire: Pipeline, prior: PipelineResource | None = None) -> PipelineResource:
    """Refresh *prior* from the remote copy; omitted fields keep prior values."""
    base = prior.model_dump() if prior is not None else dict(IMPORT_DEFAULTS)
    observed = {
        "id": wire.id,
        "description": wire.conf.description,
        "timeout_ms": wire.conf.async_func_timeout,
        "output": wire.conf.output,
        "tags": wire.conf.streamtags,
    }
    base.update({k: v for k, v in observed.items() if v is not None})
    return PipelineResource.model_validate(base)


class PipelineHandler(ApiResourceHandler[PipelineResource, Pipeline]):
    kind = ResourceKind.PIPELINE
    path = PIPELINES_PATH
    wire_model = Pipeline

    def to_wire(self, config: PipelineResource) -> Pipeline:
        return to_wire(config)

    def from_wire(
        self, wire: Pipeline, prior: PipelineResource | None = None
    ) -> PipelineResource:
        return from_wire(wire, prior)
