"""Datagen input resource: converters and lifecycle handler."""

from __future__ import annotations

from typing import Any

from cribl_provider.client.client import INPUTS_PATH
from cribl_provider.client.models import DatagenSample, InputDatagen
from cribl_provider.config.models import (
    DatagenSampleConfig,
    InputDatagenResource,
    ResourceKind,
)
from cribl_provider.resources.base import ApiResourceHandler


def to_wire(config: InputDatagenResource) -> InputDatagen:
    samples = None
    if config.samples is not None:
        samples = [
            DatagenSample(events_per_sec=float(s.events_per_sec), sample=s.sample)
            for s in config.samples
        ]
    return InputDatagen(
        id=config.id,
        type=config.type,
        description=config.description,
        environment=config.environment,
        disabled=config.disabled,
        pipeline=config.pipeline,
        send_to_routes=config.send_to_routes,
        pq_enabled=config.pq_enabled,
        streamtags=list(config.stream_tags) if config.stream_tags is not None else None,
        samples=samples,
    )


def from_wire(
    wire: InputDatagen, prior: InputDatagenResource | None = None
) -> InputDatagenResource:
    """Refresh *prior* from the remote copy; omitted fields keep prior values."""
    base: dict[str, Any] = (
        prior.model_dump() if prior is not None else {"disabled": False}
    )
    samples = None
    if wire.samples is not None:
        samples = [
            DatagenSampleConfig(
                events_per_sec=round(s.events_per_sec), sample=s.sample
            ).model_dump()
            for s in wire.samples
        ]
    observed = {
        "id": wire.id,
        "type": wire.type,
        "description": wire.description,
        "environment": wire.environment,
        "disabled": wire.disabled,
        "pipeline": wire.pipeline,
        "send_to_routes": wire.send_to_routes,
        "pq_enabled": wire.pq_enabled,
        "stream_tags": wire.streamtags,
        "samples": samples,
    }
    base.update({k: v for k, v in observed.items() if v is not None})
    return InputDatagenResource.model_validate(base)


class InputDatagenHandler(ApiResourceHandler[InputDatagenResource, InputDatagen]):
    kind = ResourceKind.INPUT_DATAGEN
    path = INPUTS_PATH
    wire_model = InputDatagen

    def to_wire(self, config: InputDatagenResource) -> InputDatagen:
        return to_wire(config)

    def from_wire(
        self, wire: InputDatagen, prior: InputDatagenResource | None = None
    ) -> InputDatagenResource:
        return from_wire(wire, prior)
