"""Handler factory: maps ResourceKind to concrete handler classes."""

from __future__ import annotations

from cribl_provider.client.client import CriblClient
from cribl_provider.config.models import ResourceKind
from cribl_provider.resources.base import ApiResourceHandler
from cribl_provider.resources.input_datagen import InputDatagenHandler
from cribl_provider.resources.output_s3 import OutputS3Handler
from cribl_provider.resources.pipeline import PipelineHandler

_HANDLER_REGISTRY: dict[ResourceKind, type[ApiResourceHandler]] = {  # type: ignore[type-arg]
    ResourceKind.PIPELINE: PipelineHandler,
    ResourceKind.OUTPUT_S3: OutputS3Handler,
    ResourceKind.INPUT_DATAGEN: InputDatagenHandler,
}


def create_handler(kind: ResourceKind, client: CriblClient) -> ApiResourceHandler:  # type: ignore[type-arg]
    """Create the lifecycle handler for *kind*.

    Adding a resource kind = one handler class + one dict entry in
    ``_HANDLER_REGISTRY``.
    """
    cls = _HANDLER_REGISTRY.get(kind)
    if cls is None:
        msg = f"Unknown resource kind: {kind}"
        raise ValueError(msg)
    return cls(client)


def create_handlers(client: CriblClient) -> dict[ResourceKind, ApiResourceHandler]:  # type: ignore[type-arg]
    return {kind: cls(client) for kind, cls in _HANDLER_REGISTRY.items()}
