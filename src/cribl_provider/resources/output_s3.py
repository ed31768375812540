"""S3 destination resource: converters and lifecycle handler.

Config and wire records share snake_case field names apart from the
renames below, so conversion copies fields by name. ``default_id`` exists
only in config; the AWS credentials (``aws_api_key``, ``aws_secret_key``) are
``SecretStr`` locally.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any

from pydantic import SecretStr

from cribl_provider.client.client import OUTPUTS_PATH
from cribl_provider.client.models import OutputS3
from cribl_provider.config.models import OutputS3Resource, ResourceKind
from cribl_provider.resources.base import ApiResourceHandler

# config name -> wire name
_RENAMED = {"stream_tags": "streamtags"}
_CONFIG_ONLY = frozenset({"default_id"})
_SECRETS = frozenset({"aws_api_key", "aws_secret_key"})


def _shared_fields() -> list[str]:
    wire_fields = set(OutputS3.model_fields)
    return [
        name
        for name in OutputS3Resource.model_fields
        if name not in _CONFIG_ONLY and _RENAMED.get(name, name) in wire_fields
    ]


SHARED_FIELDS = _shared_fields()


def to_wire(config: OutputS3Resource) -> OutputS3:
    data: dict[str, Any] = {}
    for name in SHARED_FIELDS:
        value = getattr(config, name)
        if isinstance(value, SecretStr):
            value = value.get_secret_value()
        elif isinstance(value, list):
            value = list(value)
        data[_RENAMED.get(name, name)] = value
    return OutputS3.model_validate(data)


def from_wire(wire: OutputS3, prior: OutputS3Resource | None = None) -> OutputS3Resource:
    """Refresh *prior* from the remote copy; omitted fields keep prior values.

    The management API does not echo write-only secrets, so those survive
    from *prior*.
    """
    if prior is not None:
        base: dict[str, Any] = prior.model_dump()
    else:
        base = {"default_id": wire.id, "deadletter_enabled": False}
    for name in SHARED_FIELDS:
        value = getattr(wire, _RENAMED.get(name, name))
        if value is None:
            continue
        if name in _SECRETS:
            value = SecretStr(value)
        base[name] = value
    return OutputS3Resource.model_validate(base)


class OutputS3Handler(ApiResourceHandler[OutputS3Resource, OutputS3]):
    kind = ResourceKind.OUTPUT_S3
    path = OUTPUTS_PATH
    wire_model = OutputS3
    # Some Cribl releases answer output creation with 205 Reset Content.
    create_statuses = (HTTPStatus.OK, HTTPStatus.RESET_CONTENT)

    def to_wire(self, config: OutputS3Resource) -> OutputS3:
        return to_wire(config)

    def from_wire(
        self, wire: OutputS3, prior: OutputS3Resource | None = None
    ) -> OutputS3Resource:
        return from_wire(wire, prior)
