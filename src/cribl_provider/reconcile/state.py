"""Persisted record of the last applied state of every managed resource.

The file holds write-only secrets in clear text (they cannot be read back
from the API), so it is written with owner-only permissions.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

import structlog
from pydantic import BaseModel, Field, SecretStr, ValidationError

from cribl_provider.config.models import MODEL_FOR_KIND, ResourceConfig, ResourceKind

logger = structlog.get_logger()

STATE_VERSION = 1


def _attributes(config: BaseModel) -> dict[str, Any]:
    data = config.model_dump(mode="json")
    for name in type(config).model_fields:
        value = getattr(config, name)
        if isinstance(value, SecretStr):
            data[name] = value.get_secret_value()
    return data


class StateEntry(BaseModel):
    kind: ResourceKind
    id: str
    attributes: dict[str, Any]

    def to_config(self) -> ResourceConfig:
        return MODEL_FOR_KIND[self.kind].model_validate(self.attributes)  # type: ignore[return-value]


class ProviderState(BaseModel):
    version: int = STATE_VERSION
    resources: list[StateEntry] = Field(default_factory=list)

    def get(self, kind: ResourceKind, resource_id: str) -> ResourceConfig | None:
        for entry in self.resources:
            if entry.kind == kind and entry.id == resource_id:
                return entry.to_config()
        return None

    def put(self, kind: ResourceKind, config: ResourceConfig) -> None:
        entry = StateEntry(kind=kind, id=config.id, attributes=_attributes(config))
        for i, existing in enumerate(self.resources):
            if existing.kind == kind and existing.id == config.id:
                self.resources[i] = entry
                return
        self.resources.append(entry)

    def remove(self, kind: ResourceKind, resource_id: str) -> None:
        self.resources = [
            e for e in self.resources if not (e.kind == kind and e.id == resource_id)
        ]

    def ids(self, kind: ResourceKind) -> list[str]:
        return [e.id for e in self.resources if e.kind == kind]


def load_state(path: str | Path) -> ProviderState:
    """Load the state file; a missing file is an empty state."""
    p = Path(path)
    if not p.exists():
        return ProviderState()
    try:
        state = ProviderState.model_validate_json(p.read_text())
    except ValidationError as exc:
        msg = f"Invalid state file ({p}):\n{exc}"
        raise ValueError(msg) from exc
    if state.version != STATE_VERSION:
        msg = f"Unsupported state version {state.version} in {p}"
        raise ValueError(msg)
    return state


def save_state(state: ProviderState, path: str | Path) -> None:
    """Atomically replace the state file."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=p.parent, prefix=f".{p.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w") as f:
            json.dump(state.model_dump(mode="json"), f, indent=2, sort_keys=True)
            f.write("\n")
        os.chmod(tmp, 0o600)
        os.replace(tmp, p)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise
    logger.debug("state.saved", path=str(p), resources=len(state.resources))
