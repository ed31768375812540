"""Health checks for the Cribl management API."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

import httpx
import structlog

from cribl_provider.client.client import CriblClient
from cribl_provider.client.errors import CriblError
from cribl_provider.resources.system import SystemDataSource

logger = structlog.get_logger()


class Status(StrEnum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    UNKNOWN = "unknown"


@dataclass
class ComponentHealth:
    name: str
    status: Status = Status.UNKNOWN
    detail: str = ""


@dataclass
class ProviderHealth:
    components: list[ComponentHealth] = field(default_factory=list)

    @property
    def healthy(self) -> bool:
        return all(c.status == Status.HEALTHY for c in self.components)

    @property
    def summary(self) -> dict[str, str]:
        return {c.name: c.status.value for c in self.components}


async def check_api(client: CriblClient) -> ComponentHealth:
    """Probe the management API health endpoint (with readiness backoff)."""
    try:
        await client.wait_until_ready()
        return ComponentHealth(
            name="management-api", status=Status.HEALTHY, detail=client.base_url
        )
    except (CriblError, httpx.TransportError) as exc:
        return ComponentHealth(
            name="management-api", status=Status.UNHEALTHY, detail=str(exc)
        )


async def check_system_info(client: CriblClient) -> ComponentHealth:
    """Probe an authenticated endpoint; fails when credentials are rejected."""
    try:
        build = await SystemDataSource(client).read()
        return ComponentHealth(
            name="system-info",
            status=Status.HEALTHY,
            detail=f"{build.hostname} {build.version}",
        )
    except (CriblError, httpx.TransportError) as exc:
        return ComponentHealth(
            name="system-info", status=Status.UNHEALTHY, detail=str(exc)
        )


async def check_provider_health(client: CriblClient) -> ProviderHealth:
    """Run all health checks and return aggregated result."""
    components = [await check_api(client)]
    if components[0].status == Status.HEALTHY:
        components.append(await check_system_info(client))
    logger.debug("health.checked", summary={c.name: c.status for c in components})
    return ProviderHealth(components=components)
