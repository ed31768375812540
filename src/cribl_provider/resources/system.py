"""Read-only system data source (build information)."""

from __future__ import annotations

import structlog

from cribl_provider.client.client import CriblClient
from cribl_provider.client.errors import DecodeError
from cribl_provider.client.models import Build

logger = structlog.get_logger()


class SystemDataSource:
    """Fetches a build snapshot from ``/system/info``; nothing is persisted."""

    def __init__(self, client: CriblClient) -> None:
        self._client = client

    async def read(self) -> Build:
        infos = await self._client.get_system_info()
        if not infos:
            msg = "Cribl system info response contained no items"
            raise DecodeError(msg)
        build = Build.from_system_info(infos[0])
        logger.debug("system.read", hostname=build.hostname, version=build.version)
        return build
