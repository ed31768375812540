"""Provider bootstrap: resolve connection settings and authenticate a client."""

from __future__ import annotations

import os

import httpx
import structlog

from cribl_provider.client.client import CriblClient, bearer_decorator
from cribl_provider.client.errors import ConfigurationError, CriblError
from cribl_provider.config.models import BASE_URL_ENV, ProviderConfig

logger = structlog.get_logger()


def resolve_base_url(config: ProviderConfig) -> str:
    """Return the API root from config or ``$CRIBL_URL``.

    Raises ``ConfigurationError`` when neither is set.
    """
    base_url = config.base_url or os.environ.get(BASE_URL_ENV)
    if not base_url:
        msg = (
            "Unknown URL: the provider cannot reach Cribl without an endpoint. "
            f"Set 'base_url' or the {BASE_URL_ENV} environment variable."
        )
        raise ConfigurationError(msg, attribute="base_url")
    return base_url.rstrip("/") + "/" + config.api_prefix.strip("/")


async def configure(
    config: ProviderConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> CriblClient:
    """Build a client handle, exchanging credentials for a bearer token.

    With an explicit ``token`` no login happens. With ``username`` and
    ``password`` exactly one login call is made; any failure aborts
    configuration. Without credentials the client is unauthenticated.
    """
    base_url = resolve_base_url(config)
    client = CriblClient(
        base_url,
        timeout_seconds=config.timeout_seconds,
        verify_tls=config.verify_tls,
        ready_max_attempts=config.ready_max_attempts,
        ready_wait_seconds=config.ready_wait_seconds,
        transport=transport,
    )

    token: str | None = None
    if config.token is not None:
        token = config.token.get_secret_value()
    elif config.username is not None and config.password is not None:
        try:
            auth = await client.login(
                config.username, config.password.get_secret_value()
            )
        except (CriblError, httpx.TransportError) as exc:
            await client.close()
            msg = f"Unable to fetch auth token for cribl client: {exc}"
            raise ConfigurationError(msg) from exc
        token = auth.token
        if auth.force_password_change:
            logger.warning("provider.password_change_required", user=config.username)

    if token is not None:
        client.add_request_decorator(bearer_decorator(token))
        logger.info("provider.authenticated", url=base_url)
    else:
        logger.info("provider.anonymous", url=base_url)
    return client
