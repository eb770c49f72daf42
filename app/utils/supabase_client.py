"""Supabase async client singleton (service-role)."""

from __future__ import annotations

import httpx
from supabase.lib.client_options import AsyncClientOptions

from app.config import settings
from supabase import AsyncClient, acreate_client

_service_client: AsyncClient | None = None


def _build_async_options() -> AsyncClientOptions:
    max_connections = max(10, settings.supabase_http_max_connections)
    max_keepalive_connections = max(
        5,
        min(max_connections, settings.supabase_http_max_keepalive_connections),
    )
    timeout_seconds = max(1, settings.supabase_postgrest_timeout_seconds)

    httpx_client = httpx.AsyncClient(
        timeout=httpx.Timeout(timeout_seconds),
        limits=httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_keepalive_connections,
        ),
    )

    return AsyncClientOptions(
        auto_refresh_token=False,
        persist_session=False,
        postgrest_client_timeout=timeout_seconds,
        storage_client_timeout=timeout_seconds,
        function_client_timeout=min(timeout_seconds, 30),
        httpx_client=httpx_client,
    )


async def get_service_client() -> AsyncClient:
    """Return the service-role Supabase client (bypasses RLS).

    The backend is the only writer; row-level security is not relied upon.
    """
    global _service_client
    if _service_client is None:
        _service_client = await acreate_client(
            settings.supabase_url,
            settings.supabase_service_key,
            options=_build_async_options(),
        )
    return _service_client
