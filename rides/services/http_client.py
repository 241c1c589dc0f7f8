from __future__ import annotations

import os

import httpx

DEFAULT_CONTACT = "https://ridepool.local"
CLIENT_NAME = "RidePool/1.0"


def ridepool_user_agent() -> str:
    """User-Agent sent to public OSM services, whose usage policies require a contact."""
    override = (os.getenv("RIDEPOOL_USER_AGENT") or "").strip()
    if override:
        return override
    contact = (os.getenv("RIDEPOOL_CONTACT") or "").strip() or DEFAULT_CONTACT
    return f"{CLIENT_NAME} (contact: {contact})"


def default_http_timeout() -> httpx.Timeout:
    connect = float(os.getenv("RIDEPOOL_HTTP_CONNECT_TIMEOUT", "5.0"))
    read = float(os.getenv("RIDEPOOL_HTTP_READ_TIMEOUT", "10.0"))
    write = float(os.getenv("RIDEPOOL_HTTP_WRITE_TIMEOUT", str(read)))
    pool = float(os.getenv("RIDEPOOL_HTTP_POOL_TIMEOUT", "5.0"))
    return httpx.Timeout(connect=connect, read=read, write=write, pool=pool)


def _client_options(accept: str, timeout: httpx.Timeout | None) -> dict:
    return {
        "timeout": timeout or default_http_timeout(),
        "headers": {"User-Agent": ridepool_user_agent(), "Accept": accept},
        "follow_redirects": True,
    }


def build_http_client(*, accept: str = "application/json", timeout: httpx.Timeout | None = None) -> httpx.Client:
    return httpx.Client(**_client_options(accept, timeout))


def build_async_http_client(
    *,
    accept: str = "application/json",
    timeout: httpx.Timeout | None = None,
) -> httpx.AsyncClient:
    return httpx.AsyncClient(**_client_options(accept, timeout))
