from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse

from ipcheck.client_ip import client_ip
from ipcheck.config import (
    APP_VERSION,
    GEO_API_URL,
    GEO_CACHE_MAX_ENTRIES,
    GEO_CACHE_TTL_SECONDS,
    GEO_TIMEOUT_SECONDS,
    STATS_DB_FILE,
)
from ipcheck.errors import StoreError
from ipcheck.fetchers.ipwhois import IpWhoisResolver
from ipcheck.geo import GeoService
from ipcheck.geo_cache import GeoCache
from ipcheck.render import is_cli_agent, render_ip_page, render_stats
from ipcheck.store import VisitStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

_start_time: float = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI):
    global _start_time

    _start_time = time.monotonic()
    visits = VisitStore(STATS_DB_FILE)

    with httpx.Client(timeout=GEO_TIMEOUT_SECONDS) as client:
        app.state.geo = GeoService(
            resolver=IpWhoisResolver(client, base_url=GEO_API_URL),
            cache=GeoCache(max_entries=GEO_CACHE_MAX_ENTRIES),
            ttl=GEO_CACHE_TTL_SECONDS,
        )
        app.state.visits = visits
        logger.info(
            "ipcheck %s ready (geo ttl %ds, timeout %.1fs)",
            APP_VERSION, GEO_CACHE_TTL_SECONDS, GEO_TIMEOUT_SECONDS,
        )
        try:
            yield
        finally:
            visits.close()


# Every path not routed below answers with the caller's IP, so the generated
# docs pages are switched off.
app = FastAPI(
    title="IP Check",
    lifespan=lifespan,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)


def _uptime_str() -> str:
    elapsed = time.monotonic() - _start_time
    days = int(elapsed // 86400)
    hours = int((elapsed % 86400) // 3600)
    if days > 0:
        return f"{days}d {hours}h"
    minutes = int((elapsed % 3600) // 60)
    return f"{hours}h {minutes}m"


# Handlers are plain functions: Starlette runs them in its thread pool, and
# the geo lookup blocks on the provider for up to GEO_TIMEOUT_SECONDS.

@app.get("/stats", response_class=PlainTextResponse)
def show_stats(request: Request):
    geo: GeoService = request.app.state.geo
    visits: VisitStore = request.app.state.visits
    try:
        items = visits.items()
    except StoreError:
        logger.exception("Failed to read visit stats")
        return PlainTextResponse("internal error\n", status_code=500)
    rows = [(ip, *geo.lookup(ip), count) for ip, count in items]
    return PlainTextResponse(render_stats(rows))


@app.get("/api/v1/status")
def get_status(request: Request):
    geo: GeoService = request.app.state.geo
    visits: VisitStore = request.app.state.visits
    try:
        tracked = visits.count
    except StoreError:
        logger.exception("Failed to count tracked addresses")
        tracked = None
    return JSONResponse(
        content={
            "version": APP_VERSION,
            "uptime": _uptime_str(),
            "geo_cache_entries": len(geo.cache),
            "tracked_ips": tracked,
        }
    )


@app.get("/{path:path}")
def show_ip(request: Request, path: str):
    geo: GeoService = request.app.state.geo
    visits: VisitStore = request.app.state.visits

    ip = client_ip(request.headers, request.client.host if request.client else "")
    country, code = geo.lookup(ip)

    try:
        visits.increment(ip)
    except StoreError:
        logger.exception("Failed to record visit for %s", ip)
        return PlainTextResponse("internal error\n", status_code=500)

    if is_cli_agent(request.headers.get("user-agent", "")):
        return PlainTextResponse(f"{ip}\n")
    return HTMLResponse(render_ip_page(ip, country, code))
