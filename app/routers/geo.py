import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from app.dependencies import TravelApiDep
from app.exceptions.custom import SearchValidationError
from app.exceptions.handlers import CORS_HEADERS
from app.routers.search import read_json_object
from app.services.search import elapsed_ms
from app.services.travel_api import describe_error

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_RADIUS = 5000
DEFAULT_RESIDENCY = "us"
DEFAULT_CURRENCY = "USD"


def with_search_defaults(body: dict, payload: dict) -> dict:
    return {
        **payload,
        "checkin": body.get("checkin"),
        "checkout": body.get("checkout"),
        "guests": body.get("guests"),
        "radius": body.get("radius") or DEFAULT_RADIUS,
        "residency": body.get("residency") or DEFAULT_RESIDENCY,
        "currency": body.get("currency") or DEFAULT_CURRENCY,
    }


def build_geo_payload(body: dict) -> dict:
    if body.get("latitude") is None or body.get("longitude") is None:
        raise SearchValidationError("latitude and longitude are required")
    return with_search_defaults(
        body, {"latitude": body["latitude"], "longitude": body["longitude"]}
    )


async def proxy_search(
    search: Callable[[dict[str, Any]], Awaitable[httpx.Response]],
    payload: dict[str, Any],
    started: float,
    label: str,
) -> JSONResponse:
    """Run a single-attempt upstream search and shape its reply.

    Transport failures become 503, non-2xx replies keep the upstream status,
    success is wrapped as ``{"success": true, ...}``.
    """
    try:
        resp = await search(payload)
    except (httpx.HTTPError, asyncio.TimeoutError) as exc:
        logger.error("%s search transport error: %s", label, describe_error(exc))
        return JSONResponse(
            status_code=503,
            content={
                "error": "Service temporarily unavailable",
                "details": describe_error(exc),
                "duration_ms": elapsed_ms(started),
            },
            headers=CORS_HEADERS,
        )

    if not resp.is_success:
        logger.error("%s search backend error: %d", label, resp.status_code)
        return JSONResponse(
            status_code=resp.status_code,
            content={
                "error": f"{label} search failed",
                "details": resp.text,
                "status": resp.status_code,
                "duration_ms": elapsed_ms(started),
            },
            headers=CORS_HEADERS,
        )

    try:
        data = resp.json()
    except ValueError:
        logger.error("%s search returned a non-JSON body", label)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "details": "Invalid JSON from backend"},
            headers=CORS_HEADERS,
        )
    if not isinstance(data, dict):
        data = {"hotels": data}
    logger.info("%s search complete: %d hotels", label, len(data.get("hotels") or []))
    return JSONResponse(
        content={"success": True, **data, "duration_ms": elapsed_ms(started)},
        headers=CORS_HEADERS,
    )


@router.options("/travelapi-search-geo")
async def geo_preflight() -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post("/travelapi-search-geo")
async def travelapi_search_geo(request: Request, travel_api: TravelApiDep) -> JSONResponse:
    started = time.monotonic()
    payload = build_geo_payload(await read_json_object(request))
    logger.info(
        "Geo search: [%s, %s] radius=%sm %s - %s",
        payload["latitude"], payload["longitude"], payload["radius"],
        payload["checkin"], payload["checkout"],
    )
    return await proxy_search(travel_api.search_by_geo, payload, started, "Geo")
