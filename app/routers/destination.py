import asyncio
import json
import logging
from typing import Any

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from app.dependencies import TravelApiDep
from app.exceptions.custom import SearchValidationError
from app.exceptions.handlers import CORS_HEADERS
from app.routers.search import read_json_object
from app.services.travel_api import TravelApiService

logger = logging.getLogger(__name__)

router = APIRouter()

SERVICE_NAME = "travelapi-destination"
MIN_QUERY_LENGTH = 2
TIMEOUT_ERROR = "Request timed out"


def empty_results(**extra: Any) -> dict[str, Any]:
    return {"regions": [], "hotels": [], **extra}


def _reply(content: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content, headers=CORS_HEADERS)


@router.options("/travelapi-destination")
async def destination_preflight() -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)


@router.get("/travelapi-destination")
async def destination_health() -> JSONResponse:
    return _reply({"ok": True, "name": SERVICE_NAME})


@router.post("/travelapi-destination")
async def travelapi_destination(request: Request, travel_api: TravelApiDep) -> JSONResponse:
    """Autocomplete proxy. Every failure degrades to an empty 200 reply."""
    try:
        payload = await read_json_object(request)
    except SearchValidationError as exc:
        logger.warning("Destination request rejected: %s", exc.message)
        return _reply(empty_results())

    query = payload.get("query")
    if not isinstance(query, str) or len(query.strip()) < MIN_QUERY_LENGTH:
        return _reply(empty_results())

    logger.info("Destination search for %r", query)
    warmup_task = asyncio.create_task(travel_api.warmup())
    try:
        return await _lookup(travel_api, query)
    except Exception:
        logger.exception("Destination proxy error")
        return _reply(empty_results())
    finally:
        if not warmup_task.done():
            warmup_task.cancel()
        elif not warmup_task.cancelled() and warmup_task.exception() is not None:
            logger.warning("Warmup task failed: %s", warmup_task.exception())


async def _lookup(travel_api: TravelApiService, query: str) -> JSONResponse:
    try:
        result = await travel_api.search_destinations(query)
    except asyncio.TimeoutError:
        logger.warning("Destination search timed out")
        return _reply(empty_results())

    resp = result.response
    if resp is None:
        error = result.outcomes[-1].error if result.outcomes else None
        logger.error("Destination search failed: %s", error)
        if not error or error == TIMEOUT_ERROR:
            return _reply(empty_results())
        return _reply(empty_results(error=error))

    logger.info("Destination upstream status: %d", resp.status_code)
    if resp.status_code >= 500:
        logger.warning(
            "Upstream error %d after %d attempts, returning empty results",
            resp.status_code, result.attempts,
        )
        return _reply(empty_results(upstream_status=resp.status_code))

    data = json.loads(resp.text) if resp.text else empty_results()
    if isinstance(data, dict):
        logger.info(
            "Destination results: %d regions, %d hotels",
            len(data.get("regions") or []), len(data.get("hotels") or []),
        )
    return _reply(data, status_code=resp.status_code)
