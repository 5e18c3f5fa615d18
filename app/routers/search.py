import json
import logging
import time

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from app.dependencies import SearchDep
from app.exceptions.custom import RateLimitError, SearchValidationError, SupabaseError
from app.exceptions.handlers import CORS_HEADERS
from app.services.search import elapsed_ms

logger = logging.getLogger(__name__)

router = APIRouter()


async def read_json_object(request: Request) -> dict:
    """Parse the raw request body, rejecting empty and non-object payloads."""
    raw = await request.body()
    logger.info("Request body length: %d bytes", len(raw))
    if not raw:
        raise SearchValidationError("Empty request body")
    try:
        payload = json.loads(raw)
    except ValueError:
        raise SearchValidationError("Invalid JSON") from None
    if not isinstance(payload, dict):
        raise SearchValidationError("Invalid JSON")
    return payload


@router.options("/travelapi-search")
async def search_preflight() -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post("/travelapi-search")
async def travelapi_search(request: Request, service: SearchDep) -> Response:
    started = time.monotonic()
    body = await read_json_object(request)

    try:
        result = await service.search(body, started=started)
    except (SearchValidationError, SupabaseError, RateLimitError):
        raise
    except Exception as exc:
        logger.exception("Search failed")
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal error",
                "message": str(exc) or type(exc).__name__,
                "duration_ms": elapsed_ms(started),
            },
            headers=CORS_HEADERS,
        )

    if result.raw is not None:
        return Response(
            content=result.raw,
            status_code=result.status_code,
            media_type="application/json",
            headers=CORS_HEADERS,
        )
    return JSONResponse(
        status_code=result.status_code, content=result.payload, headers=CORS_HEADERS
    )
