import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from .custom import RateLimitError, SearchValidationError, SupabaseError

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
}


async def search_validation_error_handler(
    _request: Request, exc: SearchValidationError
) -> JSONResponse:
    logger.info("Rejected request: %s", exc.message)
    return JSONResponse(
        status_code=400,
        content={"error": exc.message},
        headers=CORS_HEADERS,
    )


async def supabase_error_handler(_request: Request, exc: SupabaseError) -> JSONResponse:
    logger.error("Supabase error: %s", exc.message)
    return JSONResponse(
        status_code=502,
        content={"error": f"Supabase error: {exc.message}"},
        headers=CORS_HEADERS,
    )


async def rate_limit_error_handler(_request: Request, exc: RateLimitError) -> JSONResponse:
    logger.warning("Rate limit hit for %s", exc.service)
    return JSONResponse(
        status_code=429,
        content={"error": str(exc)},
        headers=CORS_HEADERS,
    )
