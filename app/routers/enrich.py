import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from app.dependencies import EnricherDep
from app.exceptions.custom import RateLimitError, SupabaseError
from app.exceptions.handlers import CORS_HEADERS
from app.routers.search import read_json_object

logger = logging.getLogger(__name__)

router = APIRouter()

SERVICE_VERSION = "travelapi-enrich-v1"


@router.options("/travelapi-enrich")
async def enrich_preflight() -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post("/travelapi-enrich")
async def travelapi_enrich(request: Request, enricher: EnricherDep) -> JSONResponse:
    payload = await read_json_object(request)

    # Clients sometimes wrap the payload as {"body": {...}}
    if isinstance(payload.get("body"), dict):
        payload = payload["body"]

    mode = str(payload.get("mode") or "").strip().lower()
    logger.info("Enrich request mode=%r keys=%s", mode, sorted(payload))

    if mode == "ping":
        return JSONResponse(
            content={
                "ok": True,
                "version": SERVICE_VERSION,
                "now": datetime.now(timezone.utc).isoformat(),
            },
            headers=CORS_HEADERS,
        )

    hotel_ids = payload.get("hotelIds")
    if hotel_ids is None:
        hotel_ids = payload.get("hotel_ids")
    if not isinstance(hotel_ids, list):
        hotel_ids = []

    try:
        by_hotel_id, error = await enricher.lookup_details(hotel_ids)
    except (SupabaseError, RateLimitError):
        raise
    except Exception:
        logger.exception("Enrich failed")
        return JSONResponse(
            status_code=500, content={"error": "Internal error"}, headers=CORS_HEADERS
        )

    content: dict = {"byHotelId": by_hotel_id}
    if error:
        content["error"] = error
    return JSONResponse(content=content, headers=CORS_HEADERS)
