import logging
import time

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from app.dependencies import TravelApiDep
from app.exceptions.custom import SearchValidationError
from app.exceptions.handlers import CORS_HEADERS
from app.routers.geo import proxy_search, with_search_defaults
from app.routers.search import read_json_object

logger = logging.getLogger(__name__)

router = APIRouter()


def build_poi_payload(body: dict) -> dict:
    if not body.get("poiName"):
        raise SearchValidationError("poiName is required")
    return with_search_defaults(body, {"poiName": body["poiName"]})


@router.options("/travelapi-search-poi")
async def poi_preflight() -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post("/travelapi-search-poi")
async def travelapi_search_poi(request: Request, travel_api: TravelApiDep) -> JSONResponse:
    started = time.monotonic()
    payload = build_poi_payload(await read_json_object(request))
    logger.info(
        "POI search: %r %s - %s", payload["poiName"], payload["checkin"], payload["checkout"]
    )
    return await proxy_search(travel_api.search_by_poi, payload, started, "POI")
