import asyncio
import json
import logging
import time
from typing import Any

from pydantic import BaseModel

from app.exceptions.custom import SearchValidationError
from app.mappers.search_decision import (
    Action,
    Outcome,
    classify_outcome,
    decide,
    is_destination_not_found,
)
from app.mappers.search_response import (
    CACHE_WARNING_ERRORS,
    CACHE_WARNING_UNAVAILABLE,
    cache_fallback_body,
    client_error_body,
    destination_not_found_body,
    no_response_body,
    server_error_body,
)
from app.schemas.search import CachedSearch, RetryResult, WarmupResult
from app.services.search_cache import SearchCacheReader
from app.services.static_data import StaticDataEnricher
from app.services.travel_api import TravelApiService

logger = logging.getLogger(__name__)


class SearchResponse(BaseModel):
    status_code: int
    payload: Any = None
    raw: str | None = None  # set when the upstream body is passed through verbatim


def parse_region_id(body: dict[str, Any]) -> int | None:
    raw = body.get("regionId")
    if raw is None:
        raw = body.get("region_id")
    if raw is None or isinstance(raw, bool):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


class SearchService:
    def __init__(
        self,
        travel_api: TravelApiService,
        cache_reader: SearchCacheReader,
        enricher: StaticDataEnricher,
    ):
        self._travel_api = travel_api
        self._cache_reader = cache_reader
        self._enricher = enricher

    async def search(self, body: dict[str, Any], started: float | None = None) -> SearchResponse:
        started = started if started is not None else time.monotonic()

        destination = body.get("destination")
        region_id = parse_region_id(body)
        logger.info("Search request: destination=%r region_id=%s", destination, region_id)

        if not destination and not region_id:
            raise SearchValidationError("destination or regionId is required")

        cached: CachedSearch | None = None
        if region_id:
            cached = await self._cache_reader.get_cached_search(region_id)

        warmup_task = asyncio.create_task(self._travel_api.warmup())
        try:
            result = await self._travel_api.search_with_retry(body)
            return await self._reconcile(body, result, cached, warmup_task, started)
        finally:
            if not warmup_task.done():
                warmup_task.cancel()
            elif not warmup_task.cancelled() and warmup_task.exception() is not None:
                logger.warning("Warmup task failed: %s", warmup_task.exception())

    async def _reconcile(
        self,
        body: dict[str, Any],
        result: RetryResult,
        cached: CachedSearch | None,
        warmup_task: "asyncio.Task[WarmupResult]",
        started: float,
    ) -> SearchResponse:
        resp = result.response
        status = resp.status_code if resp is not None else None
        text = resp.text if resp is not None else None

        outcome = classify_outcome(status, text)
        action = decide(outcome, cache_available=bool(cached and cached.hotels))
        logger.info(
            "Search outcome=%s action=%s attempts=%d last_status=%d",
            outcome, action, result.attempts, result.last_status,
        )

        if action == Action.reject:
            if is_destination_not_found(text):
                return SearchResponse(
                    status_code=400,
                    payload=destination_not_found_body(body.get("destination")),
                )
            return SearchResponse(status_code=400, payload=client_error_body(status, text))

        if action == Action.serve_cache:
            if outcome == Outcome.no_response:
                warning = CACHE_WARNING_UNAVAILABLE
            else:
                warning = CACHE_WARNING_ERRORS
            logger.info("Returning cached results as fallback (%s)", outcome)
            hotels = await self._enricher.enrich(cached.hotels)
            return SearchResponse(
                status_code=200,
                payload=cache_fallback_body(cached, hotels, warning, elapsed_ms(started)),
            )

        if action == Action.unavailable:
            try:
                warmup = await warmup_task
            except Exception:
                logger.exception("Warmup task failed")
                warmup = WarmupResult(ok=False)
            if outcome == Outcome.no_response:
                logger.error("All %d attempts failed without a response", result.attempts)
                payload = no_response_body(result, warmup, elapsed_ms(started))
            else:
                payload = server_error_body(result, status, text, warmup, elapsed_ms(started))
            return SearchResponse(status_code=503, payload=payload)

        return await self._serve_live(status, text)

    async def _serve_live(self, status: int, text: str) -> SearchResponse:
        try:
            data = json.loads(text)
        except ValueError:
            logger.warning("Upstream body is not JSON, passing it through")
            return SearchResponse(status_code=status, raw=text)

        if isinstance(data, dict) and isinstance(data.get("hotels"), list):
            data["hotels"] = await self._enricher.enrich(data["hotels"])
            logger.info("Returning %d live hotels", len(data["hotels"]))
        return SearchResponse(status_code=status, payload=data)
