import logging
import sys
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from app.config import Settings
from app.exceptions.custom import RateLimitError, SearchValidationError, SupabaseError
from app.exceptions.handlers import (
    rate_limit_error_handler,
    search_validation_error_handler,
    supabase_error_handler,
)
from app.routers.destination import router as destination_router
from app.routers.enrich import router as enrich_router
from app.routers.geo import router as geo_router
from app.routers.poi import router as poi_router
from app.routers.search import router as search_router
from app.services.search import SearchService
from app.services.search_cache import SearchCacheReader
from app.services.static_data import StaticDataEnricher
from app.services.supabase import SupabaseService
from app.services.travel_api import TravelApiService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    config = settings.search_config()

    async with httpx.AsyncClient(timeout=30.0) as client:
        supabase: SupabaseService | None = None
        if settings.supabase_url and settings.supabase_service_role_key:
            supabase = SupabaseService(
                client, settings.supabase_url, settings.supabase_service_role_key
            )
        else:
            logger.warning("Supabase not configured, cache fallback and enrichment disabled")

        travel_api = TravelApiService(client, config)
        enricher = StaticDataEnricher(supabase, image_size=config.image_size)

        app.state.travel_api = travel_api
        app.state.enricher = enricher
        app.state.search_service = SearchService(
            travel_api, SearchCacheReader(supabase), enricher
        )

        yield


app = FastAPI(title="Travel API Proxy", lifespan=lifespan)

app.add_exception_handler(SearchValidationError, search_validation_error_handler)
app.add_exception_handler(SupabaseError, supabase_error_handler)
app.add_exception_handler(RateLimitError, rate_limit_error_handler)

app.include_router(search_router)
app.include_router(enrich_router)
app.include_router(geo_router)
app.include_router(poi_router)
app.include_router(destination_router)
