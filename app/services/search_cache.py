import logging
from typing import Any

from app.schemas.search import CachedSearch, SearchCacheRow
from app.services.supabase import SupabaseService

logger = logging.getLogger(__name__)


def reconstruct_hotels(
    hotel_ids: list[str], rates_index: dict[str, Any]
) -> list[dict[str, Any]]:
    """Rebuild minimal hotel results from a cached id list and its rate index.

    Every id yields exactly one result, in cache order. Ids without an entry
    in the rate index get empty rate fields.
    """
    hotels = []
    for hotel_id in hotel_ids:
        rate_info = rates_index.get(hotel_id)
        if not isinstance(rate_info, dict):
            rate_info = {}
        hotels.append({
            "hotel_id": hotel_id,
            "id": hotel_id,
            "rates": rate_info.get("rates") or [],
            "price": rate_info.get("price"),
        })
    return hotels


class SearchCacheReader:
    def __init__(self, supabase: SupabaseService | None):
        self._supabase = supabase

    async def get_cached_search(self, region_id: int) -> CachedSearch | None:
        """Return the newest cached search for a region. Best-effort, never raises."""
        if self._supabase is None:
            logger.debug("Search cache not configured, skipping lookup")
            return None

        try:
            logger.info("Checking cache for region_id=%s", region_id)
            row = await self._supabase.get_latest_search_cache(region_id)
            if row is None:
                logger.info("No cache found for region_id=%s", region_id)
                return None

            entry = SearchCacheRow(**row)
            expired = entry.is_expired()
            if expired:
                logger.info("Cache for region_id=%s expired, will try live search", region_id)

            hotels = reconstruct_hotels(entry.hotel_ids or [], entry.rates_index or {})
            logger.info(
                "Cache has %d hotels for region_id=%s (expired: %s)",
                len(hotels), region_id, expired,
            )
            total = entry.total_hotels if entry.total_hotels is not None else len(hotels)
            return CachedSearch(hotels=hotels, total=total, expired=expired)
        except Exception:
            logger.exception("Cache lookup failed for region_id=%s", region_id)
            return None
