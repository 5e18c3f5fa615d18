import logging
from typing import Any

from app.schemas.search import HotelDumpRecord, StaticHotelRecord
from app.services.supabase import SupabaseService

logger = logging.getLogger(__name__)

MAX_CARD_IMAGES = 5
MAX_LOOKUP_IDS = 200


def hotel_key(hotel: dict[str, Any]) -> str | None:
    """Results carry their id as either ``hotel_id`` or ``id``."""
    value = hotel.get("hotel_id") or hotel.get("id")
    return str(value) if value else None


def unique_ids(values: list[Any]) -> list[str]:
    seen: dict[str, None] = {}
    for value in values:
        if value is None or value == "":
            continue
        seen.setdefault(str(value), None)
    return list(seen)


def process_images(
    raw_images: list[Any] | None, size: str, limit: int = MAX_CARD_IMAGES
) -> list[str]:
    """Turn stored image entries into card-sized URLs.

    Strings and ``{"tmpl": ...}`` entries have their ``{size}`` placeholder
    filled; ``{"url": ...}`` entries are used as-is. Anything else is dropped.
    """
    images: list[str] = []
    for img in (raw_images or [])[:limit]:
        if isinstance(img, str):
            url = img.replace("{size}", size)
        elif isinstance(img, dict) and isinstance(img.get("tmpl"), str):
            url = img["tmpl"].replace("{size}", size)
        elif isinstance(img, dict) and isinstance(img.get("url"), str):
            url = img["url"]
        else:
            url = None
        if url:
            images.append(url)
    return images


def build_static_data(record: StaticHotelRecord, image_size: str) -> dict[str, Any]:
    return {
        "name": record.name,
        "address": record.address,
        "city": record.city,
        "country": record.country,
        "star_rating": record.star_rating,
        "images": process_images(record.images, image_size),
        "coordinates": record.coordinates,
    }


def build_hotel_details(record: HotelDumpRecord) -> dict[str, Any]:
    return {
        "name": record.name,
        "address": record.address,
        "city": record.city,
        "country": record.country,
        "star_rating": record.star_rating,
        "coordinates": {"lat": record.latitude, "lon": record.longitude},
        "amenities": record.amenities or [],
        "description": record.description,
        "check_in_time": record.check_in_time,
        "check_out_time": record.check_out_time,
    }


class StaticDataEnricher:
    def __init__(self, supabase: SupabaseService | None, image_size: str = "640x400"):
        self._supabase = supabase
        self._image_size = image_size

    async def enrich(self, hotels: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Attach ``static_data`` to every hotel found in the static cache.

        Best-effort: on any lookup failure the input list is returned as-is.
        """
        if not hotels or self._supabase is None:
            return hotels

        hotel_ids = unique_ids([hotel_key(h) for h in hotels if isinstance(h, dict)])
        if not hotel_ids:
            return hotels

        logger.info("Enriching %d hotels with static data", len(hotel_ids))
        try:
            rows = await self._supabase.get_static_hotels(hotel_ids)
            records = [StaticHotelRecord(**row) for row in rows]
        except Exception:
            logger.exception("Static data lookup failed")
            return hotels

        if not records:
            logger.info("No static data found in cache")
            return hotels

        logger.info("Found static data for %d/%d hotels", len(records), len(hotel_ids))
        by_id = {r.hotel_id: r for r in records}

        enriched = []
        for hotel in hotels:
            record = by_id.get(hotel_key(hotel)) if isinstance(hotel, dict) else None
            if record is None:
                enriched.append(hotel)
                continue
            enriched.append({**hotel, "static_data": build_static_data(record, self._image_size)})
        return enriched

    async def lookup_details(
        self, hotel_ids: list[Any]
    ) -> tuple[dict[str, dict[str, Any]], str | None]:
        """Fetch descriptive details keyed by hotel id.

        Returns the mapping and an error message; failures yield an empty
        mapping with the error set.
        """
        if self._supabase is None:
            return {}, "No database connection"

        ids = unique_ids(hotel_ids)[:MAX_LOOKUP_IDS]
        if not ids:
            return {}, None

        try:
            rows = await self._supabase.get_hotel_dump(ids)
            records = [HotelDumpRecord(**row) for row in rows]
        except Exception as exc:
            logger.exception("Hotel details lookup failed")
            return {}, str(exc)

        by_hotel_id = {r.hotel_id: build_hotel_details(r) for r in records}
        logger.info("Hotel details returned %d/%d matches", len(by_hotel_id), len(ids))
        return by_hotel_id, None
