import logging
from collections.abc import Iterable
from typing import Any

import httpx

from app.exceptions.custom import RateLimitError, SupabaseError

logger = logging.getLogger(__name__)

SEARCH_CACHE_TABLE = "search_cache"
STATIC_CACHE_TABLE = "hotel_static_cache"
HOTEL_DUMP_TABLE = "hotel_dump_data"

SEARCH_CACHE_COLUMNS = "hotel_ids,total_hotels,rates_index,expires_at"
STATIC_CACHE_COLUMNS = "hotel_id,name,address,city,country,star_rating,images,coordinates"
HOTEL_DUMP_COLUMNS = (
    "hotel_id,name,address,city,country,star_rating,latitude,longitude,"
    "amenities,description,check_in_time,check_out_time"
)


def in_filter(values: Iterable[Any]) -> str:
    """Build a PostgREST ``in.(...)`` filter with every value double-quoted."""
    quoted = []
    for value in values:
        text = str(value).replace("\\", "\\\\").replace('"', '\\"')
        quoted.append(f'"{text}"')
    return f"in.({','.join(quoted)})"


class SupabaseService:
    def __init__(self, client: httpx.AsyncClient, url: str, service_role_key: str):
        self._client = client
        self._rest_url = f"{url.rstrip('/')}/rest/v1"
        self._headers = {
            "apikey": service_role_key,
            "Authorization": f"Bearer {service_role_key}",
            "Accept": "application/json",
        }

    async def select(
        self,
        table: str,
        columns: str,
        filters: dict[str, str],
        order: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        params = {"select": columns, **filters}
        if order:
            params["order"] = order
        if limit is not None:
            params["limit"] = str(limit)

        resp = await self._client.get(
            f"{self._rest_url}/{table}", params=params, headers=self._headers
        )

        if resp.status_code == 429:
            raise RateLimitError("Supabase")
        if resp.status_code >= 400:
            raise SupabaseError(resp.text, status_code=resp.status_code)

        rows = resp.json()
        if not isinstance(rows, list):
            raise SupabaseError(f"Unexpected response from {table}", status_code=resp.status_code)
        return rows

    async def get_latest_search_cache(self, region_id: int) -> dict[str, Any] | None:
        rows = await self.select(
            SEARCH_CACHE_TABLE,
            SEARCH_CACHE_COLUMNS,
            {"region_id": f"eq.{region_id}"},
            order="cached_at.desc",
            limit=1,
        )
        return rows[0] if rows else None

    async def get_static_hotels(self, hotel_ids: list[str]) -> list[dict[str, Any]]:
        if not hotel_ids:
            return []
        return await self.select(
            STATIC_CACHE_TABLE,
            STATIC_CACHE_COLUMNS,
            {"hotel_id": in_filter(hotel_ids)},
        )

    async def get_hotel_dump(self, hotel_ids: list[str]) -> list[dict[str, Any]]:
        if not hotel_ids:
            return []
        return await self.select(
            HOTEL_DUMP_TABLE,
            HOTEL_DUMP_COLUMNS,
            {"hotel_id": in_filter(hotel_ids)},
        )
