from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict


class SearchCacheRow(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    hotel_ids: list[str] | None = None
    total_hotels: int | None = None
    rates_index: dict[str, Any] | None = None
    expires_at: datetime | None = None

    def is_expired(self, now: datetime | None = None) -> bool:
        """A row without an expiry is reported as expired."""
        if self.expires_at is None:
            return True
        now = now or datetime.now(timezone.utc)
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return expires_at < now


class CachedSearch(BaseModel):
    hotels: list[dict[str, Any]] = []
    total: int = 0
    expired: bool = False


class StaticHotelRecord(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    hotel_id: str
    name: str | None = None
    address: str | None = None
    city: str | None = None
    country: str | None = None
    star_rating: float | None = None
    images: list[Any] | None = None
    coordinates: dict[str, Any] | None = None


class HotelDumpRecord(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    hotel_id: str
    name: str | None = None
    address: str | None = None
    city: str | None = None
    country: str | None = None
    star_rating: float | None = None
    latitude: float | None = None
    longitude: float | None = None
    amenities: list[Any] | None = None
    description: str | None = None
    check_in_time: str | None = None
    check_out_time: str | None = None


class WarmupResult(BaseModel):
    ok: bool
    status: int = 0


class AttemptOutcome(BaseModel):
    attempt: int
    status: int  # 0 when no HTTP response was received
    retryable: bool
    error: str | None = None


class RetryResult(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    response: httpx.Response | None = None
    attempts: int
    last_status: int = 0
    outcomes: list[AttemptOutcome] = []
