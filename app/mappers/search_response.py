import json
from typing import Any

from app.schemas.search import CachedSearch, RetryResult, WarmupResult

MAX_DETAILS_LENGTH = 1500

CACHE_WARNING_UNAVAILABLE = "Results from cache - live search unavailable"
CACHE_WARNING_ERRORS = "Results from cache - live search had errors"

UNAVAILABLE_MESSAGE = "Service temporarily unavailable. Please try again in 30 seconds."
BACKEND_ERROR_MESSAGE = "Backend service error. Please try again."
REJECTED_MESSAGE = "Search request was rejected. Please check your search parameters."


def destination_not_found_body(destination: Any) -> dict[str, Any]:
    name = "" if destination is None else str(destination)
    return {
        "error": f'"{name}" is not available for search. Try a major city nearby.',
        "hotels": [],
        "totalHotels": 0,
    }


def upstream_error_detail(text: str | None) -> str | None:
    """Pull ``error``/``message``/``details`` out of a JSON error body."""
    if not text:
        return None
    try:
        data = json.loads(text)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    for key in ("error", "message", "details"):
        value = data.get(key)
        if value:
            return value if isinstance(value, str) else json.dumps(value)
    return None


def upstream_preview(text: str | None) -> str:
    preview = upstream_error_detail(text) or text or ""
    return preview[:MAX_DETAILS_LENGTH]


def client_error_body(status: int, text: str | None) -> dict[str, Any]:
    return {
        "error": upstream_error_detail(text) or REJECTED_MESSAGE,
        "details": upstream_preview(text) or None,
        "upstream_status": status,
        "hotels": [],
        "totalHotels": 0,
    }


def cache_fallback_body(
    cached: CachedSearch,
    hotels: list[dict[str, Any]],
    warning: str,
    duration_ms: int,
) -> dict[str, Any]:
    return {
        "success": True,
        "hotels": hotels,
        "total": cached.total,
        "hasMore": False,
        "page": 1,
        "fromCache": True,
        "cacheWarning": warning,
        "cacheExpired": cached.expired,
        "duration_ms": duration_ms,
    }


def no_response_body(
    result: RetryResult, warmup: WarmupResult, duration_ms: int
) -> dict[str, Any]:
    if warmup.ok:
        details = "Backend is online but search endpoint is not responding"
    else:
        details = "Backend server is waking up"
    return {
        "error": UNAVAILABLE_MESSAGE,
        "details": details,
        "wasWarm": warmup.ok,
        "warmupStatus": warmup.status,
        "attempts": result.attempts,
        "lastStatus": result.last_status,
        "duration_ms": duration_ms,
        "hotels": [],
        "totalHotels": 0,
    }


def server_error_body(
    result: RetryResult,
    status: int,
    text: str | None,
    warmup: WarmupResult,
    duration_ms: int,
) -> dict[str, Any]:
    return {
        "error": BACKEND_ERROR_MESSAGE,
        "details": upstream_preview(text) or "Upstream returned a 5xx without a body",
        "upstream_status": status,
        "attempts": result.attempts,
        "lastStatus": status,
        "duration_ms": duration_ms,
        "wasWarm": warmup.ok,
        "warmupStatus": warmup.status,
        "hotels": [],
        "totalHotels": 0,
    }
