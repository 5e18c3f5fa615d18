import asyncio
import logging
from typing import Any

import httpx

from app.config import SearchConfig
from app.schemas.search import AttemptOutcome, RetryResult, WarmupResult

logger = logging.getLogger(__name__)

HEALTH_PATH = "/api/health"
SEARCH_PATH = "/api/ratehawk/search"
GEO_SEARCH_PATH = "/api/ratehawk/search/by-geo"
POI_SEARCH_PATH = "/api/ratehawk/search/by-poi"
DESTINATION_PATH = "/api/destination"


def is_retryable_status(status: int) -> bool:
    """Only server-side failures are worth another attempt."""
    return status >= 500


def describe_error(exc: Exception) -> str:
    if isinstance(exc, (asyncio.TimeoutError, httpx.TimeoutException)):
        return "Request timed out"
    if isinstance(exc, httpx.ConnectError):
        return "Connection error"
    text = str(exc).strip()
    if text:
        return text
    return type(exc).__name__


class TravelApiService:
    def __init__(self, client: httpx.AsyncClient, config: SearchConfig):
        self._client = client
        self._config = config

    async def warmup(self) -> WarmupResult:
        """Probe the health endpoint to wake a cold backend. Never raises."""
        url = f"{self._config.base_url}{HEALTH_PATH}"
        logger.info("Warming up travel API")
        try:
            resp = await asyncio.wait_for(
                self._client.get(url, timeout=self._config.warmup_timeout),
                timeout=self._config.warmup_timeout,
            )
        except (httpx.HTTPError, asyncio.TimeoutError) as exc:
            logger.warning("Warmup failed: %s", describe_error(exc))
            return WarmupResult(ok=False, status=0)

        logger.info("Health check: %d", resp.status_code)
        return WarmupResult(ok=resp.is_success, status=resp.status_code)

    async def search_with_retry(self, body: dict[str, Any]) -> RetryResult:
        """POST the search body upstream, retrying 5xx and transport failures.

        2xx, 3xx and 4xx responses are terminal. Between attempts the wait is
        ``retry_delay * attempt``. ``response`` is None only when no attempt
        got an HTTP response at all.
        """
        return await self._post_with_retry(
            SEARCH_PATH,
            body,
            max_attempts=self._config.max_retries,
            retry_delay=self._config.retry_delay,
            timeout=self._config.request_timeout,
        )

    async def search_destinations(self, query: str) -> RetryResult:
        """Autocomplete lookup with the same retry policy as the hotel search.

        The whole exchange, retries included, is bounded by
        ``destination_timeout``; ``asyncio.TimeoutError`` escapes when it runs out.
        """
        return await asyncio.wait_for(
            self._post_with_retry(
                DESTINATION_PATH,
                {"query": query},
                max_attempts=self._config.destination_attempts,
                retry_delay=self._config.destination_retry_delay,
                timeout=self._config.destination_timeout,
            ),
            timeout=self._config.destination_timeout,
        )

    async def _post_with_retry(
        self,
        path: str,
        body: dict[str, Any],
        max_attempts: int,
        retry_delay: float,
        timeout: float,
    ) -> RetryResult:
        url = f"{self._config.base_url}{path}"
        outcomes: list[AttemptOutcome] = []
        last_status = 0

        for attempt in range(1, max_attempts + 1):
            logger.info("Attempt %d/%d: %s", attempt, max_attempts, url)
            try:
                resp = await asyncio.wait_for(
                    self._client.post(
                        url,
                        json=body,
                        headers={"Content-Type": "application/json"},
                        timeout=timeout,
                    ),
                    timeout=timeout,
                )
            except (httpx.HTTPError, asyncio.TimeoutError) as exc:
                error = describe_error(exc)
                logger.error("Attempt %d failed: %s", attempt, error)
                outcomes.append(
                    AttemptOutcome(attempt=attempt, status=0, retryable=True, error=error)
                )
                if attempt < max_attempts:
                    await self._backoff(retry_delay, attempt)
                continue

            last_status = resp.status_code
            retryable = is_retryable_status(resp.status_code)
            outcomes.append(
                AttemptOutcome(attempt=attempt, status=resp.status_code, retryable=retryable)
            )

            if not retryable:
                return RetryResult(
                    response=resp, attempts=attempt, last_status=last_status, outcomes=outcomes
                )

            if attempt < max_attempts:
                logger.warning("Server error %d, will retry", resp.status_code)
                await self._backoff(retry_delay, attempt)
                continue

            logger.error("Server error %d on final attempt", resp.status_code)
            return RetryResult(
                response=resp, attempts=attempt, last_status=last_status, outcomes=outcomes
            )

        return RetryResult(
            response=None, attempts=max_attempts, last_status=last_status, outcomes=outcomes
        )

    async def _backoff(self, retry_delay: float, attempt: int) -> None:
        wait = retry_delay * attempt
        logger.info("Waiting %.1fs before retry", wait)
        await asyncio.sleep(wait)

    async def search_by_geo(self, payload: dict[str, Any]) -> httpx.Response:
        """Single-attempt geo search. Transport errors propagate to the caller."""
        return await self._post_once(GEO_SEARCH_PATH, payload)

    async def search_by_poi(self, payload: dict[str, Any]) -> httpx.Response:
        """Single-attempt point-of-interest search. Transport errors propagate."""
        return await self._post_once(POI_SEARCH_PATH, payload)

    async def _post_once(self, path: str, payload: dict[str, Any]) -> httpx.Response:
        url = f"{self._config.base_url}{path}"
        return await asyncio.wait_for(
            self._client.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self._config.geo_timeout,
            ),
            timeout=self._config.geo_timeout,
        )
