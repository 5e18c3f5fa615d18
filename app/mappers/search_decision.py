from enum import StrEnum

DESTINATION_NOT_FOUND_MARKER = "Destination not found"


class Outcome(StrEnum):
    no_response = "no_response"
    client_error = "client_error"
    server_error = "server_error"
    success = "success"


class Action(StrEnum):
    serve_live = "serve_live"
    serve_cache = "serve_cache"
    reject = "reject"
    unavailable = "unavailable"


def is_destination_not_found(body: str | None) -> bool:
    return bool(body) and DESTINATION_NOT_FOUND_MARKER in body


def classify_outcome(status: int | None, body: str | None = None) -> Outcome:
    """Classify the executor's final result.

    ``status`` is None when no attempt got an HTTP response. The
    destination-not-found marker is a client error whatever the status.
    """
    if status is None:
        return Outcome.no_response
    if is_destination_not_found(body):
        return Outcome.client_error
    if status >= 500:
        return Outcome.server_error
    if status >= 400:
        return Outcome.client_error
    return Outcome.success


def decide(outcome: Outcome, cache_available: bool) -> Action:
    """Map an outcome and cache availability to the response to build.

    The cache is only consulted for transient failures: client errors never
    fall back, and a live success is never replaced.
    """
    if outcome == Outcome.success:
        return Action.serve_live
    if outcome == Outcome.client_error:
        return Action.reject
    if cache_available:
        return Action.serve_cache
    return Action.unavailable
