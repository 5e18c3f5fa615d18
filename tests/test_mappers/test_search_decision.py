import pytest

from app.mappers.search_decision import Action, Outcome, classify_outcome, decide


@pytest.mark.parametrize(
    ("status", "body", "expected"),
    [
        (None, None, Outcome.no_response),
        (200, '{"hotels": []}', Outcome.success),
        (204, "", Outcome.success),
        (400, '{"error": "bad"}', Outcome.client_error),
        (404, "", Outcome.client_error),
        (500, "oops", Outcome.server_error),
        (503, "", Outcome.server_error),
        (200, '{"error": "Destination not found"}', Outcome.client_error),
        (500, "Destination not found", Outcome.client_error),
    ],
)
def test_classify_outcome(status, body, expected):
    assert classify_outcome(status, body) == expected


def test_success_is_never_replaced_by_cache():
    assert decide(Outcome.success, cache_available=True) == Action.serve_live
    assert decide(Outcome.success, cache_available=False) == Action.serve_live


def test_client_error_never_uses_cache():
    assert decide(Outcome.client_error, cache_available=True) == Action.reject
    assert decide(Outcome.client_error, cache_available=False) == Action.reject


def test_transient_failures_fall_back_to_cache():
    assert decide(Outcome.no_response, cache_available=True) == Action.serve_cache
    assert decide(Outcome.server_error, cache_available=True) == Action.serve_cache


def test_transient_failures_without_cache_are_unavailable():
    assert decide(Outcome.no_response, cache_available=False) == Action.unavailable
    assert decide(Outcome.server_error, cache_available=False) == Action.unavailable
