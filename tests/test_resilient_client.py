import asyncio
import logging

import requests

from conftest import make_response
from reporank.http.retry import RATE_LIMITED, FetchFailed, RateLimitFlag, ResilientClient, is_ok


def _http_error(status: int) -> requests.HTTPError:
    return requests.HTTPError(f"{status} Error", response=make_response(status))


def _scripted(*steps):
    calls: list[int] = []

    async def _request():
        step = steps[len(calls)]
        calls.append(1)
        if isinstance(step, BaseException):
            raise step
        return step

    return _request, calls


def test_transient_errors_are_retried_with_doubling_backoff(no_sleep) -> None:
    client = ResilientClient(RateLimitFlag(), sleep=no_sleep)
    request, calls = _scripted(_http_error(503), _http_error(503), {"ok": True})

    outcome = asyncio.run(client.invoke(request))

    assert outcome == {"ok": True}
    assert len(calls) == 3
    assert no_sleep.waits == [0.5, 1.0]
    assert no_sleep.waits[1] == 2 * no_sleep.waits[0]


def test_retry_budget_exhaustion_is_a_generic_failure(no_sleep) -> None:
    client = ResilientClient(RateLimitFlag(), retries=3, backoff_ms=500, sleep=no_sleep)
    request, calls = _scripted(*[_http_error(429)] * 4)

    outcome = asyncio.run(client.invoke(request))

    assert isinstance(outcome, FetchFailed)
    assert outcome.status == 429
    assert outcome.message == "429 Error"
    assert len(calls) == 4
    assert no_sleep.waits == [0.5, 1.0, 2.0]


def test_forbidden_returns_sentinel_without_retrying(no_sleep, caplog) -> None:
    flag = RateLimitFlag()
    client = ResilientClient(flag, sleep=no_sleep)

    with caplog.at_level(logging.WARNING, logger="reporank.http.retry"):
        request, calls = _scripted(_http_error(403))
        first = asyncio.run(client.invoke(request))
        again, _ = _scripted(_http_error(403))
        second = asyncio.run(client.invoke(again))

    assert first is RATE_LIMITED
    assert second is RATE_LIMITED
    assert len(calls) == 1
    assert no_sleep.waits == []
    assert flag.is_set
    assert flag.trip() is False
    assert len([r for r in caplog.records if "403" in r.getMessage()]) == 1


def test_non_transient_errors_fail_immediately(no_sleep) -> None:
    client = ResilientClient(RateLimitFlag(), sleep=no_sleep)

    request, calls = _scripted(_http_error(404))
    outcome = asyncio.run(client.invoke(request))
    assert isinstance(outcome, FetchFailed)
    assert outcome.status == 404
    assert len(calls) == 1

    request, _ = _scripted(requests.ConnectionError())
    outcome = asyncio.run(client.invoke(request))
    assert outcome == FetchFailed(message="Request failed", status=None)
    assert no_sleep.waits == []


def test_outcome_helpers() -> None:
    assert is_ok({"items": []})
    assert is_ok("")
    assert not is_ok(RATE_LIMITED)
    assert not is_ok(FetchFailed("boom"))
    assert repr(RATE_LIMITED) == "RATE_LIMITED"


def test_separate_flags_are_isolated(no_sleep) -> None:
    a, b = RateLimitFlag(), RateLimitFlag()
    request, _ = _scripted(_http_error(403))
    asyncio.run(ResilientClient(a, sleep=no_sleep).invoke(request))
    assert a.is_set
    assert not b.is_set
