import json
from datetime import datetime, timezone

import httpx
import pytest

from shared.breaker import CircuitBreakerOpen
from shared.errors import AuthorizationError, DomainConflictError, InfrastructureError, NotFoundError
from shared.rpc import call_with_breaker
from trainings_service.adapters.trainer_client import TrainerHttpClient
from trainings_service.adapters.users_client import UsersHttpClient

HOUR = datetime(2025, 12, 1, 13, tzinfo=timezone.utc)


class _BreakerStub:
    def __init__(self, open_=False):
        self.open_ = open_
        self.successes = 0
        self.failures = 0

    async def allow_request(self):
        if self.open_:
            raise CircuitBreakerOpen("Circuit breaker OPEN for test")

    async def record_success(self):
        self.successes += 1

    async def record_failure(self):
        self.failures += 1


def transport_returning(status_code, body=None, seen=None):
    def handler(request: httpx.Request):
        if seen is not None:
            seen.append(request)
        if body is None:
            return httpx.Response(status_code)
        return httpx.Response(status_code, json=body)
    return httpx.MockTransport(handler)


@pytest.mark.asyncio
async def test_trainer_client_sends_hour_payloads():
    seen = []
    client = TrainerHttpClient("http://trainer/", transport=transport_returning(204, seen=seen))

    await client.schedule_training(HOUR)
    await client.move_training(HOUR.replace(hour=14), HOUR)

    assert [r.url.path for r in seen] == ["/internal/hours/schedule-training", "/internal/hours/move-training"]
    assert json.loads(seen[0].content) == {"hour": "2025-12-01T13:00:00+00:00"}
    assert json.loads(seen[1].content) == {
        "new_time": "2025-12-01T14:00:00+00:00",
        "original_time": "2025-12-01T13:00:00+00:00",
    }


@pytest.mark.asyncio
async def test_users_client_sends_idempotency_key():
    seen = []
    client = UsersHttpClient("http://users", transport=transport_returning(200, {"uuid": "u", "balance": 4}, seen))

    await client.update_training_balance("attendee-1", -1, "t-1:schedule")

    assert seen[0].url.path == "/internal/users/attendee-1/balance"
    assert json.loads(seen[0].content) == {"amount_change": -1, "idempotency_key": "t-1:schedule"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status_code, kind",
    [
        (403, AuthorizationError),
        (404, NotFoundError),
        (409, DomainConflictError),
    ],
)
async def test_upstream_client_errors_keep_kind_and_slug(status_code, kind):
    breaker = _BreakerStub()
    transport = transport_returning(status_code, {"slug": "upstream-slug", "message": "nope"})

    with pytest.raises(kind) as exc:
        await call_with_breaker(breaker, "POST", "http://upstream/x", payload={}, transport=transport)

    assert exc.value.slug == "upstream-slug"
    assert exc.value.message == "nope"
    assert breaker.successes == 1
    assert breaker.failures == 0


@pytest.mark.asyncio
async def test_upstream_5xx_is_infrastructure():
    breaker = _BreakerStub()

    with pytest.raises(InfrastructureError):
        await call_with_breaker(breaker, "GET", "http://upstream/x", transport=transport_returning(500, {}))
    assert breaker.failures == 1


@pytest.mark.asyncio
async def test_transport_failures_are_infrastructure():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    def slow(request):
        raise httpx.ReadTimeout("timed out", request=request)

    breaker = _BreakerStub()
    with pytest.raises(InfrastructureError) as exc:
        await call_with_breaker(breaker, "GET", "http://upstream/x", transport=httpx.MockTransport(refuse))
    assert exc.value.slug == "upstream-unreachable"

    with pytest.raises(InfrastructureError) as exc:
        await call_with_breaker(breaker, "GET", "http://upstream/x", transport=httpx.MockTransport(slow))
    assert exc.value.slug == "upstream-timeout"
    assert breaker.failures == 2


@pytest.mark.asyncio
async def test_open_breaker_short_circuits():
    seen = []
    with pytest.raises(InfrastructureError) as exc:
        await call_with_breaker(
            _BreakerStub(open_=True), "GET", "http://upstream/x", transport=transport_returning(200, {}, seen)
        )
    assert exc.value.slug == "circuit-breaker-open"
    assert seen == []


@pytest.mark.asyncio
async def test_empty_success_body():
    assert await call_with_breaker(None, "POST", "http://upstream/x", transport=transport_returning(204)) == {}
