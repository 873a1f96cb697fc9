import time
from enum import Enum


class CircuitBreakerOpen(Exception):
    pass


class BreakerState(str, Enum):
    CLOSED = "CLOSED"
    OPEN = "OPEN"
    HALF_OPEN = "HALF_OPEN"


class CircuitBreaker:
    """
    Circuit breaker around calls into another context, kept in Redis so every
    replica of the caller sees the same state.

    CLOSED counts failures inside a rolling window and opens once the
    threshold is reached. OPEN rejects calls until reset_timeout_seconds have
    passed, then lets exactly one trial through (HALF_OPEN). The trial's
    outcome closes or reopens the breaker. A trial that never reports back
    frees its slot after reset_timeout_seconds.
    """

    def __init__(
        self,
        redis_client,
        name: str,
        failure_threshold: int = 5,
        reset_timeout_seconds: int = 15,
        failure_window_seconds: int = 60,
    ):
        self.redis = redis_client
        self.name = name
        self.failure_threshold = failure_threshold
        self.reset_timeout_seconds = reset_timeout_seconds
        self.failure_window_seconds = failure_window_seconds

        prefix = f"breaker:{name}"
        self._state_key = f"{prefix}:state"
        self._failures_key = f"{prefix}:failures"
        self._opened_at_key = f"{prefix}:opened_at"
        self._trial_key = f"{prefix}:trial"

    async def state(self) -> BreakerState:
        raw = await self.redis.get(self._state_key)
        return BreakerState(raw) if raw else BreakerState.CLOSED

    async def _claim_trial(self) -> bool:
        return bool(await self.redis.set(self._trial_key, "1", nx=True, ex=self.reset_timeout_seconds))

    async def allow_request(self) -> None:
        state = await self.state()
        if state == BreakerState.CLOSED:
            return

        if state == BreakerState.OPEN:
            opened_at = await self.redis.get(self._opened_at_key)
            if opened_at is None:
                await self.close()
                return
            if time.time() - float(opened_at) < self.reset_timeout_seconds:
                raise CircuitBreakerOpen(f"circuit breaker for {self.name} is open")

        if not await self._claim_trial():
            raise CircuitBreakerOpen(f"circuit breaker for {self.name} has a trial request in flight")
        await self.redis.set(self._state_key, BreakerState.HALF_OPEN.value)

    async def record_success(self) -> None:
        if await self.state() != BreakerState.CLOSED:
            await self.close()
            return
        await self.redis.delete(self._failures_key)

    async def record_failure(self) -> None:
        if await self.state() == BreakerState.HALF_OPEN:
            await self.open()
            return

        pipe = self.redis.pipeline()
        pipe.incr(self._failures_key)
        pipe.expire(self._failures_key, self.failure_window_seconds)
        failures, _ = await pipe.execute()

        if failures >= self.failure_threshold:
            await self.open()

    async def open(self) -> None:
        ttl = self.reset_timeout_seconds + 30
        pipe = self.redis.pipeline()
        pipe.set(self._state_key, BreakerState.OPEN.value, ex=ttl)
        pipe.set(self._opened_at_key, str(time.time()), ex=ttl)
        pipe.delete(self._failures_key, self._trial_key)
        await pipe.execute()

    async def close(self) -> None:
        pipe = self.redis.pipeline()
        pipe.set(self._state_key, BreakerState.CLOSED.value, ex=3600)
        pipe.delete(self._failures_key, self._opened_at_key, self._trial_key)
        await pipe.execute()
