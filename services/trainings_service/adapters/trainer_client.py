from datetime import datetime

import httpx

from shared.breaker import CircuitBreaker
from shared.rpc import DEFAULT_TIMEOUT, call_with_breaker


class TrainerHttpClient:
    """Trainings-side view of the trainer context's hour endpoints."""

    def __init__(
        self,
        base_url: str,
        breaker: CircuitBreaker | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.breaker = breaker
        self.timeout = timeout
        self.transport = transport

    async def _post(self, path: str, payload: dict) -> None:
        await call_with_breaker(
            self.breaker,
            "POST",
            f"{self.base_url}{path}",
            payload=payload,
            timeout=self.timeout,
            transport=self.transport,
        )

    async def schedule_training(self, training_time: datetime) -> None:
        await self._post("/internal/hours/schedule-training", {"hour": training_time.isoformat()})

    async def cancel_training(self, training_time: datetime) -> None:
        await self._post("/internal/hours/cancel-training", {"hour": training_time.isoformat()})

    async def move_training(self, new_time: datetime, original_time: datetime) -> None:
        await self._post(
            "/internal/hours/move-training",
            {"new_time": new_time.isoformat(), "original_time": original_time.isoformat()},
        )

