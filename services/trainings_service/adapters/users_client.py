import httpx

from shared.breaker import CircuitBreaker
from shared.rpc import DEFAULT_TIMEOUT, call_with_breaker


class UsersHttpClient:
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

    async def update_training_balance(self, user_uuid: str, amount_change: int, idempotency_key: str | None = None) -> None:
        payload = {"amount_change": amount_change}
        if idempotency_key:
            payload["idempotency_key"] = idempotency_key

        await call_with_breaker(
            self.breaker,
            "POST",
            f"{self.base_url}/internal/users/{user_uuid}/balance",
            payload=payload,
            timeout=self.timeout,
            transport=self.transport,
        )
