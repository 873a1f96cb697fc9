DEFAULT_TTL_SECONDS = 86400


class IdempotencyStore:
    """Remembers processed keys in Redis so retried RPCs are applied once."""

    def __init__(self, redis_client, namespace: str, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        self.redis = redis_client
        self.namespace = namespace
        self.ttl_seconds = ttl_seconds

    def _key(self, key: str) -> str:
        return f"{self.namespace}:processed:{key}"

    async def claim(self, key: str) -> bool:
        """Atomically takes the key. False when another caller already holds it."""
        return bool(await self.redis.set(self._key(key), "1", nx=True, ex=self.ttl_seconds))

    async def release(self, key: str):
        await self.redis.delete(self._key(key))
