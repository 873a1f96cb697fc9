import redis.asyncio as redis


def create_redis(redis_url: str | None):
    if not redis_url:
        return None
    return redis.from_url(redis_url, decode_responses=True)
