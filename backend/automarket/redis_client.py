# backend/automarket/redis_client.py

from redis import Redis

REDIS_SOCKET_TIMEOUT = 2.0


def build_redis(redis_url: str) -> Redis:
    return Redis.from_url(
        redis_url,
        decode_responses=True,
        socket_timeout=REDIS_SOCKET_TIMEOUT,
        socket_connect_timeout=REDIS_SOCKET_TIMEOUT,
    )
