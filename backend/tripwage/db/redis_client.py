from __future__ import annotations

import redis


class RedisDatabase:
    """Connection and key namespace for backend A."""

    def __init__(self, client: redis.Redis, *, prefix: str = "tripwage"):
        self.client = client
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str, *, prefix: str = "tripwage") -> "RedisDatabase":
        client = redis.from_url(
            url,
            decode_responses=True,  # always return str, not bytes
            socket_connect_timeout=3,
            socket_timeout=2,
            retry_on_timeout=True,
        )
        return cls(client, prefix=prefix)

    def key(self, *parts: str) -> str:
        return ":".join((self.prefix, *parts))

    def ping(self) -> None:
        self.client.ping()

    def close(self) -> None:
        self.client.close()
