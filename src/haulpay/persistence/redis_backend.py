"""Redis key-value backend implementing IKeyValueBackend.

Holds the saved fuel import field map when ``HAULPAY_FIELD_MAP_BACKEND=redis``
so several API workers share one mapping. Values are opaque text; callers
own the encoding.
"""

from __future__ import annotations

from typing import Callable, TypeVar

import redis

from haulpay.core.config import RedisConfig
from haulpay.core.exceptions import CacheError

_T = TypeVar("_T")


class RedisKeyValueBackend:
    """Production IKeyValueBackend backed by Redis string keys."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        *,
        socket_timeout: float | None = None,
    ) -> None:
        self._client = redis.Redis(
            host=host, port=port, db=db, socket_timeout=socket_timeout, decode_responses=True,
        )

    @classmethod
    def from_config(cls, config: RedisConfig) -> RedisKeyValueBackend:
        return cls(
            host=config.host, port=config.port, db=config.db, socket_timeout=config.socket_timeout,
        )

    def _call(self, command: str, key: str, operation: Callable[[], _T]) -> _T:
        try:
            return operation()
        except Exception as exc:
            raise CacheError(f"Redis {command} failed for key={key!r}: {exc}") from exc

    def get(self, key: str) -> str | None:
        return self._call("GET", key, lambda: self._client.get(key))

    def set(self, key: str, value: str) -> None:
        self._call("SET", key, lambda: self._client.set(key, value))

    def delete(self, key: str) -> None:
        self._call("DELETE", key, lambda: self._client.delete(key))
