"""Remote key/value cache.

Keys are namespaced with `CACHE_PREFIX` (`prefix:key`) when a prefix is
configured. Transport and API errors propagate to the caller.
"""

from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, TypeVar

from ..constants import API_ENDPOINTS
from ..schema import CacheStats
from .base import ServiceClient

_ENDPOINTS = API_ENDPOINTS["CACHE"]

T = TypeVar("T")


class CacheClient(ServiceClient):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.prefix = self.settings.CACHE_PREFIX or ""

    def build_key(self, key: str) -> str:
        return f"{self.prefix}:{key}" if self.prefix else key

    def _operation(self, operation: str, **payload: Any) -> Dict[str, Any]:
        body = self._http.post(_ENDPOINTS["OPERATION"], json={"operation": operation, **payload})
        return self._unwrap(body, operation) or {}

    def _invalidate(self, operation: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
        return self._unwrap(self._http.delete(_ENDPOINTS["INVALIDATE"], json=dict(payload)), operation) or {}

    def get(self, key: str, default: Any = None) -> Any:
        full_key = self.build_key(key)
        self.logger.debug("Cache get %s", full_key)
        value = self._operation("get", key=full_key).get("value")
        return default if value is None else value

    def set(self, key: str, value: Any, ttl: Optional[int] = None, tags: Optional[Sequence[str]] = None) -> bool:
        """Store `value`; `ttl` defaults to `CACHE_TTL` and 0 means no expiry."""
        full_key = self.build_key(key)
        ttl = self.settings.CACHE_TTL if ttl is None else ttl
        payload: Dict[str, Any] = {"key": full_key, "value": value, "ttl": ttl}
        if tags:
            payload["tags"] = list(tags)
        self.logger.debug("Cache set %s (ttl=%s)", full_key, ttl)
        result = self._operation("set", **payload)
        return result.get("success", True) is True

    def delete(self, key: str) -> bool:
        return self.delete_many([key]) > 0

    def delete_many(self, keys: Sequence[str]) -> int:
        result = self._invalidate("delete", {"keys": [self.build_key(k) for k in keys]})
        return int(result.get("deleted") or 0)

    def exists(self, key: str) -> bool:
        return self._operation("exists", key=self.build_key(key)).get("exists") is True

    def ttl(self, key: str) -> int:
        """Remaining lifetime in seconds; -1 when the key has none or does not exist."""
        value = self._operation("ttl", key=self.build_key(key)).get("ttl")
        return -1 if value is None else int(value)

    def expire(self, key: str, seconds: int) -> bool:
        return self._operation("expire", key=self.build_key(key), ttl=seconds).get("success", True) is True

    def mget(self, keys: Sequence[str]) -> List[Any]:
        values = self._operation("mget", keys=[self.build_key(k) for k in keys]).get("values")
        return list(values) if values is not None else [None] * len(keys)

    def mset(self, items: Mapping[str, Any], ttl: Optional[int] = None) -> bool:
        payload = [{"key": self.build_key(k), "value": v} for k, v in items.items()]
        ttl = self.settings.CACHE_TTL if ttl is None else ttl
        return self._operation("mset", items=payload, ttl=ttl).get("success", True) is True

    def incr(self, key: str, by: int = 1) -> int:
        return int(self._operation("incr", key=self.build_key(key), value=by).get("value") or 0)

    def decr(self, key: str, by: int = 1) -> int:
        return int(self._operation("decr", key=self.build_key(key), value=by).get("value") or 0)

    def sadd(self, key: str, members: Sequence[Any]) -> int:
        return int(self._operation("sadd", key=self.build_key(key), members=list(members)).get("added") or 0)

    def smembers(self, key: str) -> List[Any]:
        return list(self._operation("smembers", key=self.build_key(key)).get("members") or [])

    def invalidate_by_pattern(self, pattern: str) -> int:
        result = self._invalidate("invalidate_by_pattern", {"pattern": self.build_key(pattern)})
        return int(result.get("deleted") or 0)

    def invalidate_by_tags(self, tags: Sequence[str]) -> int:
        result = self._invalidate("invalidate_by_tags", {"tags": list(tags)})
        return int(result.get("deleted") or 0)

    def clear(self) -> bool:
        return self._invalidate("clear", {"all": True}).get("success", True) is True

    def stats(self) -> CacheStats:
        body = self._unwrap(self._http.get(_ENDPOINTS["STATS"]), "stats") or {}
        return CacheStats.model_validate(body)

    def remember(self, key: str, ttl: Optional[int], callback: Callable[[], T]) -> T:
        """Return the cached value for `key`, computing and storing it on a miss."""
        cached = self.get(key)
        if cached is not None:
            return cached
        value = callback()
        self.set(key, value, ttl=ttl)
        return value

    def forever(self, key: str, value: Any) -> bool:
        return self.set(key, value, ttl=0)
