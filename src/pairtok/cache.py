"""Per-instance caches for BPE results."""

import threading
from abc import ABC, abstractmethod
from typing import Final, Literal, override

from .errors import OptionError

# =========================================================================================

# cache policies


class TokenCache(ABC):
    """
    Store of ``pre-token -> space-joined BPE symbols``.

    Entries are never invalidated: a tokenizer's merge table cannot change.
    """

    #: whether one instance may be used from several threads at once
    thread_safe: bool = False

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the cached result for ``key`` or ``None``."""

    @abstractmethod
    def put(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""

    def __len__(self) -> int:
        return 0


class LocalCache(TokenCache):
    """Unsynchronized dict cache for a tokenizer owned by a single thread."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    @override
    def get(self, key: str) -> str | None:
        return self._data.get(key)

    @override
    def put(self, key: str, value: str) -> None:
        self._data[key] = value

    @override
    def __len__(self) -> int:
        return len(self._data)


class LockedCache(TokenCache):
    """Dict cache guarded by a lock, safe to share between threads."""

    thread_safe = True

    def __init__(self) -> None:
        self._data: dict[str, str] = {}
        self._lock = threading.Lock()

    @override
    def get(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(key)

    @override
    def put(self, key: str, value: str) -> None:
        with self._lock:
            # first writer wins; racing writers computed the same value
            self._data.setdefault(key, value)

    @override
    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


class NullCache(TokenCache):
    """Cache that stores nothing; every call recomputes."""

    thread_safe = True

    @override
    def get(self, key: str) -> str | None:
        return None

    @override
    def put(self, key: str, value: str) -> None:
        return None


CachePolicy = Literal["locked", "local", "none"]

_CACHE_POLICIES: Final[dict[str, type[TokenCache]]] = {
    "locked": LockedCache,
    "local": LocalCache,
    "none": NullCache,
}


def list_cache_policies() -> list[str]:
    """Return available cache policy names."""
    return list(_CACHE_POLICIES.keys())


def get_cache(name: CachePolicy = "locked") -> TokenCache:
    """
    Create an empty cache by policy name.

    :param name: "locked" (shared, thread-safe), "local" (single thread) or "none".
    :raises OptionError: If name is unknown.
    """
    if name not in _CACHE_POLICIES:
        raise OptionError(
            "unknown cache policy",
            invalid_name=name,
            available=list_cache_policies(),
        )
    return _CACHE_POLICIES[name]()


__all__ = [
    "CachePolicy",
    "TokenCache",
    "LocalCache",
    "LockedCache",
    "NullCache",
    "list_cache_policies",
    "get_cache",
]
