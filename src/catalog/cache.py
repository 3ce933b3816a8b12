"""In-process TTL cache for GET responses.

- Keyed by HTTP method + path and raw query string
- Entries expire after a per-route TTL; expired entries are dropped on read
- Cleared in full by every successful write (see routers/product.py)

The cache is best-effort: a failure inside it is logged and the request is
served uncached. One ResponseCache is owned by the app (``app.state``) so
tests can swap in a fresh instance.
"""

import functools
import threading
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, ParamSpec

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from catalog.logging import get_logger

logger = get_logger(__name__)

CACHE_HEADER = "X-Cache"


@dataclass(frozen=True, slots=True)
class CacheEntry:
    payload: Any
    expires_at: float


class ResponseCache:
    """Thread-safe mapping of cache key → CacheEntry.

    The lock only guards dict access; it is never held while a handler runs.
    There is no size limit: keys that are never requested again stay until
    the next invalidate().
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._store: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def now(self) -> float:
        return self._clock()

    def get(self, key: str) -> CacheEntry | None:
        """Return the live entry for ``key``, evicting it if it has expired."""
        now = self._clock()
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            if now >= entry.expires_at:
                del self._store[key]
                return None
            return entry

    def set(self, key: str, payload: Any, expires_at: float) -> None:
        with self._lock:
            self._store[key] = CacheEntry(payload=payload, expires_at=expires_at)

    def invalidate(self) -> None:
        """Drop every entry."""
        with self._lock:
            dropped = len(self._store)
            self._store.clear()
        logger.info("cache_invalidated", entries=dropped)

    async def get_or_compute(
        self,
        key: str,
        ttl: float,
        compute: Callable[[], Awaitable[Any]],
    ) -> tuple[Any, bool]:
        """Return ``(payload, hit)`` for ``key``, running ``compute`` on a miss.

        The expiry of a new entry is measured from when the miss was detected,
        not from when ``compute`` finished, so a slow compute shortens the
        window. Exceptions from ``compute`` propagate and nothing is stored.
        """
        try:
            entry = self.get(key)
        except Exception:
            logger.warning("cache_lookup_failed", key=key, exc_info=True)
            entry = None

        if entry is not None:
            logger.debug("cache_hit", key=key)
            return entry.payload, True

        logger.debug("cache_miss", key=key)
        expires_at = self.now() + ttl
        payload = await compute()

        try:
            self.set(key, payload, expires_at)
        except Exception:
            logger.warning("cache_store_failed", key=key, exc_info=True)

        return payload, False


def cache_key(request: Request) -> str:
    """``METHOD:/path?query`` with the query string exactly as the client sent it.

    Parameter order and casing are not normalized, so ``?a=1&b=2`` and
    ``?b=2&a=1`` are different keys.
    """
    key = f"{request.method}:{request.url.path}"
    if request.url.query:
        key = f"{key}?{request.url.query}"
    return key


def get_response_cache(request: Request) -> ResponseCache:
    """FastAPI dependency returning the app-owned ResponseCache."""
    return request.app.state.response_cache  # type: ignore[no-any-return]


P = ParamSpec("P")


def cached(ttl: float) -> Callable[[Callable[P, Awaitable[Any]]], Callable[P, Awaitable[Any]]]:
    """Cache a read endpoint's JSON body for ``ttl`` seconds.

    The decorated endpoint must take a ``request: Request`` parameter. Its
    return value is JSON-encoded once and stored; hits are served from the
    store without calling the endpoint. Non-GET requests always go straight
    to the endpoint.

    Usage:
        @router.get("/products/{product_id}")
        @cached(ttl=60)
        async def get_product(request: Request, product_id: str, db: DB) -> ProductDetail:
            ...
    """

    def decorator(handler: Callable[P, Awaitable[Any]]) -> Callable[P, Awaitable[Any]]:
        @functools.wraps(handler)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> Any:
            request: Request = kwargs["request"]  # type: ignore[assignment]

            if request.method != "GET":
                return await handler(*args, **kwargs)

            async def compute() -> Any:
                return jsonable_encoder(await handler(*args, **kwargs))

            payload, hit = await get_response_cache(request).get_or_compute(
                cache_key(request), ttl, compute
            )
            return JSONResponse(
                content=payload,
                headers={CACHE_HEADER: "HIT" if hit else "MISS"},
            )

        return wrapper

    return decorator
