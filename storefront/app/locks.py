"""Per-user serialization of cart read-modify-write cycles."""

from __future__ import annotations

import asyncio
import logging
import weakref
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from redis.exceptions import LockError, RedisError

from storefront.common.errors import ConflictError, DependencyError

from .metrics import CART_LOCK_TIMEOUTS_TOTAL

_LOGGER = logging.getLogger(__name__)


class CartLocks:
    """Mutual exclusion scope per user id.

    With a Redis client the lock is shared by every worker process; without one
    it is an ``asyncio.Lock`` local to this process. Callers must commit their
    write before leaving ``hold``.
    """

    def __init__(
        self,
        redis_client: Any | None = None,
        *,
        key_prefix: str = "storefront:cart-lock",
        timeout: float = 5.0,
        blocking_timeout: float = 2.0,
    ) -> None:
        self._redis = redis_client
        self._key_prefix = key_prefix
        self._timeout = timeout
        self._blocking_timeout = blocking_timeout
        self._local: weakref.WeakValueDictionary[int, asyncio.Lock] = weakref.WeakValueDictionary()

    @property
    def distributed(self) -> bool:
        return self._redis is not None

    @asynccontextmanager
    async def hold(self, user_id: int) -> AsyncIterator[None]:
        if self._redis is None:
            lock = self._local_lock(user_id)
            async with lock:
                yield
            return

        async with self._redis_lock(user_id):
            yield

    def _local_lock(self, user_id: int) -> asyncio.Lock:
        lock = self._local.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._local[user_id] = lock
        return lock

    @asynccontextmanager
    async def _redis_lock(self, user_id: int) -> AsyncIterator[None]:
        name = f"{self._key_prefix}:{user_id}"
        lock = self._redis.lock(name, timeout=self._timeout, blocking_timeout=self._blocking_timeout)
        try:
            acquired = await lock.acquire()
        except RedisError as exc:
            raise DependencyError("Cart lock unavailable") from exc
        if not acquired:
            CART_LOCK_TIMEOUTS_TOTAL.inc()
            _LOGGER.warning("Cart lock %s not acquired within %.1fs", name, self._blocking_timeout)
            raise ConflictError("Cart is busy, retry the request")
        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError:
                _LOGGER.warning("Cart lock %s expired before release", name)
            except RedisError:
                # The lock lapses on its own once ``timeout`` passes.
                _LOGGER.warning("Cart lock %s could not be released", name, exc_info=True)
