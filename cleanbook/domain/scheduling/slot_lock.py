"""Per-(date, slot) mutual exclusion around the capacity check and the insert"""

import logging
from contextlib import contextmanager
from datetime import date
from threading import Lock
from typing import Callable, Optional

import redis

from ...config import SLOT_LOCK_MODE, SLOT_LOCK_TIMEOUT_SECONDS
from ...redis_client import get_redis_client

logger = logging.getLogger(__name__)

SLOT_LOCK_MODES = ("optimistic", "local", "redis")


class SlotLockError(RuntimeError):
    """Raised when the slot lock cannot be obtained; callers treat the slot as unavailable"""


class SlotGuard:
    """
    optimistic: no lock, accepts the read-then-insert race
    local: one threading.Lock per slot, exact within a single process
    redis: one Redis lock per slot, exact across workers
    """

    def __init__(
        self,
        mode: str = "optimistic",
        timeout: float = 10.0,
        redis_factory: Callable[[], redis.Redis] = get_redis_client,
    ):
        if mode not in SLOT_LOCK_MODES:
            raise ValueError(f"Unknown slot lock mode '{mode}', expected one of {SLOT_LOCK_MODES}")
        self.mode = mode
        self.timeout = timeout
        self._redis_factory = redis_factory
        self._local_locks: dict[str, Lock] = {}
        self._registry_lock = Lock()

    @staticmethod
    def slot_key(slot_date: date, slot_label: str) -> str:
        return f"slot_lock:{slot_date.isoformat()}:{slot_label}"

    def _local_lock(self, key: str) -> Lock:
        with self._registry_lock:
            return self._local_locks.setdefault(key, Lock())

    @contextmanager
    def hold(self, slot_date: date, slot_label: str):
        if self.mode == "optimistic":
            yield
            return

        key = self.slot_key(slot_date, slot_label)

        if self.mode == "local":
            lock = self._local_lock(key)
            if not lock.acquire(timeout=self.timeout):
                raise SlotLockError(f"Timed out waiting for {key}")
            try:
                yield
            finally:
                lock.release()
            return

        try:
            client = self._redis_factory()
            lock = client.lock(key, timeout=self.timeout, blocking_timeout=self.timeout)
            acquired = lock.acquire()
        except redis.RedisError as e:
            logger.error(f"❌ Slot lock unavailable for {key}: {e}")
            raise SlotLockError(f"Slot lock unavailable for {key}") from e
        if not acquired:
            raise SlotLockError(f"Timed out waiting for {key}")
        try:
            yield
        finally:
            try:
                lock.release()
            except redis.exceptions.LockError:
                # Lock expired while held; the next holder already owns it
                logger.warning(f"⚠️ Slot lock {key} expired before release")


_slot_guard: Optional[SlotGuard] = None


def get_slot_guard() -> SlotGuard:
    """Process-wide guard built from configuration"""
    global _slot_guard
    if _slot_guard is None:
        _slot_guard = SlotGuard(mode=SLOT_LOCK_MODE, timeout=SLOT_LOCK_TIMEOUT_SECONDS)
        logger.info(f"🔒 Slot capacity mode: {_slot_guard.mode}")
    return _slot_guard
