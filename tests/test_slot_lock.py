"""Tests for the per-slot guard."""

from datetime import date
from unittest.mock import MagicMock

import pytest
import redis

from cleanbook.domain.scheduling.slot_lock import SlotGuard, SlotLockError

DAY = date(2030, 6, 10)
SLOT = "9:00 AM - 11:00 AM"


def test_unknown_mode():
    with pytest.raises(ValueError):
        SlotGuard(mode="pessimistic")


def test_slot_key():
    assert SlotGuard.slot_key(DAY, SLOT) == "slot_lock:2030-06-10:9:00 AM - 11:00 AM"


def test_optimistic_never_blocks():
    guard = SlotGuard("optimistic")
    with guard.hold(DAY, SLOT):
        with guard.hold(DAY, SLOT):
            pass


class TestLocalMode:
    def test_same_slot_is_exclusive(self):
        guard = SlotGuard("local", timeout=0.05)
        with guard.hold(DAY, SLOT):
            with pytest.raises(SlotLockError):
                with guard.hold(DAY, SLOT):
                    pass

    def test_other_slot_is_independent(self):
        guard = SlotGuard("local", timeout=0.05)
        with guard.hold(DAY, SLOT):
            with guard.hold(DAY, "11:00 AM - 1:00 PM"):
                pass

    def test_released_after_error(self):
        guard = SlotGuard("local", timeout=0.05)
        with pytest.raises(RuntimeError):
            with guard.hold(DAY, SLOT):
                raise RuntimeError("insert failed")
        with guard.hold(DAY, SLOT):
            pass


class TestRedisMode:
    def test_acquire_and_release(self):
        client = MagicMock()
        client.lock.return_value.acquire.return_value = True
        guard = SlotGuard("redis", timeout=5, redis_factory=lambda: client)

        with guard.hold(DAY, SLOT):
            pass

        client.lock.assert_called_once_with(
            "slot_lock:2030-06-10:9:00 AM - 11:00 AM", timeout=5, blocking_timeout=5
        )
        client.lock.return_value.release.assert_called_once()

    def test_timeout(self):
        client = MagicMock()
        client.lock.return_value.acquire.return_value = False
        guard = SlotGuard("redis", redis_factory=lambda: client)
        with pytest.raises(SlotLockError):
            with guard.hold(DAY, SLOT):
                pass

    def test_redis_unreachable(self):
        def factory():
            raise redis.ConnectionError("connection refused")

        guard = SlotGuard("redis", redis_factory=factory)
        with pytest.raises(SlotLockError):
            with guard.hold(DAY, SLOT):
                pass

    def test_expired_lock_release_is_tolerated(self):
        client = MagicMock()
        client.lock.return_value.acquire.return_value = True
        client.lock.return_value.release.side_effect = redis.exceptions.LockError("expired")
        guard = SlotGuard("redis", redis_factory=lambda: client)
        with guard.hold(DAY, SLOT):
            pass
