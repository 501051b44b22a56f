"""
Per-staff booking locks.

Check-and-insert for one staff member runs while holding that staff
member's lock, so two requests for overlapping times are serialized while
bookings for different staff proceed in parallel. Waiting is bounded; a
timeout surfaces as the retryable BookingLockTimeout.

Backends:
- memory: one ``threading.Lock`` per staff member, for a single process
- redis: ``redis`` distributed locks, for several processes
"""

import logging
import weakref
from contextlib import contextmanager
from threading import Lock
from typing import Iterator, Optional

import redis
from redis.exceptions import LockError

from ...config import (
    BOOKING_LOCK_BACKEND,
    BOOKING_LOCK_TIMEOUT_SECONDS,
    BOOKING_LOCK_TTL_SECONDS,
    REDIS_URL,
)
from ...errors import BookingLockTimeout

logger = logging.getLogger(__name__)


def _lock_key(tenant_id: str, staff_id: str) -> str:
    return f"booking:staff:{tenant_id}:{staff_id}"


class MemoryStaffLocks:
    """
    In-process registry of one lock per staff member.

    Entries are weak: a lock lives while some request holds or waits on
    it, so the registry stays as small as the set of busy staff members.
    """

    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[str, Lock]" = weakref.WeakValueDictionary()
        self._registry_lock = Lock()

    def _lock_for(self, key: str) -> Lock:
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = Lock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, tenant_id: str, staff_id: str, timeout: float = BOOKING_LOCK_TIMEOUT_SECONDS) -> Iterator[None]:
        key = _lock_key(tenant_id, staff_id)
        lock = self._lock_for(key)
        if not lock.acquire(timeout=timeout):
            logger.warning(f"⏳ Booking lock timeout after {timeout}s for {key}")
            raise BookingLockTimeout()
        try:
            yield
        finally:
            lock.release()


class RedisStaffLocks:
    """Distributed per-staff locks shared by every API process"""

    def __init__(self, client: redis.Redis, ttl_seconds: int = BOOKING_LOCK_TTL_SECONDS):
        self.client = client
        self.ttl_seconds = ttl_seconds

    @contextmanager
    def hold(self, tenant_id: str, staff_id: str, timeout: float = BOOKING_LOCK_TIMEOUT_SECONDS) -> Iterator[None]:
        key = _lock_key(tenant_id, staff_id)
        lock = self.client.lock(key, timeout=self.ttl_seconds, blocking_timeout=timeout)
        if not lock.acquire():
            logger.warning(f"⏳ Redis booking lock timeout after {timeout}s for {key}")
            raise BookingLockTimeout()
        try:
            yield
        finally:
            try:
                lock.release()
            except LockError as e:
                # TTL expired while held; the database row lock still covered the insert
                logger.warning(f"⚠️ Redis booking lock for {key} expired before release: {e}")


def get_redis_client(url: Optional[str] = REDIS_URL) -> redis.Redis:
    """Create a Redis client for booking locks"""
    if not url:
        raise RuntimeError("REDIS_URL must be set when BOOKING_LOCK_BACKEND=redis")

    # Mask password in URL for logging
    if "@" in url:
        url_parts = url.split("@")
        protocol = url_parts[0].split(":")[0]
        masked_url = f"{protocol}:****@{url_parts[1]}"
    else:
        masked_url = "****"
    logger.info(f"📡 Using Redis URL connection for booking locks: {masked_url}")

    try:
        client = redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=15,
            socket_timeout=30,
            retry_on_timeout=True,
            health_check_interval=30,
            max_connections=20,
        )
        client.ping()
        logger.info("Redis connected successfully via URL")
        return client
    except Exception as e:
        logger.error(f"❌ Failed to connect to Redis via URL: {str(e)}")
        raise


_staff_locks = None
_staff_locks_guard = Lock()


def get_staff_locks():
    """Process-wide lock backend selected by BOOKING_LOCK_BACKEND"""
    global _staff_locks

    with _staff_locks_guard:
        if _staff_locks is None:
            if BOOKING_LOCK_BACKEND == "redis":
                _staff_locks = RedisStaffLocks(get_redis_client())
            else:
                _staff_locks = MemoryStaffLocks()
            logger.info(f"🔒 Booking lock backend: {type(_staff_locks).__name__}")
        return _staff_locks
