"""
Bounded client pool for the remote storage backend.

At most `max_size` clients exist at once. Clients are built lazily by the
factory and handed out LIFO so warm connections get reused. Callers block up
to `timeout` seconds for a free slot and get PoolTimeoutError after that.

Usage:
    pool = ClientPool(make_client, max_size=3, timeout=5)
    with pool.client() as c:
        c.head_object(...)
"""
import logging
import threading
from contextlib import contextmanager

logger = logging.getLogger('services.pool')


class PoolTimeoutError(Exception):
    """Raised when no pooled client became free within the timeout."""
    def __init__(self, name, timeout):
        self.name = name
        self.timeout = timeout
        super().__init__(f"Timed out after {timeout:g}s waiting for a '{name}' connection")


class ClientPool:
    """Semaphore-backed pool of reusable clients."""

    def __init__(self, factory, max_size=3, timeout=5.0, name='storage', closer=None):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.name = name
        self.max_size = max_size
        self.timeout = timeout
        self._factory = factory
        self._closer = closer
        self._slots = threading.BoundedSemaphore(max_size)
        self._lock = threading.Lock()
        self._idle = []
        self._created = 0

    @property
    def size(self):
        """Number of clients created and not yet closed."""
        with self._lock:
            return self._created

    @property
    def idle_count(self):
        with self._lock:
            return len(self._idle)

    def acquire(self, timeout=None):
        """Take a client, waiting for a free slot. Pair with release()."""
        wait = self.timeout if timeout is None else timeout
        if not self._slots.acquire(timeout=wait):
            logger.warning("Pool '%s' exhausted (%d clients busy)", self.name, self.max_size)
            raise PoolTimeoutError(self.name, wait)

        with self._lock:
            if self._idle:
                return self._idle.pop()

        try:
            client = self._factory()
        except Exception:
            self._slots.release()
            raise
        with self._lock:
            self._created += 1
        logger.debug("Pool '%s' opened client %d/%d", self.name, self._created, self.max_size)
        return client

    def release(self, client, discard=False):
        """Return a client to the pool; discard=True drops it instead."""
        if discard:
            self._close_one(client)
            with self._lock:
                self._created -= 1
        else:
            with self._lock:
                self._idle.append(client)
        self._slots.release()

    @contextmanager
    def client(self, timeout=None):
        """Context manager that always gives the client back."""
        c = self.acquire(timeout)
        try:
            yield c
        finally:
            self.release(c)

    def close(self):
        """Close every idle client. Clients still checked out are untouched."""
        with self._lock:
            idle, self._idle = self._idle, []
            self._created -= len(idle)
        for c in idle:
            self._close_one(c)

    def _close_one(self, client):
        if self._closer is None:
            return
        try:
            self._closer(client)
        except Exception as e:
            logger.warning("Error closing '%s' client: %s", self.name, e)
