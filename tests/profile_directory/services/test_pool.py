"""Tests for profile_directory.services.pool -- bounded client pool."""
import threading

import pytest
from unittest.mock import MagicMock

from profile_directory.services.pool import ClientPool, PoolTimeoutError


@pytest.fixture
def factory():
    """Factory that hands out numbered sentinel objects."""
    created = []

    def _make():
        client = object()
        created.append(client)
        return client
    _make.created = created
    return _make


class TestClientPool:

    def test_clients_created_lazily(self, factory):
        pool = ClientPool(factory, max_size=3)
        assert pool.size == 0
        pool.acquire()
        assert pool.size == 1

    def test_released_client_is_reused(self, factory):
        pool = ClientPool(factory, max_size=3)
        c = pool.acquire()
        pool.release(c)
        assert pool.acquire() is c
        assert len(factory.created) == 1

    def test_lifo_reuse(self, factory):
        pool = ClientPool(factory, max_size=3)
        a, b = pool.acquire(), pool.acquire()
        pool.release(a)
        pool.release(b)
        assert pool.acquire() is b

    def test_exhausted_pool_times_out(self, factory):
        pool = ClientPool(factory, max_size=1, timeout=0.01)
        pool.acquire()
        with pytest.raises(PoolTimeoutError) as exc:
            pool.acquire()
        assert exc.value.name == 'storage'
        assert exc.value.timeout == 0.01

    def test_per_call_timeout_overrides_default(self, factory):
        pool = ClientPool(factory, max_size=1, timeout=60)
        pool.acquire()
        with pytest.raises(PoolTimeoutError):
            pool.acquire(timeout=0.01)

    def test_never_more_than_max_size(self, factory):
        pool = ClientPool(factory, max_size=2, timeout=0.01)
        pool.acquire()
        pool.acquire()
        with pytest.raises(PoolTimeoutError):
            pool.acquire()
        assert pool.size == 2

    def test_context_manager_releases_on_error(self, factory):
        pool = ClientPool(factory, max_size=1, timeout=0.01)
        with pytest.raises(RuntimeError):
            with pool.client():
                raise RuntimeError('boom')
        with pool.client() as c:
            assert c is factory.created[0]

    def test_waiter_gets_released_client(self, factory):
        pool = ClientPool(factory, max_size=1, timeout=2)
        held = pool.acquire()
        got = []

        def waiter():
            with pool.client() as c:
                got.append(c)

        t = threading.Thread(target=waiter)
        t.start()
        pool.release(held)
        t.join(timeout=2)
        assert got == [held]

    def test_discard_closes_and_frees_slot(self, factory):
        closer = MagicMock()
        pool = ClientPool(factory, max_size=1, timeout=0.01, closer=closer)
        c = pool.acquire()
        pool.release(c, discard=True)
        closer.assert_called_once_with(c)
        assert pool.size == 0
        assert pool.acquire() is not c

    def test_factory_failure_frees_slot(self):
        calls = {'n': 0}

        def flaky():
            calls['n'] += 1
            if calls['n'] == 1:
                raise ConnectionError('no route')
            return 'client'

        pool = ClientPool(flaky, max_size=1, timeout=0.01)
        with pytest.raises(ConnectionError):
            pool.acquire()
        assert pool.acquire() == 'client'

    def test_close_closes_idle_clients(self, factory):
        closer = MagicMock()
        pool = ClientPool(factory, max_size=2, closer=closer)
        a, b = pool.acquire(), pool.acquire()
        pool.release(a)
        pool.close()
        closer.assert_called_once_with(a)
        assert pool.idle_count == 0
        assert pool.size == 1  # b still checked out

    def test_closer_errors_are_logged_not_raised(self, factory):
        pool = ClientPool(factory, max_size=1, closer=MagicMock(side_effect=RuntimeError('x')))
        pool.release(pool.acquire())
        pool.close()

    def test_invalid_max_size(self, factory):
        with pytest.raises(ValueError):
            ClientPool(factory, max_size=0)
