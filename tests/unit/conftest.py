import threading
from unittest.mock import MagicMock

import pytest
import redis

from shortkey.core.keys import KeyAssigner
from shortkey.core.links import LinkService
from shortkey.dao.cache import LinkCache
from shortkey.dao.redis import LinkRedisDAO
from shortkey.utils.config import CacheSettings, KeyGenSettings


def _hset(store: dict[str, dict[str, str]], table: str, field: str, value: str) -> int:
    created = int(field not in store.setdefault(table, {}))
    store[table][field] = value
    return created


def make_redis_client(store: dict[str, dict[str, str]]) -> MagicMock:
    """Mock a Redis client backed by a dict of hashes.

    Only the commands used by the link DAO are implemented: PING, HGET, HSET,
    HGETALL and a transactional pipeline of HSETs.
    """
    client = MagicMock(spec=redis.Redis)
    client.connection_pool = MagicMock(
        spec=redis.ConnectionPool,
        connection_kwargs={'host': 'redis.test', 'port': 6379, 'db': 0},
    )
    client.ping.return_value = True
    client.hget.side_effect = lambda table, field: store.get(table, {}).get(field)
    client.hset.side_effect = lambda table, field, value: _hset(store, table, field, value)
    client.hgetall.side_effect = lambda table: dict(store.get(table, {}))

    # MULTI queues are per thread so concurrent transactions do not mix
    local = threading.local()

    def queued() -> list:
        if not hasattr(local, 'commands'):
            local.commands = []
        return local.commands

    def execute():
        commands = queued()
        results = [_hset(store, *command) for command in commands]
        commands.clear()
        return results

    pipe = MagicMock(spec=redis.client.Pipeline)
    pipe.hset.side_effect = lambda table, field, value: queued().append((table, field, value))
    pipe.execute.side_effect = execute
    pipe.__enter__.return_value = pipe
    pipe.__exit__.return_value = None
    client.pipeline.return_value = pipe
    return client


@pytest.fixture
def app_prefix() -> str:
    return 'testapp:test'


@pytest.fixture
def redis_store() -> dict[str, dict[str, str]]:
    """Contents of the fake Redis server shared by all sessions of a test."""
    return {}


@pytest.fixture
def admin(redis_store) -> MagicMock:
    return make_redis_client(redis_store)


@pytest.fixture
def pusher(redis_store) -> MagicMock:
    return make_redis_client(redis_store)


@pytest.fixture
def getter(redis_store) -> MagicMock:
    return make_redis_client(redis_store)


@pytest.fixture
def dao(admin, pusher, getter, app_prefix) -> LinkRedisDAO:
    return LinkRedisDAO(admin=admin, pusher=pusher, getter=getter, prefix=app_prefix)


@pytest.fixture
def cache() -> LinkCache:
    return LinkCache(CacheSettings(ttl=60, sweep_interval=60, maxsize=128))


@pytest.fixture
def keygen_settings() -> KeyGenSettings:
    return KeyGenSettings()


@pytest.fixture
def assigner(dao, keygen_settings) -> KeyAssigner:
    return KeyAssigner(dao, keygen_settings)


@pytest.fixture
def service(dao, assigner, cache) -> LinkService:
    return LinkService(dao, assigner, cache)
