"""Unit tests for the LinkRedisDAO

Test coverage includes:

1. Hash table primitives
   - Ensures reads go through the getter session and writes through the pusher session.
   - Ensures invalid types raise BeartypeCallHintParamViolation.
   - Confirms Redis errors raise DataStoreError with operation context.

2. Key mappings
   - Ensures inserted keys resolve to their encoded link.
   - Ensures both tables are written in a single transaction.
   - Confirms missing keys raise KeyNotFoundError.
   - Ensures key_exists() reflects inserted keys.

3. Deduplication index
   - Ensures lookup_hash() misses before and hits after insertion.
   - Ensures record_hash() writes the index only.

4. Export
   - Ensures every mapping is exported as "key,encoded link".
"""

from unittest.mock import call

import pytest
import redis
from beartype.roar import BeartypeCallHintParamViolation

from shortkey.models import Link
from shortkey.dao.exceptions import DataStoreError, KeyNotFoundError


KEY_TO_LINK = 'testapp:test:keytob64'
LINK_HASHES = 'testapp:test:linkhashes'


@pytest.fixture
def link() -> Link:
    return Link.from_raw('https://example.com/page')


# -------------------------------
# 1. Hash table primitives
# -------------------------------


def test_hash_get_uses_getter(dao, getter, pusher, redis_store):
    redis_store[KEY_TO_LINK] = {'abc': 'encoded'}

    assert dao.hash_get(KEY_TO_LINK, 'abc') == 'encoded'
    assert dao.hash_get(KEY_TO_LINK, 'xyz') is None
    getter.hget.assert_has_calls([call(KEY_TO_LINK, 'abc'), call(KEY_TO_LINK, 'xyz')])
    pusher.hget.assert_not_called()


def test_hash_set_uses_pusher(dao, getter, pusher, redis_store):
    dao.hash_set(KEY_TO_LINK, 'abc', 'encoded')

    pusher.hset.assert_called_once_with(KEY_TO_LINK, 'abc', 'encoded')
    getter.hset.assert_not_called()
    assert redis_store == {KEY_TO_LINK: {'abc': 'encoded'}}


def test_hash_get_with_invalid_type(dao):
    with pytest.raises(BeartypeCallHintParamViolation):
        dao.hash_get(KEY_TO_LINK, 42)


def test_hash_get_with_redis_connection_error(dao, getter):
    getter.hget.side_effect = redis.exceptions.ConnectionError('Connection refused')

    with pytest.raises(DataStoreError, match=r"hash_get\('testapp:test:keytob64', 'abc'\): can't connect to Redis at redis.test:6379/0"):
        dao.hash_get(KEY_TO_LINK, 'abc')


def test_hash_get_all_with_redis_error(dao, getter):
    getter.hgetall.side_effect = redis.exceptions.ResponseError('WRONGTYPE')

    with pytest.raises(DataStoreError, match='WRONGTYPE'):
        dao.hash_get_all(KEY_TO_LINK)


# -------------------------------
# 2. Key mappings
# -------------------------------


def test_insert_and_get_link(dao, link):
    assert dao.insert('abc', link) is dao
    assert dao.get_link('abc') == link.encoded


def test_insert_writes_both_tables_in_one_transaction(dao, pusher, link, redis_store):
    dao.insert('abc', link)

    pusher.pipeline.assert_called_once_with(transaction=True)
    pipe = pusher.pipeline.return_value
    assert pipe.hset.call_args_list == [
        call(KEY_TO_LINK, 'abc', link.encoded),
        call(LINK_HASHES, link.content_hash, 'abc'),
    ]
    pipe.execute.assert_called_once()
    assert redis_store == {
        KEY_TO_LINK: {'abc': link.encoded},
        LINK_HASHES: {link.content_hash: 'abc'},
    }


def test_insert_with_invalid_type(dao):
    with pytest.raises(BeartypeCallHintParamViolation):
        dao.insert('abc', 'https://example.com/notamodel')


def test_insert_with_redis_connection_error(dao, pusher, link, redis_store):
    pusher.pipeline.return_value.execute.side_effect = redis.exceptions.ConnectionError('Connection reset')

    with pytest.raises(DataStoreError, match="can't connect to Redis"):
        dao.insert('abc', link)
    assert redis_store == {}


def test_get_missing_link(dao):
    with pytest.raises(KeyNotFoundError, match='short url for abc not found'):
        dao.get_link('abc')


def test_key_exists(dao, link):
    assert dao.key_exists('abc') is False
    dao.insert('abc', link)
    assert dao.key_exists('abc') is True


def test_key_exists_with_redis_connection_error(dao, getter):
    getter.hget.side_effect = redis.exceptions.ConnectionError('Connection refused')

    with pytest.raises(DataStoreError):
        dao.key_exists('abc')


# -------------------------------
# 3. Deduplication index
# -------------------------------


def test_lookup_hash_miss_then_hit(dao, link):
    assert dao.lookup_hash(link.content_hash) is None
    dao.insert('abc', link)
    assert dao.lookup_hash(link.content_hash) == 'abc'


def test_record_hash_writes_index_only(dao, link, redis_store):
    dao.record_hash(link.content_hash, 'abc')

    assert redis_store == {LINK_HASHES: {link.content_hash: 'abc'}}


# -------------------------------
# 4. Export
# -------------------------------


def test_export(dao):
    first, second = Link.from_raw('https://example.com/1'), Link.from_raw('https://example.com/2')
    dao.insert('abc', first).insert('my-key', second)

    assert sorted(dao.export()) == sorted([f'abc,{first.encoded}', f'my-key,{second.encoded}'])


def test_export_empty_table(dao):
    assert dao.export() == []
