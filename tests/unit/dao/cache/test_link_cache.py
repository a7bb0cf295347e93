"""Unit tests for LinkCache.

Test coverage includes:
    1. Basic operations
       - Ensures set/get/contains/len/clear behave like a mapping.
       - Ensures replacing an entry refreshes its expiry.
    2. Expiry
       - Ensures entries expire after the TTL.
       - Ensures expire() removes stale entries and reports how many.
       - Ensures the size bound evicts old entries.
    3. Sweeper
       - Ensures start_sweeper() starts one daemon thread.
       - Ensures the sweep loop expires entries every interval.
"""

from unittest.mock import patch

import pytest
from freezegun import freeze_time

from shortkey.dao.cache import LinkCache
from shortkey.utils.config import CacheSettings


@pytest.fixture
def settings() -> CacheSettings:
    return CacheSettings(ttl=60, sweep_interval=30, maxsize=3)


# -------------------------------
# 1. Basic operations
# -------------------------------


def test_get_miss_returns_none(settings):
    assert LinkCache(settings).get('abc') is None


def test_set_get_contains_len_clear(settings):
    cache = LinkCache(settings)
    cache.set('abc', 'https://example.com')

    assert cache.get('abc') == 'https://example.com'
    assert 'abc' in cache
    assert len(cache) == 1

    cache.clear()
    assert 'abc' not in cache
    assert len(cache) == 0


def test_default_settings():
    cache = LinkCache()
    assert cache.settings == CacheSettings()
    assert cache.settings.ttl == 86_400
    assert cache.settings.sweep_interval == 3_600


def test_replacing_entry_refreshes_expiry(settings):
    with freeze_time('2025-10-15 12:00:00') as frozen:
        cache = LinkCache(settings)
        cache.set('abc', 'https://example.com/old')
        frozen.tick(50)
        cache.set('abc', 'https://example.com/new')
        frozen.tick(50)

        assert cache.get('abc') == 'https://example.com/new'


# -------------------------------
# 2. Expiry
# -------------------------------


def test_entries_expire_after_ttl(settings):
    with freeze_time('2025-10-15 12:00:00') as frozen:
        cache = LinkCache(settings)
        cache.set('abc', 'https://example.com')

        frozen.tick(59)
        assert cache.get('abc') == 'https://example.com'

        frozen.tick(2)
        assert cache.get('abc') is None
        assert 'abc' not in cache


def test_expire_removes_stale_entries(settings):
    with freeze_time('2025-10-15 12:00:00') as frozen:
        cache = LinkCache(settings)
        cache.set('abc', 'https://example.com/1')
        cache.set('xyz', 'https://example.com/2')
        frozen.tick(30)
        cache.set('fresh', 'https://example.com/3')
        frozen.tick(31)

        assert cache.expire() == 2
        assert len(cache) == 1
        assert cache.get('fresh') == 'https://example.com/3'


def test_maxsize_bounds_entries(settings):
    cache = LinkCache(settings)
    for i in range(5):
        cache.set(f'key{i}', f'https://example.com/{i}')

    assert len(cache) == 3
    assert cache.get('key4') == 'https://example.com/4'


# -------------------------------
# 3. Sweeper
# -------------------------------


def test_start_sweeper_is_idempotent(settings):
    cache = LinkCache(settings)
    with patch('shortkey.dao.cache.link_cache.threading.Thread') as thread_mock:
        first = cache.start_sweeper()
        second = cache.start_sweeper()

    assert first is second
    thread_mock.assert_called_once_with(target=cache._sweep_forever, name='link-cache-sweeper', daemon=True)
    thread_mock.return_value.start.assert_called_once()


def test_sweep_loop_expires_every_interval(settings):
    """Ensure the sweep loop sleeps for the interval before each expire() call."""
    cache = LinkCache(settings)

    class Stop(Exception):
        pass

    with (
        patch('shortkey.dao.cache.link_cache.time.sleep', side_effect=[None, None, Stop]) as sleep_mock,
        patch.object(cache, 'expire', return_value=0) as expire_mock,
    ):
        with pytest.raises(Stop):
            cache._sweep_forever()

    assert sleep_mock.call_count == 3
    sleep_mock.assert_called_with(30)
    assert expire_mock.call_count == 2
